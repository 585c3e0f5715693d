"""
Resolucion de la identidad del cliente.

La cuota diaria y el limite de rafaga cuentan envios "por cliente". Como no
hay autenticacion, identificamos al cliente por su direccion IP:

1. Si la peticion trae el header X-Forwarded-For (la app corre detras de un
   proxy o load balancer), usamos la PRIMERA entrada de la lista, que es la
   IP original del cliente.
2. Si no, usamos la direccion de la conexion directa.
3. Si tampoco hay, usamos un valor fijo ("unknown").

ADVERTENCIA: esto es una heuristica, no un mecanismo de identificacion
seguro. Cualquier cliente puede enviar su propio X-Forwarded-For y asi
obtener cuota "nueva" a voluntad, salvo que el proxy de borde (de
confianza) sobreescriba ese header. Es una debilidad conocida y aceptada.

La funcion `resolve_identity` es pura: con los mismos valores de entrada
siempre retorna la misma identidad, de modo que todas las lecturas del
contador dentro de una misma peticion ven la misma clave.
"""

from starlette.requests import Request

FALLBACK_IDENTITY = "unknown"

FORWARDED_FOR_HEADER = "x-forwarded-for"


def resolve_identity(forwarded_for: str | None, remote_addr: str | None) -> str:
    """
    Calcula la identidad a partir del header de reenvio y la IP directa.

    Ejemplos:
        >>> resolve_identity("1.2.3.4, 10.0.0.1", "10.0.0.2")
        '1.2.3.4'
        >>> resolve_identity(None, "10.0.0.2")
        '10.0.0.2'
        >>> resolve_identity(None, None)
        'unknown'
    """
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    if remote_addr and remote_addr.strip():
        return remote_addr.strip()

    return FALLBACK_IDENTITY


def client_identity(request: Request) -> str:
    """
    Adaptador para Starlette: extrae los metadatos de la peticion y delega
    en `resolve_identity`. Tambien es la `key_func` del limiter de slowapi.
    """
    remote_addr = request.client.host if request.client else None
    return resolve_identity(request.headers.get(FORWARDED_FOR_HEADER), remote_addr)
