"""
Contador de cuota diaria por cliente.

Cada cliente (identidad, ver `identity.py`) puede enviar como maximo
`DAILY_QUOTA` fotos por dia calendario UTC. El contador:

- Se LEE antes de cada decision de la compuerta.
- Solo se INCREMENTA despues de una subida externa confirmada.
- Nunca se decrementa.

Clave de almacenamiento:
    quota:{identidad}:{YYYY-MM-DD}

Como el dia forma parte de la clave, un envio justo antes y otro justo
despues de medianoche (UTC) caen en contadores distintos; no hace falta
"resetear" nada.

Patron de diseno: Inyeccion de dependencias
-------------------------------------------
`QuotaTracker` recibe el almacenamiento (`store`) y el reloj (`clock`) por
constructor. En produccion el reloj es la hora UTC real y el almacenamiento
es la libreria "limits" (la misma que usa slowapi por debajo). En tests se
pasa un reloj fijo y un almacenamiento aislado por test.

Con "limits" el backend se elige con una URI:
    memory://               -> diccionario en proceso (default)
    redis://localhost:6379  -> compartido entre varias instancias
"""

from datetime import datetime, timezone
from typing import Callable, Protocol

from limits.storage import storage_from_string

from photodrop.config import settings

# Las claves viven dos dias: suficiente para cubrir el dia en curso sin
# dejar basura eterna en un almacenamiento compartido.
KEY_TTL_SECONDS = 2 * 24 * 60 * 60


class QuotaStore(Protocol):
    """Interfaz minima del almacenamiento de contadores."""

    def get(self, key: str) -> int: ...

    def incr(self, key: str) -> int: ...


class LimitsQuotaStore:
    """
    `QuotaStore` respaldado por un storage de la libreria "limits".

    Parametros:
        storage: Storage de limits ya construido. Si es None se crea uno a
            partir de `settings.QUOTA_STORAGE_URI`.
        ttl (int): Segundos de vida de cada clave desde su creacion.
    """

    def __init__(self, storage=None, ttl: int = KEY_TTL_SECONDS):
        self.storage = storage if storage is not None else storage_from_string(settings.QUOTA_STORAGE_URI)
        self.ttl = ttl

    def get(self, key: str) -> int:
        # limits retorna 0 para claves inexistentes o expiradas.
        return int(self.storage.get(key))

    def incr(self, key: str) -> int:
        return int(self.storage.incr(key, self.ttl))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class QuotaTracker:
    """
    Lleva la cuenta de fotos aceptadas por identidad y por dia UTC.

    Atributos:
        store (QuotaStore): Donde se guardan los contadores.
        limit (int): Techo de fotos por dia.
        clock (Callable[[], datetime]): Fuente de la hora actual.
    """

    def __init__(
        self,
        store: QuotaStore | None = None,
        limit: int = settings.DAILY_QUOTA,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store if store is not None else LimitsQuotaStore()
        self.limit = limit
        self.clock = clock

    def today(self) -> str:
        """Dia UTC actual como cadena de 10 caracteres (YYYY-MM-DD)."""
        now = self.clock()
        if now.tzinfo is not None:
            now = now.astimezone(timezone.utc)
        return now.date().isoformat()

    @staticmethod
    def key_for(identity: str, day: str) -> str:
        return f"quota:{identity}:{day}"

    def current_count(self, identity: str, day: str | None = None) -> int:
        """Fotos aceptadas para `identity` en `day` (hoy si se omite); 0 si no hay."""
        return self.store.get(self.key_for(identity, day or self.today()))

    def increment(self, identity: str, day: str | None = None) -> int:
        """Suma una foto aceptada; crea el contador en 1 si no existia."""
        return self.store.incr(self.key_for(identity, day or self.today()))

    def remaining(self, identity: str, day: str | None = None) -> int:
        return max(self.limit - self.current_count(identity, day), 0)

    def is_exhausted(self, identity: str, day: str | None = None) -> bool:
        return self.current_count(identity, day) >= self.limit
