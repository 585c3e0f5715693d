"""
Modulo de esquemas (schemas) de datos de la API JSON.

La parte principal del servicio responde HTML (formulario y pagina de
agradecimiento), pero los endpoints auxiliares bajo /api/ responden JSON.
Sus estructuras se definen aqui con Pydantic para que FastAPI las valide,
las serialice y las documente en Swagger UI (/docs).
"""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Respuesta del health check: {"status": "ok"}."""
    status: str


class QuotaStatusResponse(BaseModel):
    """
    Estado de la cuota diaria del cliente que hace la peticion.

    Atributos:
        limit (int): Maximo de fotos por dia.
        used (int): Fotos ya aceptadas hoy.
        remaining (int): Fotos que aun puede enviar hoy (nunca negativo).
        day (str): Dia UTC al que corresponde el contador (YYYY-MM-DD).
    """
    limit: int
    used: int
    remaining: int
    day: str
