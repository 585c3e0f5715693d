"""
Punto de entrada principal de la aplicacion FastAPI.

Aqui se:
1. Configura el logging.
2. Crea la instancia de la aplicacion FastAPI.
3. Configura el rate limiter de rafagas (SlowAPI) y su respuesta 429.
4. Registra las rutas (formulario, subida, cuota).
5. Define el endpoint de health check.

Arquitectura de la aplicacion:
------------------------------
    main.py (punto de entrada)
        |
        +-- routes/         (Controladores: reciben HTTP requests)
        |    +-- pages.py       GET  /
        |    +-- upload.py      POST /upload
        |    +-- quota.py       GET  /api/quota
        |
        +-- services/       (Logica de negocio)
        |    +-- identity.py    quien es el cliente
        |    +-- quota.py       cuantas fotos lleva hoy
        |    +-- intake.py      recepcion multipart en streaming
        |    +-- validator.py   nombre, tipo y tamano de la foto
        |    +-- naming.py      identificador "{nombre}_{timestamp}"
        |    +-- media.py       host de medios externo (S3)
        |    +-- gate.py        orquesta todo lo anterior
        |
        +-- models/         (Estructuras de datos)
        +-- views.py        (Paginas HTML)
        +-- config.py       (Configuracion centralizada)
        +-- limiter.py      (Rate limiting de rafagas)

El flujo de un envio es:
    Cliente -> Rate limiter -> Router -> Cuota -> Intake -> Compuerta -> HTML
"""

import logging

import uvicorn
from fastapi import FastAPI
from fastapi.responses import HTMLResponse
from slowapi.errors import RateLimitExceeded
from starlette.requests import Request

from photodrop.config import settings
from photodrop.limiter import limiter
from photodrop.logging_config import setup_logger
from photodrop.models.schemas import HealthResponse
from photodrop.routes.pages import router as pages_router
from photodrop.routes.quota import router as quota_router
from photodrop.routes.upload import router as upload_router
from photodrop.services.identity import client_identity
from photodrop.views import render_form

setup_logger()
logger = logging.getLogger(__name__)

# ---------- Creacion de la aplicacion ----------

app = FastAPI(title="PhotoDrop")

# ---------- Rate limiter de rafagas ----------

# SlowAPI busca el limiter en app.state.
app.state.limiter = limiter

BURST_MESSAGE = "Trop de tentatives. Merci de patienter une minute avant de réessayer."


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> HTMLResponse:
    """
    Respuesta 429 en HTML (el handler por defecto de SlowAPI responde JSON,
    que no tiene sentido para un formulario).
    """
    logger.warning("Burst limit hit by %s: %s", client_identity(request), exc.detail)
    return HTMLResponse(render_form(error=BURST_MESSAGE), status_code=429)


app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


# ---------- Health Check ----------

@app.get("/api/health", response_model=HealthResponse)
async def health_check():
    """
    Endpoint de verificacion de salud del servidor.

    Retorna:
        dict: {"status": "ok"} si el servidor esta funcionando correctamente.
    """
    return {"status": "ok"}


# ---------- Registro de rutas ----------

app.include_router(pages_router)
app.include_router(upload_router)
app.include_router(quota_router)


def run() -> None:
    """Arranca el servidor con uvicorn en HOST:PORT (comando `photodrop`)."""
    logger.info("Server listening on port %s", settings.PORT)
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
