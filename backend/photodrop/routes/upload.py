"""
Modulo de ruta para el envio del formulario (POST /upload).

Flujo de una peticion:

    1. Limiter de rafaga (SlowAPI)            -> 429 si hay abuso
    2. Identidad del cliente (IP / XFF)
    3. Pre-chequeo de cuota                   -> 429 SIN leer el cuerpo
    4. Recepcion en streaming (intake)        -> 400 / 413 / 415 temprano
    5. Compuerta: cuota + validacion + subida -> 200 agradecimiento
                                                 o formulario con error

El orden importa: si el cliente ya agoto su cuota no tiene sentido recibir
10 MB de foto, y si la foto es de tipo prohibido no tiene sentido esperar
al resto del cuerpo.

Todas las respuestas son HTML. Los errores re-muestran el formulario con
un mensaje para el usuario; el detalle tecnico solo va al log.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

# Request de Starlette: SlowAPI lo necesita en la firma del endpoint.
from starlette.requests import Request

from photodrop.config import settings
from photodrop.limiter import limiter
from photodrop.models.upload import FailureReason
from photodrop.services.gate import upload_gate
from photodrop.services.identity import client_identity
from photodrop.services.intake import IntakeRejected, receive_submission
from photodrop.views import render_form, render_thank_you

logger = logging.getLogger(__name__)

router = APIRouter()


def failure_page(reason: FailureReason) -> HTMLResponse:
    """Formulario con el mensaje del motivo y su codigo HTTP."""
    return HTMLResponse(render_form(error=reason.message), status_code=reason.status_code)


@router.post("/upload", response_class=HTMLResponse)
@limiter.limit(settings.BURST_LIMIT)
async def upload_photo(request: Request):
    """
    Recibe nombre + foto, aplica la cuota diaria y sube al host externo.

    Retorna:
        HTMLResponse: Pagina de agradecimiento (200) o el formulario con
        el error (400, 413, 415, 429 o 500).
    """
    identity = client_identity(request)

    # --- Paso 1: cuota, antes de leer un solo byte del cuerpo ---
    if upload_gate.quota_exceeded(identity):
        logger.info("Refusing submission from %s: daily quota exhausted", identity)
        return failure_page(FailureReason.QUOTA_EXCEEDED)

    # --- Paso 2: recepcion con rechazo temprano ---
    try:
        submission = await receive_submission(request)
    except IntakeRejected as exc:
        logger.info("Rejected submission from %s at intake: %s", identity, exc.detail)
        return failure_page(exc.reason)

    # --- Paso 3: compuerta ---
    result = await upload_gate.submit(identity, submission)
    if not result.ok:
        return failure_page(result.reason)

    return HTMLResponse(render_thank_you())
