"""
Modulo de ruta para consultar la cuota (GET /api/quota).

Permite a un frontend (o a un operador con curl) saber cuantas fotos le
quedan hoy al cliente que hace la peticion, sin enviar nada.
"""

from fastapi import APIRouter
from starlette.requests import Request

from photodrop.models.schemas import QuotaStatusResponse
from photodrop.services.gate import upload_gate
from photodrop.services.identity import client_identity

router = APIRouter()


@router.get("/api/quota", response_model=QuotaStatusResponse)
async def quota_status(request: Request):
    """
    Retorna:
        QuotaStatusResponse: limite, fotos usadas, restantes y dia UTC.
    """
    tracker = upload_gate.tracker
    identity = client_identity(request)

    # El dia se fija una vez para que "used" y "day" sean coherentes.
    day = tracker.today()
    used = tracker.current_count(identity, day)
    return QuotaStatusResponse(
        limit=tracker.limit,
        used=used,
        remaining=max(tracker.limit - used, 0),
        day=day,
    )
