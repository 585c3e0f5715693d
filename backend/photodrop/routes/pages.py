"""
Modulo de ruta para la pagina del formulario (GET /).

Es el unico endpoint "informativo": no recibe datos, solo muestra el
formulario con las fotos que el cliente aun puede enviar hoy.
"""

from fastapi import APIRouter
from fastapi.responses import HTMLResponse
from starlette.requests import Request

from photodrop.services.gate import upload_gate
from photodrop.services.identity import client_identity
from photodrop.views import render_form

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
async def show_form(request: Request):
    remaining = upload_gate.tracker.remaining(client_identity(request))
    return HTMLResponse(render_form(remaining=remaining))
