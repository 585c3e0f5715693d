"""
Modelos de dominio del flujo de subida.

A diferencia de `schemas.py` (contratos JSON de la API, con Pydantic), estos
tipos viajan solo dentro del proceso: la peticion de subida ya recibida, el
estado de la compuerta y el resultado final. Son dataclasses y enums simples
porque no necesitan validacion ni serializacion.
"""

from dataclasses import dataclass
from enum import Enum


class FailureReason(str, Enum):
    """
    Motivos tipados por los que una subida no llega a buen puerto.

    Cada motivo conoce su codigo HTTP equivalente y el mensaje que se le
    muestra al usuario. El detalle tecnico del error NUNCA se incluye en
    el mensaje; ese detalle solo va a los logs.
    """

    QUOTA_EXCEEDED = "quota_exceeded"
    INVALID_INPUT = "invalid_input"
    FORMAT_NOT_ALLOWED = "format_not_allowed"
    FILE_TOO_LARGE = "file_too_large"
    UPLOAD_ERROR = "upload_error"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_STATUS_CODES = {
    FailureReason.QUOTA_EXCEEDED: 429,
    FailureReason.INVALID_INPUT: 400,
    FailureReason.FORMAT_NOT_ALLOWED: 415,
    FailureReason.FILE_TOO_LARGE: 413,
    FailureReason.UPLOAD_ERROR: 500,
}

_MESSAGES = {
    FailureReason.QUOTA_EXCEEDED: "Limite atteinte : 3 photos maximum aujourd’hui. Reviens demain 🙂",
    FailureReason.INVALID_INPUT: "Prénom et image requis.",
    FailureReason.FORMAT_NOT_ALLOWED: "Format non autorisé : JPG ou PNG uniquement.",
    FailureReason.FILE_TOO_LARGE: "Image trop lourde : 10 MB maximum.",
    FailureReason.UPLOAD_ERROR: "Erreur lors de l’upload.",
}


class GateState(str, Enum):
    """Estados de la compuerta de subida (ver `services/gate.py`)."""

    IDLE = "idle"
    QUOTA_CHECKED = "quota_checked"
    VALIDATED = "validated"
    UPLOADING = "uploading"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class UploadRequest:
    """
    Envio ya recibido del formulario.

    Atributos:
        prenom (str): Nombre tal como lo escribio el usuario (sin sanitizar;
            la sanitizacion ocurre al construir el identificador).
        data (bytes | None): Bytes de la foto. None si no se envio archivo.
        content_type (str): Tipo MIME DECLARADO por el cliente.
        filename (str): Nombre original del archivo (solo informativo).
    """

    prenom: str
    data: bytes | None
    content_type: str = ""
    filename: str = ""

    @property
    def size(self) -> int:
        return len(self.data) if self.data else 0


@dataclass
class UploadResult:
    """
    Resultado final de la compuerta: exito con URL o fallo con motivo.
    """

    state: GateState
    url: str | None = None
    public_id: str | None = None
    reason: FailureReason | None = None

    @property
    def ok(self) -> bool:
        return self.state is GateState.SUCCEEDED

    @classmethod
    def failed(cls, reason: FailureReason) -> "UploadResult":
        return cls(state=GateState.FAILED, reason=reason)

    @classmethod
    def succeeded(cls, url: str, public_id: str) -> "UploadResult":
        return cls(state=GateState.SUCCEEDED, url=url, public_id=public_id)
