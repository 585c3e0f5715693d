"""
Modulo de validacion de la foto enviada.

Verifica, en este orden, que un `UploadRequest` se pueda subir:

1. Que haya nombre y archivo (si falta algo -> INVALID_INPUT).
2. Que el tipo MIME DECLARADO sea JPEG o PNG (-> FORMAT_NOT_ALLOWED).
3. Que no exceda 10 MB (-> FILE_TOO_LARGE).
4. Que el contenido REAL (magic bytes) tambien sea JPEG o PNG
   (-> FORMAT_NOT_ALLOWED).

Los puntos 2 y 3 ya los aplica la recepcion en streaming (`intake.py`)
mientras llegan los bytes; aqui se repiten sobre el envio completo para que
la compuerta no dependa de quien le haya entregado la peticion.

Por que mirar los magic bytes si ya tenemos el Content-Type?
------------------------------------------------------------
Porque el Content-Type lo elige el cliente. Un PDF enviado como
"image/png" pasaria el punto 2. python-magic lee la firma de los primeros
bytes (PNG: 89 50 4E 47, JPEG: FF D8 FF) y nos dice que es de verdad.

Patron de diseno: Resultado como dataclass
------------------------------------------
En vez de lanzar excepciones retornamos un ValidationResult con el motivo
tipado del fallo, que la compuerta traduce directamente a su estado FAILED.
"""

from dataclasses import dataclass

# python-magic: deteccion de tipo MIME con libmagic (el mismo motor que el
# comando `file` de Linux).
import magic

from photodrop.config import settings
from photodrop.models.upload import FailureReason, UploadRequest

# libmagic solo necesita la cabecera del archivo para reconocer imagenes.
SNIFF_BYTES = 8192


@dataclass
class ValidationResult:
    """
    Resultado de la validacion de un envio.

    Atributos:
        is_valid (bool): True si el envio paso todas las validaciones.
        mime_type (str): Tipo MIME real detectado por magic bytes (vacio si
            no se llego a detectar).
        reason (FailureReason | None): Motivo del rechazo si is_valid es False.
        error (str): Descripcion tecnica del rechazo, para logs.
    """
    is_valid: bool
    mime_type: str = ""
    reason: FailureReason | None = None
    error: str = ""


def validate_upload(
    request: UploadRequest,
    max_size: int = settings.MAX_FILE_SIZE,
    allowed_types=settings.ALLOWED_MIME_TYPES,
) -> ValidationResult:
    """
    Valida un envio completo.

    Parametros:
        request (UploadRequest): Nombre + bytes + tipo declarado.
        max_size (int): Tamano maximo en bytes.
        allowed_types: Coleccion de tipos MIME permitidos.

    Retorna:
        ValidationResult

    Ejemplos:
        >>> validate_upload(UploadRequest(prenom="", data=b"..."))
        ValidationResult(is_valid=False, reason=FailureReason.INVALID_INPUT, ...)
    """

    # --- Validacion 1: campos obligatorios ---
    # Un archivo de 0 bytes cuenta como "no enviado".
    if not request.prenom or not request.data:
        return ValidationResult(
            is_valid=False,
            reason=FailureReason.INVALID_INPUT,
            error="prenom and photo are required",
        )

    # --- Validacion 2: tipo declarado ---
    if request.content_type not in allowed_types:
        return ValidationResult(
            is_valid=False,
            reason=FailureReason.FORMAT_NOT_ALLOWED,
            error=f"Declared type '{request.content_type}' is not allowed",
        )

    # --- Validacion 3: tamano ---
    if request.size > max_size:
        return ValidationResult(
            is_valid=False,
            reason=FailureReason.FILE_TOO_LARGE,
            error=f"File size exceeds {max_size // (1024 * 1024)}MB limit",
        )

    # --- Validacion 4: tipo real (magic bytes) ---
    mime_type = magic.from_buffer(request.data[:SNIFF_BYTES], mime=True)
    if mime_type not in allowed_types:
        return ValidationResult(
            is_valid=False,
            mime_type=mime_type,
            reason=FailureReason.FORMAT_NOT_ALLOWED,
            error=f"Detected type '{mime_type}' is not allowed",
        )

    return ValidationResult(is_valid=True, mime_type=mime_type)
