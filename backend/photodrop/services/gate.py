"""
Compuerta de subida (Upload Gate).

Orquesta una subida completa como una pequena maquina de estados:

    IDLE -> QUOTA_CHECKED -> VALIDATED -> UPLOADING -> SUCCEEDED
      |           |              |             |
      +-----------+--------------+-------------+------> FAILED(motivo)

1. IDLE -> QUOTA_CHECKED: lee el contador del dia. Si ya hay 3 fotos,
   FAILED(QUOTA_EXCEEDED) y NO se valida ni se sube nada.
2. QUOTA_CHECKED -> VALIDATED: nombre + archivo presentes, JPEG/PNG,
   maximo 10 MB (ver `validator.py`).
3. VALIDATED -> UPLOADING: construye el descriptor (carpeta, identificador
   "{nombre}_{timestamp}", tipo "image", formato/calidad "auto").
4. UPLOADING -> SUCCEEDED: el host retorno una URL; se incrementa el
   contador UNA sola vez.
5. UPLOADING -> FAILED(UPLOAD_ERROR): cualquier error o timeout del host.
   El contador NO se toca: los intentos fallidos son gratis.

La identidad llega como parametro explicito: la compuerta nunca mira la
peticion HTTP, asi se puede testear sin simular requests.

Concurrencia
------------
Entre la lectura del contador (paso 1) y el incremento (paso 4) pasa toda
la subida externa. Dos envios simultaneos de la MISMA identidad pueden
pasar ambos el paso 1 y terminar los dos bien (una foto de mas). Por
defecto se acepta esa carrera. Con `strict=True` la compuerta toma un lock
por identidad durante toda la secuencia y lo libera en cualquier salida.
"""

import asyncio
import logging
import time
from collections import defaultdict
from datetime import datetime, timezone
from typing import Callable

from photodrop.config import settings
from photodrop.models.upload import FailureReason, GateState, UploadRequest, UploadResult
from photodrop.services.media import MediaUploader, UploadDescriptor
from photodrop.services.naming import build_public_id
from photodrop.services.quota import QuotaTracker
from photodrop.services.validator import validate_upload

logger = logging.getLogger(__name__)


class UploadGate:
    """
    Atributos:
        tracker (QuotaTracker): Contador de cuota diaria.
        uploader: Objeto con `upload(data, descriptor) -> str`.
        folder (str): Carpeta de destino en el host.
        timeout (float): Segundos maximos de espera al host.
        strict (bool): Serializa los envios de una misma identidad.
        timestamp (Callable[[], int]): Fuente de la marca de tiempo del
            identificador (nanosegundos).
    """

    def __init__(
        self,
        tracker: QuotaTracker,
        uploader,
        folder: str = settings.UPLOAD_FOLDER,
        timeout: float = settings.UPLOAD_TIMEOUT_SECONDS,
        strict: bool = settings.QUOTA_STRICT,
        timestamp: Callable[[], int] = time.time_ns,
    ):
        self.tracker = tracker
        self.uploader = uploader
        self.folder = folder
        self.timeout = timeout
        self.strict = strict
        self.timestamp = timestamp
        self._locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def quota_exceeded(self, identity: str) -> bool:
        """Pre-chequeo barato, para rechazar antes de leer el cuerpo."""
        return self.tracker.is_exhausted(identity)

    async def submit(self, identity: str, request: UploadRequest) -> UploadResult:
        if not self.strict:
            return await self._run(identity, request)
        async with self._locks[identity]:
            return await self._run(identity, request)

    async def _run(self, identity: str, request: UploadRequest) -> UploadResult:
        state = GateState.IDLE

        # --- 1. Cuota ---
        # El dia se calcula una sola vez: el incremento se imputa al dia en
        # que se admitio el envio aunque la subida cruce la medianoche.
        day = self.tracker.today()
        count = self.tracker.current_count(identity, day)
        if count >= self.tracker.limit:
            logger.info("Quota exceeded for %s on %s (%d/%d)", identity, day, count, self.tracker.limit)
            return self._fail(state, FailureReason.QUOTA_EXCEEDED)
        state = self._advance(state, GateState.QUOTA_CHECKED, identity)

        # --- 2. Validacion ---
        validation = validate_upload(request)
        if not validation.is_valid:
            logger.info("Rejected upload from %s: %s", identity, validation.error)
            return self._fail(state, validation.reason)
        state = self._advance(state, GateState.VALIDATED, identity)

        # --- 3. Subida ---
        descriptor = UploadDescriptor(
            folder=self.folder,
            public_id=build_public_id(request.prenom, self.timestamp()),
            content_type=validation.mime_type,
        )
        state = self._advance(state, GateState.UPLOADING, identity)
        try:
            url = await asyncio.wait_for(
                asyncio.to_thread(self.uploader.upload, request.data, descriptor),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            logger.error(
                "Upload timed out after %ss for %s at %s (public_id=%s)",
                self.timeout, identity, _utc_stamp(), descriptor.public_id,
            )
            return self._fail(state, FailureReason.UPLOAD_ERROR)
        except Exception:
            # Cualquier error del host se traduce a UPLOAD_ERROR; el detalle
            # queda en el log con la traza completa.
            logger.exception(
                "Upload failed for %s at %s (public_id=%s)",
                identity, _utc_stamp(), descriptor.public_id,
            )
            return self._fail(state, FailureReason.UPLOAD_ERROR)

        # --- 4. Exito: un solo incremento ---
        used = self.tracker.increment(identity, day)
        self._advance(state, GateState.SUCCEEDED, identity)
        logger.info("Uploaded %s for %s (%d/%d today)", descriptor.public_id, identity, used, self.tracker.limit)
        return UploadResult.succeeded(url=url, public_id=descriptor.public_id)

    @staticmethod
    def _advance(current: GateState, target: GateState, identity: str) -> GateState:
        logger.debug("Gate %s -> %s for %s", current.value, target.value, identity)
        return target

    @staticmethod
    def _fail(current: GateState, reason: FailureReason) -> UploadResult:
        logger.debug("Gate %s -> failed (%s)", current.value, reason.value)
        return UploadResult.failed(reason)


def _utc_stamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def build_default_gate() -> UploadGate:
    """Compuerta de produccion: contador segun QUOTA_STORAGE_URI + host S3."""
    return UploadGate(tracker=QuotaTracker(), uploader=MediaUploader())


# Instancia global (Singleton implicito), igual que los demas servicios.
upload_gate = build_default_gate()
