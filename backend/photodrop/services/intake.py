"""
Recepcion del formulario multipart en streaming.

FastAPI/Starlette normalmente parsean TODO el cuerpo multipart antes de
llamar al endpoint. Aqui no queremos eso: un archivo de tipo prohibido o
demasiado grande debe rechazarse en cuanto se detecta, sin esperar (ni
guardar) el resto de los bytes.

Por eso leemos `request.stream()` trozo a trozo y lo pasamos por el parser
incremental de python-multipart (el mismo que usa Starlette por debajo):

- En cuanto terminan los headers de la parte "photo" conocemos su
  Content-Type declarado -> si no es JPEG/PNG, FORMAT_NOT_ALLOWED.
- Mientras llegan bytes de la foto los acumulamos; si superan 10 MB,
  FILE_TOO_LARGE sin leer mas.
- Si el Content-Length declarado ya es imposible, FILE_TOO_LARGE sin leer
  un solo byte.

El formulario tiene DOS inputs de archivo con el mismo nombre "photo"
(camara y galeria). El navegador envia el que no se uso como una parte con
filename vacio; esas partes se ignoran. Si llegan dos fotos, cuenta la
primera.
"""

from starlette.requests import Request

# python-multipart: parser multipart/form-data incremental basado en
# callbacks. parse_options_header separa "tipo; clave=valor" en partes.
from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import MultipartParser, parse_options_header

from photodrop.config import settings
from photodrop.models.upload import FailureReason, UploadRequest

# Margen para boundaries y headers de cada parte.
FRAMING_SLACK = 64 * 1024


class IntakeRejected(Exception):
    """El envio se rechazo mientras se recibia."""

    def __init__(self, reason: FailureReason, detail: str = ""):
        super().__init__(detail or reason.value)
        self.reason = reason
        self.detail = detail


class _Part:
    """Estado de la parte multipart que se esta leyendo."""

    def __init__(self):
        self.headers: dict[bytes, bytes] = {}
        self.header_field = b""
        self.header_value = b""
        self.name = ""
        self.filename: str | None = None
        self.content_type = ""
        # "file", "name" o None (parte ignorada)
        self.target: str | None = None


class SubmissionCollector:
    """
    Recibe los eventos del parser y arma el `UploadRequest`.

    Los callbacks del parser solo encolan eventos; `process()` los aplica
    despues de cada `write()`. Asi las excepciones de rechazo se lanzan
    fuera del parser, como hace Starlette con su propio MultiPartParser.
    """

    def __init__(
        self,
        name_field: str = settings.NAME_FIELD,
        file_field: str = settings.FILE_FIELD,
        max_file_size: int = settings.MAX_FILE_SIZE,
        max_field_size: int = settings.MAX_FIELD_SIZE,
        allowed_types=settings.ALLOWED_MIME_TYPES,
    ):
        self.name_field = name_field
        self.file_field = file_field
        self.max_file_size = max_file_size
        self.max_field_size = max_field_size
        self.allowed_types = allowed_types

        self.events: list[tuple[str, bytes]] = []
        self.part = _Part()
        self.prenom = bytearray()
        self.photo: bytearray | None = None
        self.photo_type = ""
        self.photo_filename = ""
        self.has_name = False

    def callbacks(self) -> dict:
        def data_event(kind):
            def on_data(data: bytes, start: int, end: int) -> None:
                self.events.append((kind, data[start:end]))
            return on_data

        def notify_event(kind):
            def on_notify() -> None:
                self.events.append((kind, b""))
            return on_notify

        return {
            "on_part_begin": notify_event("part_begin"),
            "on_part_data": data_event("part_data"),
            "on_part_end": notify_event("part_end"),
            "on_header_field": data_event("header_field"),
            "on_header_value": data_event("header_value"),
            "on_header_end": notify_event("header_end"),
            "on_headers_finished": notify_event("headers_finished"),
        }

    def process(self) -> None:
        events, self.events = self.events, []
        for kind, data in events:
            if kind == "part_begin":
                self.part = _Part()
            elif kind == "header_field":
                self.part.header_field += data
            elif kind == "header_value":
                self.part.header_value += data
            elif kind == "header_end":
                self.part.headers[self.part.header_field.lower()] = self.part.header_value
                self.part.header_field = b""
                self.part.header_value = b""
            elif kind == "headers_finished":
                self._start_part()
            elif kind == "part_data":
                self._append(data)

    def _start_part(self) -> None:
        part = self.part
        _, options = parse_options_header(part.headers.get(b"content-disposition", b""))
        part.name = options.get(b"name", b"").decode("utf-8", errors="replace")
        raw_filename = options.get(b"filename")
        part.filename = raw_filename.decode("utf-8", errors="replace") if raw_filename is not None else None
        content_type, _ = parse_options_header(part.headers.get(b"content-type", b""))
        part.content_type = content_type.decode("latin-1").lower()

        if part.filename is not None:
            # Parte de archivo: solo la primera foto con nombre de archivo.
            if part.name == self.file_field and part.filename and self.photo is None:
                if part.content_type not in self.allowed_types:
                    raise IntakeRejected(
                        FailureReason.FORMAT_NOT_ALLOWED,
                        f"Declared type '{part.content_type}' is not allowed",
                    )
                part.target = "file"
                self.photo = bytearray()
                self.photo_type = part.content_type
                self.photo_filename = part.filename
        elif part.name == self.name_field and not self.has_name:
            part.target = "name"
            self.has_name = True

    def _append(self, data: bytes) -> None:
        if self.part.target == "file":
            if len(self.photo) + len(data) > self.max_file_size:
                raise IntakeRejected(
                    FailureReason.FILE_TOO_LARGE,
                    f"File size exceeds {self.max_file_size // (1024 * 1024)}MB limit",
                )
            self.photo += data
        elif self.part.target == "name":
            if len(self.prenom) + len(data) > self.max_field_size:
                raise IntakeRejected(FailureReason.INVALID_INPUT, f"'{self.name_field}' field too long")
            self.prenom += data

    def result(self) -> UploadRequest:
        return UploadRequest(
            prenom=self.prenom.decode("utf-8", errors="replace"),
            data=bytes(self.photo) if self.photo is not None else None,
            content_type=self.photo_type,
            filename=self.photo_filename,
        )


async def receive_submission(request: Request, collector: SubmissionCollector | None = None) -> UploadRequest:
    """
    Lee el cuerpo multipart de `request` y retorna el envio.

    Raises:
        IntakeRejected: Si el cuerpo no es multipart valido, o si la foto
            es de un tipo prohibido o demasiado grande.
    """
    if collector is None:
        collector = SubmissionCollector()

    content_type, params = parse_options_header(request.headers.get("content-type", ""))
    boundary = params.get(b"boundary")
    if content_type.lower() != b"multipart/form-data" or not boundary:
        raise IntakeRejected(FailureReason.INVALID_INPUT, "Expected multipart/form-data")

    declared_length = request.headers.get("content-length")
    if declared_length and declared_length.isdigit():
        ceiling = collector.max_file_size + collector.max_field_size + FRAMING_SLACK
        if int(declared_length) > ceiling:
            raise IntakeRejected(
                FailureReason.FILE_TOO_LARGE,
                f"Declared body of {declared_length} bytes exceeds {ceiling}",
            )

    parser = MultipartParser(boundary, collector.callbacks())
    try:
        async for chunk in request.stream():
            parser.write(chunk)
            collector.process()
        parser.finalize()
        collector.process()
    except MultipartParseError as exc:
        raise IntakeRejected(FailureReason.INVALID_INPUT, f"Malformed multipart body: {exc}") from exc

    return collector.result()
