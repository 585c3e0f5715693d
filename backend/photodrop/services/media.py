"""
Modulo del host de medios externo (almacenamiento de objetos S3).

Este modulo encapsula TODA la comunicacion con el host de medios. Ningun
otro archivo llama a boto3 directamente; la compuerta (`gate.py`) solo
conoce el contrato:

    upload(bytes, descriptor) -> URL durable    (o lanza MediaUploadError)

El host es cualquier servicio compatible con la API de S3 (AWS S3, MinIO,
Cloudflare R2...). El objeto se guarda con la key:

    {folder}/{public_id}{extension}
    uploads/Marie_E_1718000000123456789.png

La politica de formato/calidad ("auto") se delega al host: se guarda como
metadata del objeto (x-amz-meta-fetch-format, x-amz-meta-quality) para que
la CDN o el servicio de transformacion que sirve el bucket la aplique.

Patron de diseno: Servicio + Inyeccion de dependencias
------------------------------------------------------
El constructor acepta un `client` opcional. En produccion se crea el
cliente real de boto3; en tests se pasa el cliente de moto (S3 simulado)
o un mock.
"""

from dataclasses import dataclass
from urllib.parse import quote

# boto3: SDK oficial de AWS para Python.
import boto3

# botocore es la capa de bajo nivel de boto3: de ahi vienen la configuracion
# de timeouts/reintentos y las excepciones de red y de la API.
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from photodrop.config import settings


class MediaUploadError(Exception):
    """El host de medios rechazo la subida o no respondio."""


@dataclass(frozen=True)
class UploadDescriptor:
    """
    Todo lo que el host necesita saber de una subida, salvo los bytes.

    Atributos:
        folder (str): Carpeta (prefijo) de destino.
        public_id (str): Identificador generado ("{nombre}_{timestamp}").
        content_type (str): Tipo MIME real de la imagen.
        resource_type (str): Tipo de recurso; siempre "image" aqui.
        fetch_format (str): Politica de formato de entrega ("auto").
        quality (str): Politica de calidad de entrega ("auto").
    """
    folder: str
    public_id: str
    content_type: str
    resource_type: str = "image"
    fetch_format: str = "auto"
    quality: str = "auto"

    @property
    def key(self) -> str:
        extension = settings.ALLOWED_MIME_TYPES.get(self.content_type, "")
        return f"{self.folder.strip('/')}/{self.public_id}{extension}"

    @property
    def metadata(self) -> dict:
        return {
            "resource-type": self.resource_type,
            "fetch-format": self.fetch_format,
            "quality": self.quality,
        }


def _default_client(timeout: float):
    # Un solo intento (sin reintentos) y timeouts de red acotados: la
    # compuerta ademas impone su propio timeout total.
    config = Config(
        connect_timeout=timeout,
        read_timeout=timeout,
        retries={"total_max_attempts": 1},
    )
    return boto3.client(
        "s3",
        region_name=settings.AWS_REGION,
        endpoint_url=settings.MEDIA_ENDPOINT_URL or None,
        config=config,
    )


class MediaUploader:
    """
    Cliente del host de medios.

    Atributos:
        client: Cliente S3 de boto3 (o compatible).
        bucket (str): Bucket de destino.
        public_base_url (str): Base de la URL publica. Si esta vacia se usa
            la URL virtual-hosted de S3.
    """

    def __init__(self, client=None, bucket: str | None = None, public_base_url: str | None = None):
        self.client = client or _default_client(settings.UPLOAD_TIMEOUT_SECONDS)
        self.bucket = bucket or settings.MEDIA_BUCKET
        self.public_base_url = (
            public_base_url if public_base_url is not None else settings.MEDIA_PUBLIC_BASE_URL
        )

    def upload(self, data: bytes, descriptor: UploadDescriptor) -> str:
        """
        Sube la imagen y retorna su URL durable.

        Raises:
            MediaUploadError: Si S3 responde con error o la red falla.
        """
        key = descriptor.key
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=descriptor.content_type,
                Metadata=descriptor.metadata,
            )
        except (BotoCoreError, ClientError) as exc:
            raise MediaUploadError(f"put_object failed for {key}: {exc}") from exc
        return self.url_for(key)

    def url_for(self, key: str) -> str:
        # quote() codifica espacios y caracteres no ASCII ("É" -> "%C3%89")
        # pero deja "/" intacto para conservar la "carpeta".
        path = quote(key)
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{path}"
        return f"https://{self.bucket}.s3.{settings.AWS_REGION}.amazonaws.com/{path}"
