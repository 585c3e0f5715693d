"""
Modulo de configuracion centralizada de la aplicacion.

Todas las constantes y parametros del servicio viven aqui. Los valores que
cambian entre entornos (bucket, puerto, timeouts, backend del contador de
cuota) se leen de variables de entorno con un valor por defecto sensato,
asi la misma aplicacion corre en desarrollo y en produccion sin tocar el
codigo.

Al importar el modulo cargamos tambien un archivo `.env` si existe
(python-dotenv). Las variables ya definidas en el entorno tienen prioridad
sobre las del archivo.

Patron de diseno: Singleton implicito
La instancia `settings` se crea UNA sola vez al importar este modulo y
todos los modulos que hacen `from photodrop.config import settings`
comparten la misma instancia.
"""

import os

# load_dotenv lee un archivo .env (KEY=VALUE por linea) y copia sus valores
# a os.environ. No sobreescribe variables que ya existen.
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    """Interpreta una variable de entorno como booleano ("1", "true", "yes")."""
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """
    Clase que encapsula toda la configuracion de la aplicacion.

    Los servicios reciben sus parametros por constructor y usan estos
    valores solo como defaults, de modo que en tests se pueden instanciar
    con valores propios sin tocar variables de entorno.
    """

    # ---------- Servidor HTTP ----------

    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "3000"))

    # ---------- Host de medios externo (S3 compatible) ----------

    # Bucket donde se guardan las fotos del concurso.
    MEDIA_BUCKET: str = os.getenv("MEDIA_BUCKET", "photodrop-media")
    AWS_REGION: str = os.getenv("AWS_REGION", "us-east-1")

    # Endpoint alternativo (MinIO, R2, etc.). Vacio = AWS S3.
    MEDIA_ENDPOINT_URL: str = os.getenv("MEDIA_ENDPOINT_URL", "")

    # Base publica para construir la URL durable (CDN delante del bucket).
    # Vacio = URL "virtual-hosted" de S3.
    MEDIA_PUBLIC_BASE_URL: str = os.getenv("MEDIA_PUBLIC_BASE_URL", "")

    # "Carpeta" (prefijo) donde se guardan las fotos dentro del bucket.
    UPLOAD_FOLDER: str = os.getenv("UPLOAD_FOLDER", "uploads")

    # Tiempo maximo que esperamos al host externo antes de dar el intento
    # por fallido.
    UPLOAD_TIMEOUT_SECONDS: float = float(os.getenv("UPLOAD_TIMEOUT_SECONDS", "30"))

    # ---------- Limites de archivos ----------

    # 10 MB = 10 * 1024 * 1024 bytes
    MAX_FILE_SIZE: int = 10 * 1024 * 1024  # 10 MB

    # Lista blanca de tipos MIME -> extension usada en la key del objeto.
    ALLOWED_MIME_TYPES: dict[str, str] = {
        "image/jpeg": ".jpg",
        "image/png": ".png",
    }

    # Tamano maximo del campo de texto "prenom" (en bytes).
    MAX_FIELD_SIZE: int = 1024

    # Nombres de los campos del formulario.
    NAME_FIELD: str = "prenom"
    FILE_FIELD: str = "photo"

    # ---------- Cuota diaria ----------

    # Numero maximo de fotos aceptadas por cliente y por dia (UTC).
    DAILY_QUOTA: int = 3

    # URI de almacenamiento de la libreria "limits" para los contadores.
    #   memory://                -> en proceso (se pierde al reiniciar)
    #   redis://localhost:6379   -> compartido entre instancias
    QUOTA_STORAGE_URI: str = os.getenv("QUOTA_STORAGE_URI", "memory://")

    # Si es True, las subidas de una misma identidad se serializan con un
    # lock, asi dos envios simultaneos no pueden superar la cuota.
    QUOTA_STRICT: bool = _env_flag("QUOTA_STRICT")

    # Limite de rafaga por identidad (slowapi), independiente de la cuota.
    BURST_LIMIT: str = os.getenv("BURST_LIMIT", "10/minute")

    # ---------- Logging ----------

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    # Ruta de un archivo de log adicional. Vacio = solo consola.
    LOG_FILE: str = os.getenv("LOG_FILE", "")


settings = Settings()
