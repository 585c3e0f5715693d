"""
Sanitizacion del nombre y construccion del identificador publico.

El identificador de cada foto en el host externo combina el nombre que
escribio el participante (sanitizado) con una marca de tiempo de alta
resolucion:

    "Marie É!!"  ->  "Marie_É_1718000000123456789"

La marca de tiempo es la que garantiza la unicidad; el nombre solo ayuda a
reconocer la foto a simple vista. Por eso un nombre que queda vacio tras
sanitizar NO es un error.
"""

import re
import time

MAX_NAME_LENGTH = 60

# Caracteres extra permitidos ademas de letras y numeros.
_EXTRA_ALLOWED = frozenset("-_ ")

_WHITESPACE_RUN = re.compile(r"\s+")


def _is_allowed(char: str) -> bool:
    # isalpha() cubre las categorias Unicode L* (cualquier escritura) e
    # isnumeric() las N*, asi "Émilie", "Żaneta" o "明美" se conservan.
    return char.isalpha() or char.isnumeric() or char in _EXTRA_ALLOWED


def sanitize_name(value: str | None) -> str:
    """
    Limpia un nombre para usarlo dentro de un identificador.

    Pasos (en este orden):
    1. Quita espacios al inicio y al final.
    2. Elimina todo lo que no sea letra, numero, guion, guion bajo o espacio.
    3. Reemplaza cada grupo de espacios por un unico "_".
    4. Corta a 60 caracteres.

    La funcion es idempotente: sanitize_name(sanitize_name(x)) == sanitize_name(x).

    Ejemplos:
        >>> sanitize_name("  Jean  Pierre ")
        'Jean_Pierre'
        >>> sanitize_name("<script>")
        'script'
        >>> sanitize_name("!!!")
        ''
    """
    text = str(value or "").strip()
    text = "".join(char for char in text if _is_allowed(char))
    text = _WHITESPACE_RUN.sub("_", text)
    return text[:MAX_NAME_LENGTH]


def build_public_id(prenom: str | None, timestamp: int | None = None) -> str:
    """
    Identificador publico: "{nombre_sanitizado}_{timestamp}".

    Parametros:
        prenom (str): Nombre tal como lo escribio el usuario.
        timestamp (int | None): Marca de tiempo en nanosegundos. Si es None
            se usa time.time_ns().
    """
    if timestamp is None:
        timestamp = time.time_ns()
    return f"{sanitize_name(prenom)}_{timestamp}"
