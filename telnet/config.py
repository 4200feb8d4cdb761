# telnet/config.py
import logging
import math
import os
import re

from dotenv import load_dotenv

# Cargar .env sin pisar variables ya presentes en el entorno
load_dotenv(override=False)

# -------------------------------------------------
# Duraciones estilo "10s", "500ms", "1m30s"
# -------------------------------------------------
_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}
_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")


def parse_duration(text: str) -> float:
    """Convierte una duración a segundos. Un número sin unidad son segundos."""
    s = text.strip()
    if not s:
        raise ValueError("duración vacía")
    try:
        value = float(s)
    except ValueError:
        pass
    else:
        if not math.isfinite(value):
            raise ValueError(f"duración no válida: {text!r}")
        return value

    sign = 1.0
    if s[0] in "+-":
        sign = -1.0 if s[0] == "-" else 1.0
        s = s[1:]

    total = 0.0
    pos = 0
    while pos < len(s):
        m = _PART.match(s, pos)
        if not m:
            raise ValueError(f"duración no válida: {text!r}")
        total += float(m.group(1)) * _UNITS[m.group(2)]
        pos = m.end()
    if pos == 0:
        raise ValueError(f"duración no válida: {text!r}")
    return sign * total


def _level(name: str) -> int:
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


# -------------------------------------------------
# Valores por defecto del cliente
# -------------------------------------------------
DEFAULT_TIMEOUT = parse_duration(os.getenv("TELNET_TIMEOUT", "10s"))

LOG_LEVEL = _level(os.getenv("TELNET_LOG_LEVEL", "INFO"))

# Vacío = sin fichero de log (sólo stderr)
LOG_FILE = os.getenv("TELNET_LOG_FILE", "").strip()
