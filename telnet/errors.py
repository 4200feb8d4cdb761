# telnet/errors.py
from __future__ import annotations

from typing import Optional


class TelnetError(Exception):
    """Base de todos los errores que lanza el núcleo del cliente."""


class ConfigurationError(TelnetError):
    """Falta la conexión o un stream, o los parámetros no son válidos."""


class SessionClosedError(ConfigurationError):
    """La sesión ya se cerró: no se admite reconectar."""


class EOTError(TelnetError):
    """Fin de transmisión limpio (Ctrl+D local o cierre ordenado del remoto)."""

    def __init__(self, message: str = "EOT signal received"):
        super().__init__(message)


class ConnectionClosedError(TelnetError):
    """La conexión o el stream ya estaban cerrados al operar."""

    def __init__(self, message: str = "connection is closed"):
        super().__init__(message)


class TelnetIOError(TelnetError):
    """
    Cualquier otro fallo de E/S. `op` indica la operación que falló
    ("dial", "read", "write" o "close"); la causa va encadenada.
    """

    def __init__(self, op: str, message: str, cause: Optional[BaseException] = None):
        self.op = op
        self.cause = cause
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class DialError(TelnetIOError):
    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__("dial", message, cause)
