# telnet/io.py
from __future__ import annotations

import errno
import socket
from typing import Tuple

from telnet.errors import ConnectionClosedError, EOTError, TelnetError, TelnetIOError

TERMINATOR = b"\n"
READ_SIZE = 65536


# ---------------------------------------------------------------------------
# Clasificación de errores de E/S
# ---------------------------------------------------------------------------


def is_closed(stream) -> bool:
    if isinstance(stream, socket.socket):
        return stream.fileno() == -1
    return bool(getattr(stream, "closed", False))


def _closed_error(stream, exc: BaseException) -> bool:
    if isinstance(exc, OSError) and exc.errno == errno.EBADF:
        return True
    return is_closed(stream)


def _wrap(stream, exc: BaseException, op: str, message: str) -> TelnetError:
    if _closed_error(stream, exc):
        return ConnectionClosedError()
    return TelnetIOError(op, message, exc)


def _reader_for(stream):
    # recv para sockets, read1 para streams con buffer (no espera a llenar n)
    for name in ("recv", "read1", "read"):
        fn = getattr(stream, name, None)
        if callable(fn):
            return fn
    raise TypeError(f"{type(stream).__name__} no es una fuente de bytes legible")


# ---------------------------------------------------------------------------
# Lectura por líneas con buffer propio
# ---------------------------------------------------------------------------


class LineReader:
    """
    Envuelve cualquier fuente de bytes (socket, BytesIO, FileIO...) con un
    buffer interno explícito. `read_line` devuelve hasta el terminador
    incluido y `buffered` dice cuántos bytes quedan listos sin volver a leer
    de la fuente.
    """

    def __init__(self, source, size: int = READ_SIZE):
        self.source = source
        self._read = _reader_for(source)
        self._size = size
        self._buf = bytearray()

    def buffered(self) -> int:
        return len(self._buf)

    def _fill(self) -> bool:
        chunk = self._read(self._size)
        if not chunk:
            return False
        self._buf += chunk
        return True

    def read_line(self) -> Tuple[bytes, bool]:
        """
        Devuelve (datos, eof). Con eof=True los datos son lo que quedaba sin
        terminador (posiblemente vacío).
        """
        while True:
            idx = self._buf.find(TERMINATOR)
            if idx >= 0:
                line = bytes(self._buf[: idx + 1])
                del self._buf[: idx + 1]
                return line, False
            if not self._fill():
                line = bytes(self._buf)
                self._buf.clear()
                return line, True


def read_chunk(reader) -> bytes:
    """
    Lee todo lo que la fuente tiene disponible en este momento, línea a
    línea, y vuelve en cuanto el buffer queda vacío tras un terminador.

    Lanza EOTError si la fuente está agotada y no se leyó nada,
    ConnectionClosedError si la fuente estaba cerrada y TelnetIOError ante
    cualquier otro fallo.
    """
    res = bytearray()
    while True:
        try:
            line, eof = reader.read_line()
        except (OSError, ValueError) as exc:
            raise _wrap(reader.source, exc, "read", "reading failed") from exc
        res += line
        if eof:
            if reader.buffered() == 0:
                if not res:
                    raise EOTError()
                # Cola sin terminador: se entrega; el EOT llegará en la siguiente.
                return bytes(res)
            continue  # EOF espurio con datos aún en el buffer
        if reader.buffered() == 0:
            return bytes(res)


# ---------------------------------------------------------------------------
# Escritura
# ---------------------------------------------------------------------------


def write_out(sink, data: bytes) -> None:
    try:
        if isinstance(sink, socket.socket):
            sink.sendall(data)
            return
        # Un sink sin buffer puede aceptar sólo parte de los datos
        view = memoryview(data)
        while view:
            n = sink.write(view)
            if not n:
                raise TelnetIOError(
                    "write", f"unable to write out the data: short write ({n!r})"
                )
            view = view[n:]
        flush = getattr(sink, "flush", None)
        if callable(flush):
            flush()
    except (OSError, ValueError) as exc:
        raise _wrap(sink, exc, "write", "unable to write out the data") from exc


# ---------------------------------------------------------------------------
# Direcciones host:port
# ---------------------------------------------------------------------------


def split_host_port(address: str) -> Tuple[str, int]:
    host, sep, port = address.rpartition(":")
    if not sep or not port:
        raise ValueError(f"falta el puerto en la dirección {address!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        raise ValueError(f"demasiados ':' en la dirección {address!r}")
    if port.isdigit():
        port_num = int(port)
    else:
        try:
            port_num = socket.getservbyname(port, "tcp")
        except OSError:
            raise ValueError(f"puerto desconocido {port!r}") from None
    if not 0 <= port_num <= 65535:
        raise ValueError(f"puerto fuera de rango: {port_num}")
    return host, port_num


def join_host_port(host: str, port) -> str:
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"
