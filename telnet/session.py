# telnet/session.py
"""
Sesión de cliente telnet: una conexión TCP y el par de streams local
(entrada propia que se cierra al final, salida ajena que no se toca).

Soporta:
- timeout para la conexión inicial;
- señal EOT (EOTError);
- cierre idempotente de la conexión y de la entrada.

`send` y `receive` están pensados para ejecutarse en bucle desde dos hilos
independientes; cada llamada reenvía un bloque de datos.
"""
from __future__ import annotations

import socket
from typing import BinaryIO, Optional

from telnet.errors import (
    ConfigurationError,
    ConnectionClosedError,
    DialError,
    EOTError,
    SessionClosedError,
    TelnetIOError,
)
from telnet.io import LineReader, read_chunk, split_host_port, write_out
from telnet.rwlock import RWLock


class Session:
    def __init__(
        self,
        address: str,
        timeout: float,
        input: Optional[BinaryIO] = None,
        output: Optional[BinaryIO] = None,
    ):
        # Sin validación aquí: los errores aparecen al usar la sesión.
        self._lock = RWLock()
        self._address = address
        self._timeout = timeout
        self._input = input
        self._output = output
        self._conn: Optional[socket.socket] = None
        self._input_closed = False
        self._closed = False

    @property
    def address(self) -> str:
        return self._address

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def connected(self) -> bool:
        with self._lock.read_locked():
            return self._conn is not None

    @property
    def closed(self) -> bool:
        with self._lock.read_locked():
            return self._closed

    # ------------------------------------------------------------------ ciclo de vida

    def connect(self) -> None:
        """Conecta con el servidor respetando el timeout configurado."""
        with self._lock.read_locked():
            # Se suelta antes del dial para no bloquear un close() concurrente.
            address, timeout = self._address, self._timeout
            closed, connected = self._closed, self._conn is not None
        if closed:
            raise SessionClosedError("session is closed, reconnecting is not supported")
        if connected:
            raise ConfigurationError("session is already connected")
        if timeout is None or timeout <= 0:
            raise ConfigurationError(f"invalid dial timeout: {timeout}")

        try:
            host, port = split_host_port(address)
            conn = socket.create_connection((host, port), timeout=timeout)
        except (OSError, ValueError) as exc:
            raise DialError("connection failed", exc) from exc
        # El timeout sólo aplica al dial; después la conexión es bloqueante.
        conn.settimeout(None)

        with self._lock.write_locked():
            if self._closed or self._conn is not None:
                err: ConfigurationError = (
                    SessionClosedError("session was closed while dialing")
                    if self._closed
                    else ConfigurationError("session is already connected")
                )
            else:
                self._conn = conn
                return
        conn.close()
        raise err

    def close(self) -> None:
        """
        Cierra la conexión y/o la entrada. Cada recurso se cierra como mucho
        una vez; llamadas posteriores no hacen nada. Si fallan ambos cierres
        se informa el de la conexión.
        """
        with self._lock.write_locked():
            conn, self._conn = self._conn, None
            stream = None
            if self._input is not None and not self._input_closed:
                stream = self._input
                self._input_closed = True
            self._closed = True

        conn_err = in_err = None
        if stream is not None:
            if isinstance(stream, socket.socket):
                _shutdown(stream)
            try:
                stream.close()
            except (OSError, ValueError) as exc:
                in_err = exc
        if conn is not None:
            _shutdown(conn)
            try:
                conn.close()
            except OSError as exc:
                conn_err = exc

        err = conn_err or in_err
        if err is not None:
            raise TelnetIOError("close", "close failed", err) from err

    # ------------------------------------------------------------------ transferencia

    def send(self) -> None:
        """Lee un bloque de la entrada local y lo envía al servidor."""
        with self._lock.read_locked():
            conn, stream, closed = self._conn, self._input, self._closed
        if conn is None and closed:
            raise ConnectionClosedError()
        if conn is None or stream is None:
            raise ConfigurationError(
                f"nil parameter received: connection={conn is None}, "
                f"input_stream={stream is None}"
            )
        self._relay(stream, conn)

    def receive(self) -> None:
        """Lee un bloque del servidor y lo escribe en la salida local."""
        with self._lock.read_locked():
            conn, stream, closed = self._conn, self._output, self._closed
        if conn is None and closed:
            raise ConnectionClosedError()
        if conn is None or stream is None:
            raise ConfigurationError(
                f"nil parameter received: connection={conn is None}, "
                f"output_stream={stream is None}"
            )
        self._relay(conn, stream)

    def _relay(self, source, sink) -> None:
        try:
            data = read_chunk(LineReader(source))
            write_out(sink, data)
        except (EOTError, TelnetIOError) as exc:
            # Si close() llegó a mitad de la operación, el fallo es un cierre.
            if self.closed:
                raise ConnectionClosedError() from exc
            raise


def _shutdown(sock: socket.socket) -> None:
    # shutdown despierta a un recv() bloqueado en otro hilo; close() no
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError:
        pass  # el otro extremo ya cerró
