# test/conftest.py
# --- añadir la raíz del repo al sys.path ---
import os
import sys

SYS_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if SYS_ROOT not in sys.path:
    sys.path.insert(0, SYS_ROOT)
# -------------------------------------------

import socket
import threading

import pytest

HOST = "127.0.0.1"


class Peer:
    """
    Servidor de prueba en 127.0.0.1:0. `serve(fn)` acepta una conexión en un
    hilo y ejecuta fn(conn); los fallos del hilo se re-lanzan en join().
    """

    def __init__(self):
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.sock.bind((HOST, 0))
        self.sock.listen(1)
        self.port = self.sock.getsockname()[1]
        self.address = f"{HOST}:{self.port}"
        self._thread = None
        self._error = None

    def serve(self, fn):
        def _run():
            try:
                conn, _ = self.sock.accept()
                with conn:
                    conn.settimeout(5.0)
                    fn(conn)
            except BaseException as e:  # se revisa en join()
                self._error = e

        self._thread = threading.Thread(target=_run, daemon=True)
        self._thread.start()

    def join(self, timeout=5.0):
        if self._thread is not None:
            self._thread.join(timeout)
            assert not self._thread.is_alive(), "el peer no terminó a tiempo"
        if self._error is not None:
            raise self._error

    def close(self):
        self.sock.close()


@pytest.fixture
def peer():
    p = Peer()
    yield p
    p.close()


def recv_until(conn, n: int) -> bytes:
    data = b""
    while len(data) < n:
        chunk = conn.recv(4096)
        if not chunk:
            break
        data += chunk
    return data


def closed_port() -> int:
    """Puerto que estaba libre hace un momento (conexión rechazada)."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind((HOST, 0))
        return s.getsockname()[1]
