# client/main.py
import argparse
import queue
import signal
import sys
import threading

from telnet.config import DEFAULT_TIMEOUT, parse_duration
from telnet.errors import ConnectionClosedError, EOTError, TelnetError
from telnet.io import join_host_port
from telnet.logging_setup import get_logger
from telnet.session import Session

log = get_logger("client.main")

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2

POLL_SECONDS = 0.1


def _duration(text: str) -> float:
    try:
        return parse_duration(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def _fmt_duration(seconds: float) -> str:
    return f"{max(0.0, seconds):g}s"


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="go-telnet",
        usage="%(prog)s [--timeout=duration] <host> <port>",
        description="Cliente telnet mínimo: stdin -> servidor, servidor -> stdout.",
    )
    p.add_argument(
        "--timeout",
        type=_duration,
        default=DEFAULT_TIMEOUT,
        help="timeout de conexión (10s, 500ms, 1m30s...)",
    )
    p.add_argument("args", nargs="*", metavar="host port")
    return p


def _pump(op, stop: threading.Event, errors: queue.Queue):
    """Repite op() hasta que falle o se pida parar; el fallo va a la cola."""
    while not stop.is_set():
        try:
            op()
        except Exception as e:
            errors.put(e)
            return


def _install_signals(stop: threading.Event, received: list) -> dict:
    if threading.current_thread() is not threading.main_thread():
        return {}

    def _handler(signum, _frame):
        received.append(signal.Signals(signum).name)
        stop.set()

    previous = {}
    for sig in (signal.SIGINT, signal.SIGTERM):
        previous[sig] = signal.signal(sig, _handler)
    return previous


def _restore_signals(previous: dict):
    for sig, handler in previous.items():
        signal.signal(sig, handler)


def wait_for_termination(stop: threading.Event, errors: queue.Queue, received: list) -> int:
    """Espera a la primera señal o al primer error y decide el código de salida."""
    while True:
        try:
            err = errors.get(timeout=POLL_SECONDS)
        except queue.Empty:
            if stop.is_set():
                name = received[0] if received else "SIGINT"
                log.info("%s received, terminating", name)
                return EXIT_OK
            continue

        if isinstance(err, EOTError):
            log.info("EOF received, terminating")
            return EXIT_OK
        if isinstance(err, ConnectionClosedError):
            log.info("Connection is closed, terminating")
            return EXIT_OK
        log.error("Unexpected error occurred: %s", err)
        return EXIT_ERROR


def _close(session: Session):
    try:
        session.close()
    except TelnetError as e:
        log.error("Close attempt failed with errors: %s", e)
    else:
        log.info("Connection successfully closed")


def run(argv=None, stdin=None, stdout=None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)
    if len(ns.args) != 2:
        print(f"Usage: {parser.prog} [--timeout=duration] <host> <port>", file=sys.stderr)
        return EXIT_USAGE

    address = join_host_port(ns.args[0], ns.args[1])

    # FileIO sin buffer: cerrarlo no espera a una lectura en curso
    if stdin is None:
        stdin = sys.stdin.buffer.raw
    if stdout is None:
        stdout = sys.stdout.buffer

    session = Session(address, ns.timeout, stdin, stdout)
    try:
        session.connect()
    except TelnetError as e:
        log.error("Connection failed: %s", e)
        return EXIT_ERROR
    except KeyboardInterrupt:
        # Ctrl+C durante el dial: aún no hay manejadores propios instalados
        log.info("SIGINT received, terminating")
        _close(session)
        return EXIT_OK
    log.info("Connected to %s with timeout %s", address, _fmt_duration(ns.timeout))

    stop = threading.Event()
    errors: queue.Queue = queue.Queue()
    received: list = []
    previous = _install_signals(stop, received)
    code = EXIT_ERROR
    try:
        for name, op in (("sender", session.send), ("receiver", session.receive)):
            threading.Thread(
                target=_pump, args=(op, stop, errors), name=name, daemon=True
            ).start()
        code = wait_for_termination(stop, errors, received)
    finally:
        stop.set()
        _restore_signals(previous)
        _close(session)
    return code


def main():
    sys.exit(run())


if __name__ == "__main__":
    main()
