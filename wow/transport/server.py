"""
TCP front end for the puzzle service.

One thread per accepted connection runs the challenge exchange:

    server -> client   Task
    client -> server   Solution
    server -> client   Result

Shutdown is graceful: close() stops accepting, lets every admitted
connection finish its exchange (bounded only by the challenge deadline)
and then closes the listener.
"""

import itertools
import socket
import threading
import time

import structlog

from wow.cancellation import CancelToken
from wow.errors import ProtocolError, SolutionRejected, WowError
from wow.schemas.proto import Result, Solution
from wow.services.pow_service import PuzzleService
from wow.transport.connection import Connection, parse_address
from wow.transport.gate import ConnectionGate


class TCPServer:
    def __init__(
        self,
        puzzle: PuzzleService,
        address: str,
        *,
        logger=None,
        accept_interval: float = 0.2,
    ):
        host, port = parse_address(address)

        self.puzzle = puzzle
        self.logger = logger or structlog.get_logger().bind(component="tcp_server")
        self.accept_interval = accept_interval

        self._gate = ConnectionGate()
        self._shutdown = CancelToken()
        self._close_lock = threading.Lock()
        self._closing = False
        self._closed = threading.Event()
        self._conn_ids = itertools.count(1)

        self._listener = socket.create_server((host, port))
        # Bounded accept() so the shutdown latch is observed promptly
        self._listener.settimeout(accept_interval)

    def __enter__(self) -> "TCPServer":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def address(self) -> tuple[str, int]:
        host, port = self._listener.getsockname()[:2]
        return host, port

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    @property
    def active_connections(self) -> int:
        return self._gate.active

    def serve(self, token: CancelToken | None = None) -> None:
        """Run the accept loop until ``token`` fires or close() is called."""
        host, port = self.address
        self.logger.info("server_started", host=host, port=port)

        while True:
            if (token is not None and token.done) or self._shutdown.cancelled:
                break

            try:
                sock, _ = self._listener.accept()
            except TimeoutError:
                continue
            except OSError as e:
                if self._closed.is_set():
                    break
                self.logger.error("accept_failed", error=str(e))
                # Back off so a persistent error (e.g. EMFILE) does not spin
                self._shutdown.wait(self.accept_interval)
                continue

            self._dispatch(sock)

        self.logger.info("server_stopped")

    def _dispatch(self, sock: socket.socket) -> None:
        conn = Connection(sock)

        if not self._gate.try_admit():
            self.logger.warning("connection_refused", reason="draining")
            conn.close()
            return

        conn_id = next(self._conn_ids)
        thread = threading.Thread(
            target=self._handle,
            args=(conn, conn_id),
            name=f"wow-conn-{conn_id}",
            daemon=True,
        )
        try:
            thread.start()
        except RuntimeError as e:
            self.logger.error("handler_start_failed", conn_id=conn_id, error=str(e))
            self._release(conn)

    def _handle(self, conn: Connection, conn_id: int) -> None:
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(conn_id=conn_id)

        start_time = time.perf_counter()
        token = self._shutdown.child()
        self.logger.debug("connection_accepted")

        try:
            self._challenge(conn, token)
        except SolutionRejected as e:
            self.logger.info("solution_rejected", reason=str(e))
        except (WowError, OSError) as e:
            self.logger.error("challenge_failed", error=str(e), notes=getattr(e, "__notes__", None))
        except Exception:
            self.logger.exception("challenge_crashed")
        finally:
            token.detach()
            self._release(conn)
            duration_ms = (time.perf_counter() - start_time) * 1000
            self.logger.debug("connection_closed", duration_ms=round(duration_ms, 2))

    def _challenge(self, conn: Connection, token: CancelToken) -> None:
        try:
            task, deadline = self.puzzle.generate_challenge()
        except WowError as e:
            self._send_error(conn, e)
            raise

        # A stalled client cannot hold the thread past the challenge deadline
        conn.set_deadline(deadline)

        self.logger.debug("sending_task", difficulty=task.difficulty)
        conn.write_message(task)

        try:
            solution = conn.read_message(Solution)
        except (WowError, OSError) as e:
            if isinstance(e, ProtocolError) and e.detail:
                self.logger.info("malformed_solution", detail=e.detail)
            self._send_error(conn, e)
            raise

        self.logger.debug("received_solution", nonce=solution.nonce.hex())

        validation_token = token.child(deadline=deadline)
        try:
            quote = self.puzzle.validate(task, solution, validation_token)
        except WowError as e:
            self._send_error(conn, e)
            raise
        finally:
            validation_token.detach()

        self.logger.debug("sending_quote", author=quote.author)
        conn.write_message(Result(quote=quote))

    def _send_error(self, conn: Connection, error: Exception) -> None:
        """Best-effort error Result; a send failure is attached to ``error``."""
        try:
            conn.write_message(Result(error=str(error)))
        except (WowError, OSError) as send_error:
            error.add_note(f"cannot send error result: {send_error}")

    def _release(self, conn: Connection) -> None:
        try:
            conn.close()
        except OSError as e:
            self.logger.error("connection_close_failed", error=str(e))
        finally:
            self._gate.release()

    def close(self) -> None:
        """
        Stop accepting, wait for in-flight connections, then close the listener.

        Safe to call more than once; later callers wait for the first to finish.
        """
        with self._close_lock:
            first = not self._closing
            self._closing = True

        if not first:
            self._closed.wait()
            return

        self.logger.info("server_draining", active=self._gate.active)
        self._shutdown.cancel()
        self._gate.drain()
        self._listener.close()
        self._closed.set()
        self.logger.info("server_closed")
