import socket
import time

import structlog

from wow.cancellation import CancelToken, ContextError
from wow.errors import ConfigurationError, ProtocolError, ServerError, WowError
from wow.schemas.proto import Quote, Result, Solution, Task
from wow.services import Dialer
from wow.services.solver import solve
from wow.transport.connection import Connection, parse_address


class Client:
    """Fetches quotes from a server by solving its proof-of-work challenge."""

    def __init__(self, address: str, *, dialer: Dialer | None = None, logger=None):
        if not address:
            raise ConfigurationError("address is required")

        self.address = parse_address(address)
        self.dialer = dialer or socket.create_connection
        self.logger = logger or structlog.get_logger().bind(component="client")

    def get_random_quote(self, token: CancelToken | None = None) -> Quote:
        """
        Run one challenge exchange and return the reward.

        Raises ServerError when the server rejects the solution, Cancelled or
        DeadlineExceeded when ``token`` fires, and WowError for transport
        failures.
        """
        token = token or CancelToken()
        start_time = time.perf_counter()
        token.raise_if_done()

        try:
            sock = self.dialer(self.address, timeout=token.remaining())
        except OSError as e:
            raise WowError(f"cannot dial {self.address[0]}:{self.address[1]}: {e}") from e

        conn = Connection(sock)
        conn.set_deadline(token.deadline)
        # Explicit cancellation unblocks a pending read
        token.add_callback(conn.abort)

        try:
            return self._exchange(conn, token)
        except ContextError:
            raise
        except (ProtocolError, OSError) as e:
            # A read aborted by cancel() surfaces as EOF or a socket error
            token.raise_if_done()
            if isinstance(e, OSError):
                raise WowError(f"connection failed: {e}") from e
            raise
        finally:
            token.remove_callback(conn.abort)
            try:
                conn.close()
            except OSError as e:
                self.logger.error("connection_close_failed", error=str(e))
            duration_ms = (time.perf_counter() - start_time) * 1000
            self.logger.debug("request_completed", duration_ms=round(duration_ms, 2))

    def _exchange(self, conn: Connection, token: CancelToken) -> Quote:
        task = self._read_task(conn)
        self.logger.debug("received_task", prefix=task.prefix.hex(), difficulty=task.difficulty)

        nonce = solve(task.prefix, task.difficulty, token)

        self.logger.debug("sending_solution", nonce=nonce.hex())
        conn.write_message(Solution(nonce=nonce))

        result = conn.read_message(Result)
        if result.error is not None:
            raise ServerError(result.error)

        self.logger.debug("received_quote", author=result.quote.author)
        return result.quote

    def _read_task(self, conn: Connection) -> Task:
        line = conn.read_line()
        try:
            return conn.decode(line, Task)
        except ProtocolError:
            # A server that cannot issue a challenge replies with an error Result
            error = _error_result(line)
            if error is None:
                raise
        raise ServerError(error)


def _error_result(line: bytes) -> str | None:
    try:
        return Connection.decode(line, Result).error
    except ProtocolError:
        return None
