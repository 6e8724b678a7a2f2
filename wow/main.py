"""
Process entry points.

    wow-server [--address :7700] [--difficulty 22] ...
    wow-client [--address 127.0.0.1:7700] [--timeout 5]

Flags default to the WOW_* environment settings (see wow.config).
"""

import argparse
import signal
import sys
import threading
import time

import structlog

from wow.cancellation import CancelToken, ContextError
from wow.client import Client
from wow.config import settings
from wow.errors import WowError
from wow.logging_config import get_logger, setup_logging
from wow.services.pow_service import PuzzleService
from wow.services.quote_repository import FileQuoteRepository
from wow.services.quote_service import QuoteService
from wow.services.randomizer import Randomizer
from wow.transport.server import TCPServer

SHUTDOWN_POLL_SECONDS = 0.2


def install_signal_handlers() -> None:
    """Deliver SIGINT and SIGTERM as KeyboardInterrupt in the main thread."""
    signal.signal(signal.SIGINT, signal.default_int_handler)
    signal.signal(signal.SIGTERM, signal.default_int_handler)


def build_server(args: argparse.Namespace) -> TCPServer:
    randomizer = Randomizer()
    repository = FileQuoteRepository(args.quotes_file_path)
    puzzle = PuzzleService(
        randomizer,
        QuoteService(repository, randomizer),
        difficulty=args.difficulty,
        prefix_length=args.random_bytes,
        ttl_seconds=args.timeout,
    )
    return TCPServer(puzzle, args.address, logger=get_logger("tcp_server"))


def server_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wow-server", description="Serve quotes behind a proof-of-work challenge."
    )
    parser.add_argument("--address", default=settings.server_address, help="listen host:port")
    parser.add_argument(
        "--timeout",
        type=float,
        default=settings.pow_challenge_ttl_seconds,
        help="seconds a client has to answer a challenge",
    )
    parser.add_argument(
        "--difficulty",
        type=int,
        default=settings.pow_difficulty,
        help="required leading zero bits (1-32)",
    )
    parser.add_argument(
        "--random-bytes",
        type=int,
        default=settings.pow_prefix_bytes,
        help="challenge prefix length in bytes",
    )
    parser.add_argument("--quotes-file-path", default=str(settings.quotes_file_path))
    parser.add_argument("--log-level", default=settings.log_level)
    parser.add_argument("--log-format", choices=("console", "json"), default=settings.log_format)
    return parser


def run_server(argv: list[str] | None = None) -> int:
    args = server_parser().parse_args(argv)
    setup_logging(args.log_level, args.log_format)
    logger = get_logger("main")

    logger.info(
        "starting_server",
        address=args.address,
        timeout=args.timeout,
        difficulty=args.difficulty,
        random_bytes=args.random_bytes,
        quotes_file_path=args.quotes_file_path,
    )

    try:
        server = build_server(args)
    except (WowError, OSError) as e:
        logger.error("cannot_start_server", error=str(e))
        return 1

    install_signal_handlers()

    serve_thread = threading.Thread(target=server.serve, name="wow-accept")
    serve_thread.start()

    # Signals are delivered to the main thread, so park it here
    try:
        while serve_thread.is_alive():
            time.sleep(SHUTDOWN_POLL_SECONDS)
    except KeyboardInterrupt:
        logger.info("shutdown_requested")

    logger.info("shutting_down", active=server.active_connections)
    server.close()
    serve_thread.join()
    return 0


def client_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wow-client", description="Solve a challenge and print the quote."
    )
    parser.add_argument("--address", default=settings.client_address, help="server host:port")
    parser.add_argument(
        "--timeout",
        type=float,
        default=settings.client_timeout_seconds,
        help="overall seconds allowed for the request",
    )
    parser.add_argument("--log-level", default=settings.log_level)
    parser.add_argument("--log-format", choices=("console", "json"), default=settings.log_format)
    return parser


def run_client(argv: list[str] | None = None) -> int:
    args = client_parser().parse_args(argv)
    setup_logging(args.log_level, args.log_format)
    logger = structlog.get_logger()

    token = CancelToken(timeout=args.timeout)
    install_signal_handlers()

    try:
        client = Client(args.address, logger=get_logger("client"))
        quote = client.get_random_quote(token)
    except ContextError as e:
        logger.error("request_aborted", error=str(e), reason=type(e).__name__)
        return 1
    except WowError as e:
        logger.error("cannot_get_random_quote", error=str(e))
        return 1
    except KeyboardInterrupt:
        logger.error("request_aborted", reason="interrupted")
        return 1

    logger.info("got_random_quote", content=quote.content, author=quote.author)
    print(f'"{quote.content}" - {quote.author}' if quote.author else f'"{quote.content}"')
    return 0


def server() -> None:
    sys.exit(run_server())


def client() -> None:
    sys.exit(run_client())
