from wow.transport.connection import Connection, parse_address
from wow.transport.gate import ConnectionGate
from wow.transport.server import TCPServer

__all__ = [
    "Connection",
    "ConnectionGate",
    "TCPServer",
    "parse_address",
]
