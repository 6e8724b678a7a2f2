"""Quote service protected by a hashcash-style proof-of-work challenge."""

__version__ = "0.1.0"
