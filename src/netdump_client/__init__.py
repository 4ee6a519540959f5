"""Client for the NETDUMP disc dumping protocol."""

__version__ = "0.1.0"
