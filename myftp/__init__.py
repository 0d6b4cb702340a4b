"""A small single-threaded FTP server with anonymous login and PASV/PORT transfers."""

__version__ = "0.1.0"
__all__ = ["__version__"]