"""Fixed-length record tables with primary and secondary indexes, and a command to manage them."""

__version__ = "0.1.0"