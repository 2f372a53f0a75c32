"""User-space TCP building blocks: byte streams, reassembly, a receiver, sequence numbers, headers and sockets."""

__version__ = "0.1.0"