"""A dynamic MessagePack value model with compact encoding and depth-limited decoding."""

__version__ = "0.1.0"