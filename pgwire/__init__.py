"""PostgreSQL wire protocol buffers, array text codecs and message helpers."""

__version__ = "0.1.0"
__all__ = ["arrays", "arraytext", "buffers", "describe", "generic", "messages", "protocol"]