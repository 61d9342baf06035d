from .merge import merge, writable_fields

__all__ = ["merge", "writable_fields"]
