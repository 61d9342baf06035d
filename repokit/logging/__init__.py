from .logger import LogConfig, get_logger, trace_context

__all__ = ["LogConfig", "get_logger", "trace_context"]
