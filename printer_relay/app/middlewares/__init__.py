from .cors import CORSMiddleware
from .logging import LoggingMiddleware
from .request_id import RequestIdMiddleware

__all__ = [
    "CORSMiddleware",
    "LoggingMiddleware",
    "RequestIdMiddleware",
]
