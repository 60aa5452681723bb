"""Operation dispatch: request building and per-item execution."""

from .builder import RequestBuilder
from .engine import OperationDispatcher

__all__ = ["OperationDispatcher", "RequestBuilder"]
