"""CTFd provider package."""

from .provider import CTFdProvider

__all__ = ["CTFdProvider"]
