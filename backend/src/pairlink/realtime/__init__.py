"""Room expiry timers and the process-wide relay wiring."""

from .expiration import ExpirationScheduler  # noqa: F401

__all__ = ["ExpirationScheduler"]
