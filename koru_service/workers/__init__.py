"""Background consumers of the event bus."""

from koru_service.workers.worker import Worker

__all__ = ["Worker"]
