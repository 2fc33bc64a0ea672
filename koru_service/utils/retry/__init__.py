from __future__ import annotations

from koru_service.utils.retry.decorator import retry
from koru_service.utils.retry.exceptions import RetryError
from koru_service.utils.retry.strategies import RetryStrategy

__all__ = ["retry", "RetryError", "RetryStrategy"]
