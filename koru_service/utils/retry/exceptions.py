"""Errors raised by the retry utilities."""

from __future__ import annotations


class RetryError(Exception):
    """All attempts failed; ``last_exception`` is the error of the final one."""

    def __init__(self, last_exception: Exception, attempts: int, total_delay: float = 0.0) -> None:
        self.last_exception = last_exception
        self.attempts = attempts
        self.total_delay = total_delay
        super().__init__(f"Failed after {attempts} attempts. Last error: {last_exception}")
