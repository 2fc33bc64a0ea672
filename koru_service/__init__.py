"""Group expense backend: transactional event outbox and processing pipeline."""

__version__ = "0.1.0"
