"""Tests for worker assembly."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from koru_service.features.notifications import Notifier
from koru_service.infra.notifications import InMemoryNotificationService
from koru_service.workers import Worker


@pytest.mark.unit
class TestWorker:
    def test_registers_notifier_when_notifications_enabled(self, store):
        listener = MagicMock()

        worker = Worker.build(listener, store, InMemoryNotificationService())

        [processor] = worker.processors
        assert isinstance(processor, Notifier)
        listener.register.assert_called_once_with(processor)

    def test_no_processors_without_notifications(self, store):
        listener = MagicMock()

        worker = Worker.build(listener, store, None)

        assert worker.processors == ()
        listener.register.assert_not_called()

    @pytest.mark.asyncio
    async def test_run_listens(self, store):
        listener = MagicMock()
        listener.listen = AsyncMock()

        await Worker(listener).run()

        listener.listen.assert_awaited_once()
