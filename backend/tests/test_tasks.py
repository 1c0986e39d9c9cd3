"""Celery reminder task locking."""

from unittest.mock import MagicMock, patch

import pytest

from marketplace.workers import tasks


def _redis_with_lock(acquired: bool) -> tuple[MagicMock, MagicMock]:
    lock = MagicMock()
    lock.acquire.return_value = acquired
    client = MagicMock()
    client.lock.return_value = lock
    return client, lock


class TestSendMeetingReminders:
    def test_skips_when_lock_is_held(self):
        client, lock = _redis_with_lock(False)
        with patch.object(tasks, "get_redis", return_value=client), patch.object(tasks, "run_reminders") as run:
            assert tasks.send_meeting_reminders() == {"status": "skipped"}

        run.assert_not_called()
        lock.release.assert_not_called()
        lock.acquire.assert_called_once_with(blocking=False)

    def test_runs_and_releases_lock(self):
        client, lock = _redis_with_lock(True)
        outcome = {"status": "ok", "reminders_sent": 3}
        with patch.object(tasks, "get_redis", return_value=client), \
                patch.object(tasks, "run_reminders", return_value=outcome):
            assert tasks.send_meeting_reminders() == outcome

        client.lock.assert_called_once_with(tasks.REMINDER_LOCK_NAME, timeout=tasks.settings.REMINDER_LOCK_TIMEOUT_SECONDS)
        lock.release.assert_called_once()

    def test_lock_released_when_run_fails(self):
        client, lock = _redis_with_lock(True)
        with patch.object(tasks, "get_redis", return_value=client), \
                patch.object(tasks, "run_reminders", side_effect=RuntimeError("db down")):
            with pytest.raises(RuntimeError):
                tasks.send_meeting_reminders()

        lock.release.assert_called_once()

    def test_run_reminders_uses_its_own_session(self):
        session = MagicMock()
        with patch.object(tasks, "SessionLocal", return_value=session), \
                patch.object(tasks, "send_due_reminders", return_value=2) as send:
            assert tasks.run_reminders() == {"status": "ok", "reminders_sent": 2}

        send.assert_called_once_with(session)
        session.close.assert_called_once()
