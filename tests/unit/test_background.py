"""
Unit tests for the background task queues.
"""

import logging
import threading

from shopdesk.services.background import BackgroundTaskQueue, ImmediateTaskQueue


class TestBackgroundTaskQueue:
    def test_tasks_run_off_the_calling_thread(self):
        queue = BackgroundTaskQueue(max_workers=1)
        seen = []

        queue.submit("record-thread", lambda: seen.append(threading.current_thread()))

        assert queue.wait_idle(timeout=5)
        queue.shutdown()
        assert seen and seen[0] is not threading.current_thread()

    def test_failing_task_is_logged_and_isolated(self, caplog):
        """
        GIVEN a task that raises
        WHEN it runs in the background
        THEN the caller is unaffected, the failure is logged and later tasks still run
        """
        queue = BackgroundTaskQueue(max_workers=1)
        done = []

        def broken():
            raise RuntimeError("audit insert failed")

        with caplog.at_level(logging.ERROR, logger="shopdesk.services.background"):
            queue.submit("audit-write", broken)
            queue.submit("after", done.append, 1)
            assert queue.wait_idle(timeout=5)
        queue.shutdown()

        assert done == [1]
        assert "audit-write" in caplog.text

    def test_wait_idle_with_nothing_pending(self):
        queue = BackgroundTaskQueue()

        assert queue.wait_idle(timeout=0.1)
        queue.shutdown()


class TestImmediateTaskQueue:
    def test_runs_inline_with_arguments(self):
        queue = ImmediateTaskQueue()
        received = []

        queue.submit("inline", lambda a, b=None: received.append((a, b)), 1, b=2)

        assert received == [(1, 2)]

    def test_swallows_and_logs_failures(self, caplog):
        queue = ImmediateTaskQueue()

        def broken():
            raise ValueError("boom")

        with caplog.at_level(logging.ERROR):
            queue.submit("broken-task", broken)

        assert "broken-task" in caplog.text
