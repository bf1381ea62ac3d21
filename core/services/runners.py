"""Toolkit-free task runner."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any


class ImmediateRunner:
    """Runs work inline on the calling thread.

    Used by headless callers and tests; the Qt application uses the thread
    pool runner from `infrastructure.task_runner` instead.
    """

    def submit(
        self, work: Callable[[], Any], done: Callable[[Any, BaseException | None], None]
    ) -> None:
        try:
            result = work()
        except Exception as ex:  # delivered to the caller as the error
            done(None, ex)
            return
        done(result, None)
