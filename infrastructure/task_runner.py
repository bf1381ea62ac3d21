"""Qt thread-pool task runner.

Work runs on `QThreadPool`; completions are emitted through a signal of a
QObject living on the creating (main) thread, so Qt queues them back onto
that thread's event loop.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal
from loguru import logger


class _Task(QRunnable):
    """QRunnable executing one unit of work and forwarding its outcome."""

    def __init__(
        self,
        work: Callable[[], Any],
        done: Callable[[Any, BaseException | None], None],
        runner: QtTaskRunner,
    ) -> None:
        super().__init__()
        self._work = work
        self._done = done
        self._runner = runner

    def run(self) -> None:  # type: ignore[override]
        result: Any = None
        error: BaseException | None = None
        try:
            result = self._work()
        except Exception as ex:  # delivered to the owner as the error
            logger.debug("Background task raised: {}", ex)
            error = ex
        self._runner.finished.emit(self._done, result, error)


class QtTaskRunner(QObject):
    """Dispatches work to a thread pool and delivers results on the owner thread."""

    finished = Signal(object, object, object)  # done, result, error

    def __init__(self, pool: QThreadPool | None = None, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._pool = pool or QThreadPool.globalInstance()
        self.finished.connect(self._deliver)

    def submit(
        self, work: Callable[[], Any], done: Callable[[Any, BaseException | None], None]
    ) -> None:
        self._pool.start(_Task(work, done, self))

    def _deliver(self, done: Callable[[Any, BaseException | None], None], result: Any, error: Any) -> None:
        done(result, error)
