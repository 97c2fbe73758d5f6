"""Background workers that run orchestrator operations off the UI thread."""

import asyncio
from datetime import date

from PySide6.QtCore import QThread, Signal

from ..core.orchestrator import OperationResult, RecapOrchestrator
from ..utils.logging_config import get_logger


class OperationWorker(QThread):
    """Runs one orchestrator coroutine on a private event loop.

    Subclasses implement ``_run_operation``.
    """

    loading_changed = Signal(bool, str)  # active, message
    operation_complete = Signal(object)  # OperationResult
    operation_failed = Signal(str)  # error message

    def __init__(self, orchestrator: RecapOrchestrator, parent=None):
        super().__init__(parent)

        self.logger = get_logger(__name__)
        self.orchestrator = orchestrator
        self.orchestrator.set_loading_callback(self._on_loading)

    def _on_loading(self, active: bool, message: str) -> None:
        self.loading_changed.emit(active, message)

    async def _run_operation(self) -> OperationResult:
        raise NotImplementedError

    def run(self):
        loop = None
        try:
            loop = asyncio.new_event_loop()
            asyncio.set_event_loop(loop)

            result = loop.run_until_complete(self._run_operation())

            if result.succeeded:
                self.operation_complete.emit(result)
            else:
                self.operation_failed.emit(
                    result.error_message or "Unknown error occurred"
                )

        except Exception as e:
            self.logger.error(f"{self.__class__.__name__} error: {e}")
            self.operation_failed.emit(str(e))

        finally:
            if loop is not None:
                try:
                    pending = asyncio.all_tasks(loop)
                    for task in pending:
                        task.cancel()
                    if pending:
                        loop.run_until_complete(
                            asyncio.gather(*pending, return_exceptions=True)
                        )
                    loop.close()
                except Exception as e:
                    self.logger.error(f"Error closing event loop: {e}")


class FetchWorker(OperationWorker):
    """Fetches completed Linear issues for a date range."""

    def __init__(
        self,
        orchestrator: RecapOrchestrator,
        start_date: date,
        end_date: date,
        parent=None,
    ):
        super().__init__(orchestrator, parent)
        self.start_date = start_date
        self.end_date = end_date

    async def _run_operation(self) -> OperationResult:
        self.logger.info("Starting Linear fetch in background")
        return await self.orchestrator.fetch_issues(self.start_date, self.end_date)


class SummaryWorker(OperationWorker):
    """Generates the performance summary."""

    async def _run_operation(self) -> OperationResult:
        self.logger.info("Starting summary generation in background")
        return await self.orchestrator.generate_summary()
