"""Orchestrates fetching, document collection and summary generation."""

import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Callable, Iterable, List, Optional, Tuple

from ..utils.exceptions import OperationInProgressError, ValidationError
from ..utils.formatting import build_review_prompt
from ..utils.logging_config import get_logger, get_security_logger
from ..utils.validators import DateInput, InputValidator
from .config_manager import ConfigManager
from .documents import PathLike, UploadedDocument
from .service_factory import ServiceFactory
from .state import AppState, SummaryResult

FETCH_MESSAGE = "Fetching Linear issues..."
READ_MESSAGE = "Reading documents..."
GENERATE_MESSAGE = "Generating summary with Gemini..."
EMPTY_INPUTS_MESSAGE = "Please fetch Linear issues or upload performance docs first"

LoadingCallback = Callable[[bool, str], None]


class OperationStatus(Enum):
    """Outcome of a user-triggered operation."""

    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class OperationResult:
    """Result of a fetch or generate operation."""

    status: OperationStatus
    payload: Any = None
    error_message: Optional[str] = None
    execution_time: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.status == OperationStatus.COMPLETED


class RecapOrchestrator:
    """Composition root owning the application state.

    Each operation goes Idle -> Working -> Completed/Failed -> Idle.
    Precondition failures (missing dates, nothing to summarise) raise
    ``ValidationError`` before anything starts. Upstream failures are logged
    and returned as a FAILED ``OperationResult``, leaving the previous
    state untouched. Only one operation may run at a time.

    Example:
        ```python
        orchestrator = RecapOrchestrator(ConfigManager())
        orchestrator.set_loading_callback(show_spinner)

        await orchestrator.fetch_issues("2024-01-01", "2024-01-31")
        orchestrator.add_documents(["notes.md"])
        result = await orchestrator.generate_summary()
        ```
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        service_factory: Optional[ServiceFactory] = None,
    ) -> None:
        self.config_manager = config_manager
        self.service_factory = service_factory or ServiceFactory(config_manager)
        self.state = AppState()

        self.logger = get_logger(__name__)
        self.security_logger = get_security_logger()

        self.loading_callback: Optional[LoadingCallback] = None
        self._operation_lock = threading.Lock()

    def set_loading_callback(self, callback: LoadingCallback) -> None:
        """Register ``callback(active, message)`` for the loading indicator."""
        self.loading_callback = callback

    def _set_loading(self, active: bool, message: str = "") -> None:
        if self.loading_callback:
            self.loading_callback(active, message)

    @property
    def is_busy(self) -> bool:
        return self._operation_lock.locked()

    @contextmanager
    def _operation(self, message: str):
        """Hold the single-flight lock and the loading indicator."""
        if not self._operation_lock.acquire(blocking=False):
            raise OperationInProgressError(
                "Another operation is still running. Please wait for it to finish."
            )

        try:
            self._set_loading(True, message)
            yield
        finally:
            self._set_loading(False, "")
            self._operation_lock.release()

    @property
    def issues(self):
        return list(self.state.issues)

    @property
    def documents(self) -> Tuple[UploadedDocument, ...]:
        return self.state.documents

    @property
    def summary(self) -> Optional[SummaryResult]:
        return self.state.summary

    def validate_fetch_request(
        self, start_date: DateInput, end_date: DateInput
    ) -> Tuple[date, date]:
        """Check that both ends of the period are set."""
        return InputValidator.validate_date_range(start_date, end_date)

    def validate_generate_request(self) -> None:
        """Check that there is something to summarise."""
        if not self.state.has_inputs():
            raise ValidationError(EMPTY_INPUTS_MESSAGE)

    async def fetch_issues(
        self, start_date: DateInput, end_date: DateInput
    ) -> OperationResult:
        """Replace the held issues with those completed in the period.

        Raises:
            ValidationError: If either date is missing.
            OperationInProgressError: If another operation is running.
        """
        start, end = self.validate_fetch_request(start_date, end_date)
        started = time.time()

        with self._operation(FETCH_MESSAGE):
            try:
                client = await self.service_factory.create_linear_client()
                issues = await client.fetch_completed_issues(start, end)
            except Exception as e:
                self.logger.error(f"Linear API Error: {e}")
                self.security_logger.log_error(
                    error_type=type(e).__name__, error_message=str(e), stage="fetch"
                )
                return OperationResult(
                    status=OperationStatus.FAILED,
                    error_message=str(e),
                    execution_time=time.time() - started,
                )
            finally:
                await self.service_factory.close_all()

            self.state.issues = issues

        return OperationResult(
            status=OperationStatus.COMPLETED,
            payload=list(issues),
            execution_time=time.time() - started,
        )

    def add_documents(self, paths: Iterable[PathLike]) -> List[UploadedDocument]:
        """Append every markdown file in ``paths``; others are skipped.

        Raises:
            DocumentError: If a markdown file cannot be read.
            OperationInProgressError: If another operation is running.
        """
        with self._operation(READ_MESSAGE):
            return self.state.collector.add_files(paths)

    def remove_document(self, index: int) -> UploadedDocument:
        """Remove the document at zero-based ``index``."""
        return self.state.collector.remove(index)

    async def generate_summary(self) -> OperationResult:
        """Summarise the held issues and documents with Gemini.

        Raises:
            ValidationError: If there are no issues and no documents.
            OperationInProgressError: If another operation is running.
        """
        self.validate_generate_request()
        started = time.time()

        # Snapshot inputs so edits during the request do not leak in
        prompt = build_review_prompt(self.state.issues, self.state.documents)

        with self._operation(GENERATE_MESSAGE):
            try:
                client = await self.service_factory.create_gemini_client()
                response = await client.generate_summary(prompt)
            except Exception as e:
                self.logger.error(f"Gemini API Error: {e}")
                self.security_logger.log_error(
                    error_type=type(e).__name__,
                    error_message=str(e),
                    stage="generate",
                )
                return OperationResult(
                    status=OperationStatus.FAILED,
                    error_message=str(e),
                    execution_time=time.time() - started,
                )
            finally:
                await self.service_factory.close_all()

            summary = SummaryResult(
                content=response["content"],
                model=response.get("model", ""),
                generated_at=response.get("generated_at", time.time()),
                usage=response.get("usage", {}),
            )
            self.state.summary = summary

        self.logger.info(
            f"Summary generated from {len(self.state.issues)} issues and "
            f"{len(self.state.documents)} documents"
        )
        return OperationResult(
            status=OperationStatus.COMPLETED,
            payload=summary,
            execution_time=time.time() - started,
        )

    async def test_connections(self):
        """Check both API keys against their services."""
        try:
            return await self.service_factory.test_connections()
        finally:
            await self.service_factory.close_all()
