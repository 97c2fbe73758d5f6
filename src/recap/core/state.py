"""In-memory application state."""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..integrations.linear_client import Issue
from .documents import DocumentCollector


@dataclass
class SummaryResult:
    """A generated performance summary."""

    content: str
    model: str = ""
    generated_at: float = field(default_factory=time.time)
    usage: Dict[str, Any] = field(default_factory=dict)


@dataclass
class AppState:
    """Everything the window shows, owned by the orchestrator.

    ``issues`` is replaced wholesale by each successful fetch and
    ``summary`` by each successful generation. Nothing is persisted.
    """

    issues: List[Issue] = field(default_factory=list)
    collector: DocumentCollector = field(default_factory=DocumentCollector)
    summary: Optional[SummaryResult] = None

    @property
    def documents(self):
        return self.collector.documents

    def has_inputs(self) -> bool:
        return bool(self.issues) or len(self.collector) > 0
