"""Collection of user-supplied performance documents."""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Tuple, Union

from ..utils.exceptions import DocumentError, ValidationError
from ..utils.logging_config import get_logger
from ..utils.validators import InputValidator

PathLike = Union[str, Path]


@dataclass(frozen=True)
class UploadedDocument:
    """A markdown document added by the user."""

    name: str
    content: str


class DocumentCollector:
    """Ordered, mutable list of uploaded documents.

    Entries are appended in upload order and removed by position. There is
    no deduplication: uploading the same file twice keeps both copies.
    """

    def __init__(self) -> None:
        self.logger = get_logger(__name__)
        self._documents: List[UploadedDocument] = []

    @property
    def documents(self) -> Tuple[UploadedDocument, ...]:
        return tuple(self._documents)

    def __len__(self) -> int:
        return len(self._documents)

    def add_files(self, paths: Iterable[PathLike]) -> List[UploadedDocument]:
        """Read every ``.md`` file in ``paths`` and append it.

        Non-markdown files are skipped. Files read before a failing one stay
        in the collection.

        Returns:
            The documents appended by this call, in order.

        Raises:
            DocumentError: If a markdown file cannot be read.
        """
        added = []

        for path in paths:
            path = Path(path)
            if not InputValidator.is_supported_document(path.name):
                self.logger.debug(f"Skipping unsupported file: {path.name}")
                continue

            try:
                content = path.read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                self.logger.error(f"Failed to read {path}: {e}")
                raise DocumentError(
                    f"Failed to read {path.name}: {e}", {"path": str(path)}
                ) from e

            document = UploadedDocument(name=path.name, content=content)
            self._documents.append(document)
            added.append(document)

        self.logger.info(
            f"Added {len(added)} document(s), {len(self._documents)} total"
        )
        return added

    def add_document(self, name: str, content: str) -> UploadedDocument:
        """Append a document whose text is already in memory."""
        document = UploadedDocument(name=name, content=content)
        self._documents.append(document)
        return document

    def remove(self, index: int) -> UploadedDocument:
        """Remove the document at zero-based ``index``."""
        if not 0 <= index < len(self._documents):
            raise ValidationError(
                f"No document at position {index}",
                {"index": index, "count": len(self._documents)},
            )

        document = self._documents.pop(index)
        self.logger.info(f"Removed document {document.name}")
        return document
