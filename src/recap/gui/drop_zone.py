"""Drag-and-drop target for performance documents."""

from typing import List

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import QFileDialog, QFrame, QLabel, QVBoxLayout


class DropZone(QFrame):
    """Accepts dropped files or opens a file dialog when clicked.

    Emits ``files_selected`` with local paths; filtering by extension is
    left to the document collector.
    """

    files_selected = Signal(list)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setObjectName("dropZone")
        self.setAcceptDrops(True)
        self.setCursor(Qt.PointingHandCursor)
        self.setMinimumHeight(90)

        layout = QVBoxLayout(self)
        self.label = QLabel("Drop .md files here or click to browse")
        self.label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.label)

        self._set_dragover(False)

    def _set_dragover(self, active: bool) -> None:
        self.setProperty("dragover", active)
        self.style().unpolish(self)
        self.style().polish(self)

    def dragEnterEvent(self, event):
        if event.mimeData().hasUrls():
            event.acceptProposedAction()
            self._set_dragover(True)
        else:
            event.ignore()

    def dragMoveEvent(self, event):
        if event.mimeData().hasUrls():
            event.acceptProposedAction()

    def dragLeaveEvent(self, event):
        self._set_dragover(False)
        super().dragLeaveEvent(event)

    def dropEvent(self, event):
        self._set_dragover(False)
        paths = [
            url.toLocalFile() for url in event.mimeData().urls() if url.isLocalFile()
        ]
        event.acceptProposedAction()
        if paths:
            self.files_selected.emit(paths)

    def mouseReleaseEvent(self, event):
        if event.button() == Qt.LeftButton:
            self.browse()
        super().mouseReleaseEvent(event)

    def browse(self) -> List[str]:
        """Open a file dialog and emit the chosen paths."""
        paths, _ = QFileDialog.getOpenFileNames(
            self, "Select performance documents", "", "Markdown (*.md);;All files (*)"
        )
        if paths:
            self.files_selected.emit(paths)
        return paths
