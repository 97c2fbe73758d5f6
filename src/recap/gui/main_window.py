"""Main window for Recap."""

from datetime import date, timedelta
from enum import Enum
from typing import Optional

from PySide6.QtCore import QDate, Qt, QTimer
from PySide6.QtGui import QAction, QFont
from PySide6.QtWidgets import (
    QDateEdit,
    QFileDialog,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QMainWindow,
    QMessageBox,
    QProgressBar,
    QPushButton,
    QScrollArea,
    QStackedWidget,
    QStatusBar,
    QTextBrowser,
    QVBoxLayout,
    QWidget,
)

from ..core.config_manager import ConfigManager
from ..core.export_manager import ExportManager
from ..core.orchestrator import OperationResult, RecapOrchestrator
from ..utils.exceptions import RecapError
from ..utils.formatting import markdown_to_html, render_error_html, render_issues_html
from ..utils.logging_config import get_logger
from .drop_zone import DropZone
from .workers import FetchWorker, OperationWorker, SummaryWorker

COPY_LABEL = "Copy"
COPIED_LABEL = "Copied!"
COPIED_RESET_MS = 2000


class ViewState(Enum):
    """Enumeration of possible view states."""

    MAIN = "main"
    PROGRESS = "progress"


class RecapMainWindow(QMainWindow):
    """Single window: period and issues, documents, and the summary."""

    def __init__(
        self,
        orchestrator: Optional[RecapOrchestrator] = None,
        config_manager: Optional[ConfigManager] = None,
    ):
        super().__init__()

        self.logger = get_logger(__name__)
        self.config_manager = config_manager or ConfigManager()
        self.orchestrator = orchestrator or RecapOrchestrator(self.config_manager)
        self.export_manager = ExportManager()

        self.current_view = ViewState.MAIN
        self.worker: Optional[OperationWorker] = None

        self.init_ui()
        self.set_default_dates()

    def init_ui(self):
        self.setWindowTitle("Recap - Performance Summary")
        self.setGeometry(100, 100, 1000, 860)

        self.create_menu_bar()

        self.stacked_widget = QStackedWidget()
        self.setCentralWidget(self.stacked_widget)

        self.create_main_view()
        self.create_progress_view()
        self.create_status_bar()
        self.apply_styling()

    def create_menu_bar(self):
        menu_bar = self.menuBar()

        file_menu = menu_bar.addMenu("&File")

        self.export_action = QAction("&Export Summary...", self)
        self.export_action.setShortcut("Ctrl+E")
        self.export_action.setEnabled(False)
        self.export_action.triggered.connect(self.export_summary)
        file_menu.addAction(self.export_action)

        file_menu.addSeparator()

        quit_action = QAction("&Quit", self)
        quit_action.setShortcut("Ctrl+Q")
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

        help_menu = menu_bar.addMenu("&Help")
        about_action = QAction("&About", self)
        about_action.triggered.connect(self.show_about)
        help_menu.addAction(about_action)

    def create_main_view(self):
        scroll = QScrollArea()
        scroll.setWidgetResizable(True)

        main_widget = QWidget()
        layout = QVBoxLayout(main_widget)

        # Period and Linear issues
        issues_group = QGroupBox("Linear Issues")
        issues_layout = QVBoxLayout(issues_group)

        date_layout = QFormLayout()
        self.start_date_edit = QDateEdit()
        self.start_date_edit.setCalendarPopup(True)
        self.start_date_edit.setDisplayFormat("yyyy-MM-dd")
        date_layout.addRow("Start Date:", self.start_date_edit)

        self.end_date_edit = QDateEdit()
        self.end_date_edit.setCalendarPopup(True)
        self.end_date_edit.setDisplayFormat("yyyy-MM-dd")
        date_layout.addRow("End Date:", self.end_date_edit)
        issues_layout.addLayout(date_layout)

        self.fetch_btn = QPushButton("Fetch Linear Issues")
        self.fetch_btn.setMinimumHeight(36)
        self.fetch_btn.clicked.connect(self.fetch_issues)
        issues_layout.addWidget(self.fetch_btn)

        self.issues_browser = QTextBrowser()
        self.issues_browser.setOpenExternalLinks(True)
        self.issues_browser.setMinimumHeight(180)
        issues_layout.addWidget(self.issues_browser)

        layout.addWidget(issues_group)

        # Performance documents
        docs_group = QGroupBox("Performance Documents")
        docs_layout = QVBoxLayout(docs_group)

        self.drop_zone = DropZone()
        self.drop_zone.files_selected.connect(self.add_documents)
        docs_layout.addWidget(self.drop_zone)

        self.documents_list = QListWidget()
        self.documents_list.setMaximumHeight(140)
        docs_layout.addWidget(self.documents_list)

        layout.addWidget(docs_group)

        self.generate_btn = QPushButton("Generate Summary")
        self.generate_btn.setMinimumHeight(40)
        self.generate_btn.clicked.connect(self.generate_summary)
        layout.addWidget(self.generate_btn)

        # Result
        self.result_group = QGroupBox("Performance Summary")
        result_layout = QVBoxLayout(self.result_group)

        result_actions = QHBoxLayout()
        result_actions.addStretch()
        self.copy_btn = QPushButton(COPY_LABEL)
        self.copy_btn.clicked.connect(self.copy_result)
        result_actions.addWidget(self.copy_btn)
        self.export_btn = QPushButton("Export...")
        self.export_btn.clicked.connect(self.export_summary)
        result_actions.addWidget(self.export_btn)
        result_layout.addLayout(result_actions)

        self.result_browser = QTextBrowser()
        self.result_browser.setOpenExternalLinks(True)
        self.result_browser.setMinimumHeight(260)
        result_layout.addWidget(self.result_browser)

        self.result_group.setVisible(False)
        layout.addWidget(self.result_group)
        layout.addStretch()

        scroll.setWidget(main_widget)
        self.main_scroll = scroll
        self.stacked_widget.addWidget(scroll)

    def create_progress_view(self):
        progress_widget = QWidget()
        layout = QVBoxLayout(progress_widget)
        layout.setAlignment(Qt.AlignCenter)

        self.progress_main_label = QLabel("Loading...")
        self.progress_main_label.setAlignment(Qt.AlignCenter)
        font = QFont()
        font.setPointSize(14)
        font.setBold(True)
        self.progress_main_label.setFont(font)
        layout.addWidget(self.progress_main_label)

        self.progress_bar = QProgressBar()
        self.progress_bar.setRange(0, 0)  # Indeterminate
        self.progress_bar.setMaximumWidth(400)
        layout.addWidget(self.progress_bar, alignment=Qt.AlignCenter)

        self.stacked_widget.addWidget(progress_widget)

    def create_status_bar(self):
        self.status_bar = QStatusBar()
        self.setStatusBar(self.status_bar)

        self.status_label = QLabel("Ready")
        self.status_bar.addWidget(self.status_label)

    def apply_styling(self):
        self.setStyleSheet(
            """
        QMainWindow {
            background-color: #f5f5f5;
        }

        QGroupBox {
            font-weight: bold;
            border: 1px solid #e0e0e0;
            border-radius: 5px;
            margin-top: 10px;
            padding-top: 10px;
            background-color: white;
        }

        QGroupBox::title {
            subcontrol-origin: margin;
            subcontrol-position: top left;
            padding: 0 10px;
        }

        QPushButton {
            background-color: #7c3aed;
            color: white;
            border: none;
            padding: 8px 16px;
            border-radius: 4px;
            font-weight: bold;
        }

        QPushButton:hover {
            background-color: #6d28d9;
        }

        QPushButton:disabled {
            background-color: #cccccc;
            color: #666666;
        }

        #dropZone {
            border: 2px dashed #c4b5fd;
            border-radius: 8px;
            background-color: #faf5ff;
        }

        #dropZone[dragover="true"] {
            border-color: #7c3aed;
            background-color: #ede9fe;
        }
        """
        )

    def set_default_dates(self):
        """End today, start ``default_range_days`` earlier."""
        days = self.config_manager.get_app_config().default_range_days
        today = date.today()
        start = today - timedelta(days=days)
        self.end_date_edit.setDate(QDate(today.year, today.month, today.day))
        self.start_date_edit.setDate(QDate(start.year, start.month, start.day))

    def switch_view(self, view_state: ViewState):
        self.current_view = view_state
        if view_state == ViewState.MAIN:
            self.stacked_widget.setCurrentIndex(0)
        else:
            self.stacked_widget.setCurrentIndex(1)

    def show_progress_message(self, message: str):
        self.progress_main_label.setText(message or "Loading...")
        self.switch_view(ViewState.PROGRESS)

    def hide_progress_message(self):
        if self.current_view == ViewState.PROGRESS:
            self.switch_view(ViewState.MAIN)

    def on_loading_changed(self, active: bool, message: str):
        if active:
            self.show_progress_message(message)
        else:
            self.hide_progress_message()

    def set_busy(self, busy: bool):
        self.fetch_btn.setEnabled(not busy)
        self.generate_btn.setEnabled(not busy)

    def _start_worker(self, worker: OperationWorker, on_complete, on_failed):
        self.worker = worker
        worker.loading_changed.connect(self.on_loading_changed)
        worker.operation_complete.connect(on_complete)
        worker.operation_failed.connect(on_failed)
        worker.finished.connect(lambda: self.set_busy(False))
        self.set_busy(True)
        worker.start()

    def _operation_running(self) -> bool:
        if self.orchestrator.is_busy or (self.worker and self.worker.isRunning()):
            self.show_warning("Please wait", "Another operation is still running.")
            return True
        return False

    def fetch_issues(self):
        """Fetch completed Linear issues for the selected period."""
        start = self.start_date_edit.date().toPython()
        end = self.end_date_edit.date().toPython()

        try:
            self.orchestrator.validate_fetch_request(start, end)
        except RecapError as e:
            self.show_warning("Missing period", str(e))
            return

        if self._operation_running():
            return

        worker = FetchWorker(self.orchestrator, start, end)
        self._start_worker(worker, self.on_fetch_complete, self.on_fetch_failed)

    def on_fetch_complete(self, result: OperationResult):
        self.render_issues()
        self.status_label.setText(f"Fetched {len(result.payload)} issues")

    def on_fetch_failed(self, message: str):
        self.issues_browser.setHtml(render_error_html(message))
        self.status_label.setText("Failed to fetch Linear issues")

    def render_issues(self):
        self.issues_browser.setHtml(render_issues_html(self.orchestrator.issues))

    def add_documents(self, paths):
        """Collect the markdown files among ``paths``."""
        if self._operation_running():
            return

        self.orchestrator.set_loading_callback(self.on_loading_changed)
        try:
            added = self.orchestrator.add_documents(paths)
            self.status_label.setText(f"Added {len(added)} document(s)")
        except RecapError as e:
            self.logger.error(f"Failed to add documents: {e}")
            self.show_error("Document Error", str(e))
        finally:
            self.render_documents()

    def remove_document(self, index: int):
        try:
            self.orchestrator.remove_document(index)
        except RecapError as e:
            self.show_error("Document Error", str(e))
        self.render_documents()

    def render_documents(self):
        self.documents_list.clear()

        for index, document in enumerate(self.orchestrator.documents):
            row = QWidget()
            row_layout = QHBoxLayout(row)
            row_layout.setContentsMargins(6, 2, 6, 2)
            row_layout.addWidget(QLabel(document.name))
            row_layout.addStretch()

            remove_btn = QPushButton("Remove")
            remove_btn.setObjectName(f"removeDocument_{index}")
            remove_btn.clicked.connect(
                lambda _checked=False, i=index: self.remove_document(i)
            )
            row_layout.addWidget(remove_btn)

            item = QListWidgetItem(self.documents_list)
            item.setSizeHint(row.sizeHint())
            self.documents_list.setItemWidget(item, row)

    def generate_summary(self):
        """Generate the performance summary from issues and documents."""
        try:
            self.orchestrator.validate_generate_request()
        except RecapError as e:
            self.show_warning("Nothing to summarize", str(e))
            return

        if self._operation_running():
            return

        worker = SummaryWorker(self.orchestrator)
        self._start_worker(worker, self.on_summary_complete, self.on_summary_failed)

    def on_summary_complete(self, result: OperationResult):
        self.result_browser.setHtml(markdown_to_html(result.payload.content))
        self.result_group.setVisible(True)
        self.export_action.setEnabled(True)
        self.main_scroll.ensureWidgetVisible(self.result_group)
        self.status_label.setText("Summary generated successfully")

    def on_summary_failed(self, message: str):
        self.status_label.setText("Summary generation failed")
        self.show_error(
            "Summary Generation Error", f"Failed to generate summary: {message}"
        )

    def copy_result(self):
        """Copy the rendered summary as plain text."""
        try:
            self.export_manager.copy_to_clipboard(self.result_browser.toPlainText())
        except RecapError as e:
            self.show_error("Copy Error", str(e))
            return

        self.copy_btn.setText(COPIED_LABEL)
        QTimer.singleShot(COPIED_RESET_MS, lambda: self.copy_btn.setText(COPY_LABEL))

    def export_summary(self):
        summary = self.orchestrator.summary
        if summary is None:
            self.show_warning("No Summary", "Please generate a summary first")
            return

        filepath, _ = QFileDialog.getSaveFileName(
            self,
            "Export Summary",
            self.export_manager.default_filename("markdown"),
            "Markdown (*.md);;HTML (*.html);;Text (*.txt);;PDF (*.pdf)",
        )
        if not filepath:
            return

        try:
            format = self.export_manager.format_for_path(filepath)
            self.export_manager.export_summary(summary, format, filepath)
            self.status_label.setText(f"Summary exported to {filepath}")
        except RecapError as e:
            self.logger.error(f"Failed to export summary: {e}")
            self.show_error("Export Error", str(e))

    def show_about(self):
        QMessageBox.about(
            self,
            "About",
            """
        <h2>Recap</h2>
        <p>Version 1.0.0</p>
        <p>Turns completed Linear issues and your own notes into a
        performance review summary with Google Gemini.</p>
        <p>Built with PySide6 and Python.</p>
        """,
        )

    def show_error(self, title: str, message: str):
        QMessageBox.critical(self, title, message)

    def show_warning(self, title: str, message: str):
        QMessageBox.warning(self, title, message)

    def closeEvent(self, event):
        if self.worker and self.worker.isRunning():
            self.worker.wait(5000)
        event.accept()
