"""Main application entry point for Recap."""

import argparse
import asyncio
import sys
from datetime import date, timedelta
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QtMsgType, qInstallMessageHandler
from PySide6.QtGui import QIcon
from PySide6.QtWidgets import QApplication, QMessageBox

from . import __version__
from .core.config_manager import ConfigManager
from .core.export_manager import EXPORT_FORMATS, ExportManager
from .core.orchestrator import RecapOrchestrator
from .gui.main_window import RecapMainWindow
from .utils.exceptions import RecapError
from .utils.logging_config import get_logger, setup_logging


def qt_message_handler(mode: QtMsgType, context, message: str):
    """Custom Qt message handler for logging."""
    logger = get_logger("qt")

    if mode == QtMsgType.QtDebugMsg:
        logger.debug(f"Qt Debug: {message}")
    elif mode == QtMsgType.QtWarningMsg:
        logger.warning(f"Qt Warning: {message}")
    elif mode == QtMsgType.QtCriticalMsg:
        logger.error(f"Qt Critical: {message}")
    elif mode == QtMsgType.QtFatalMsg:
        logger.critical(f"Qt Fatal: {message}")


def setup_application_paths() -> Path:
    """Create ``~/.recap/logs`` and return ``~/.recap``."""
    app_dir = Path.home() / ".recap"
    (app_dir / "logs").mkdir(parents=True, exist_ok=True)
    return app_dir


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Recap - Performance summaries from Linear issues and notes"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: RECAP_LOG_LEVEL or INFO)",
    )

    parser.add_argument(
        "--log-file",
        type=str,
        help="Log file path (default: ~/.recap/logs/app.log)",
    )

    parser.add_argument("--debug", action="store_true", help="Enable debug mode")

    parser.add_argument(
        "--no-gui",
        action="store_true",
        help="Fetch, summarize and print without opening a window",
    )

    parser.add_argument("--start", type=str, help="Period start (YYYY-MM-DD)")
    parser.add_argument("--end", type=str, help="Period end (YYYY-MM-DD)")

    parser.add_argument(
        "--doc",
        action="append",
        default=[],
        metavar="PATH",
        help="Markdown document to include (repeatable)",
    )

    parser.add_argument(
        "--output", type=str, help="Write the summary to this file instead of stdout"
    )

    parser.add_argument(
        "--format",
        choices=sorted(EXPORT_FORMATS),
        default=None,
        help="Export format for --output (default: from the file extension)",
    )

    parser.add_argument(
        "--test-connections",
        action="store_true",
        help="Test Linear and Gemini connections and exit",
    )

    parser.add_argument(
        "--version", action="version", version=f"Recap {__version__}"
    )

    return parser.parse_args(argv)


def initialize_logging(args, config_manager: ConfigManager, app_dir: Path):
    """Initialize logging system."""
    if args.debug:
        log_level = "DEBUG"
    else:
        log_level = args.log_level or config_manager.get_app_config().log_level

    if args.log_file:
        log_file = args.log_file
    else:
        log_file = str(app_dir / "logs" / "app.log")

    setup_logging(
        level=log_level,
        log_file=log_file,
        enable_console=True,
        enable_structured=True,
        sanitize=True,
    )

    qInstallMessageHandler(qt_message_handler)

    logger = get_logger(__name__)
    logger.info(f"Recap starting - Version {__version__}")
    logger.info(f"Log level: {log_level}")
    logger.info(f"Log file: {log_file}")

    return logger


def setup_application_style(app: QApplication):
    """Setup application styling and theme."""
    icon_path = Path(__file__).parent / "gui" / "resources" / "icon.png"
    if icon_path.exists():
        app.setWindowIcon(QIcon(str(icon_path)))

    app.setStyle("Fusion")

    stylesheet = """
    QApplication {
        font-family: "Segoe UI", "San Francisco", "Helvetica Neue", Arial, sans-serif;
        font-size: 9pt;
    }

    QMenuBar {
        background-color: #ffffff;
        border-bottom: 1px solid #d0d0d0;
        padding: 2px;
    }

    QMenuBar::item:selected {
        background-color: #e0e0e0;
        border-radius: 4px;
    }

    QStatusBar {
        background-color: #ffffff;
        border-top: 1px solid #d0d0d0;
    }
    """

    app.setStyleSheet(stylesheet)


async def test_connections_cli(config_manager: ConfigManager) -> bool:
    """Test all connections in CLI mode."""
    logger = get_logger(__name__)
    logger.info("Testing API connections...")

    try:
        orchestrator = RecapOrchestrator(config_manager)
        results = await orchestrator.test_connections()

        print("\nConnection Test Results:")
        print("=" * 30)

        for service, status in results.items():
            status_text = "✓ Connected" if status else "✗ Failed"
            print(f"{service.title():<15}: {status_text}")

        if all(results.values()):
            print("\n✓ All connections successful!")
            logger.info("All connection tests passed")
            return True

        print("\n✗ Some connections failed. Please check your configuration.")
        logger.warning("Some connection tests failed")
        return False

    except Exception as e:
        print(f"\n✗ Connection test failed: {e}")
        logger.error(f"Connection test failed: {e}")
        return False


async def run_headless(
    config_manager: ConfigManager,
    start: Optional[str],
    end: Optional[str],
    documents=(),
    output: Optional[str] = None,
    format: Optional[str] = None,
    orchestrator: Optional[RecapOrchestrator] = None,
) -> bool:
    """Fetch issues, collect documents and generate a summary without a GUI.

    The summary markdown goes to stdout unless ``output`` is given.
    """
    logger = get_logger(__name__)
    orchestrator = orchestrator or RecapOrchestrator(config_manager)

    if not start and not end:
        days = config_manager.get_app_config().default_range_days
        end = date.today().isoformat()
        start = (date.today() - timedelta(days=days)).isoformat()

    try:
        fetch = await orchestrator.fetch_issues(start, end)
        if not fetch.succeeded:
            print(f"Error: {fetch.error_message}", file=sys.stderr)
            return False
        print(f"Fetched {len(fetch.payload)} issues", file=sys.stderr)

        if documents:
            added = orchestrator.add_documents(documents)
            print(f"Added {len(added)} document(s)", file=sys.stderr)

        result = await orchestrator.generate_summary()
    except RecapError as e:
        logger.error(f"Headless run failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return False

    if not result.succeeded:
        print(f"Error: {result.error_message}", file=sys.stderr)
        return False

    if output:
        export_manager = ExportManager()
        try:
            path = export_manager.export_summary(
                result.payload,
                format or export_manager.format_for_path(output),
                output,
            )
        except RecapError as e:
            print(f"Error: {e}", file=sys.stderr)
            return False
        print(f"Summary written to {path}", file=sys.stderr)
    else:
        print(result.payload.content)

    return True


def handle_exception(exc_type, exc_value, exc_traceback):
    """Global exception handler."""
    logger = get_logger(__name__)

    if issubclass(exc_type, KeyboardInterrupt):
        logger.info("Application interrupted by user")
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return

    logger.critical("Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback))

    if QApplication.instance():
        error_msg = (
            f"An unexpected error occurred:\n\n{exc_value}\n\n"
            "Please check the logs for more details."
        )
        QMessageBox.critical(None, "Unexpected Error", error_msg)

    sys.__excepthook__(exc_type, exc_value, exc_traceback)


def main(argv=None):
    """Main application entry point."""
    args = parse_arguments(argv)

    try:
        config_manager = ConfigManager()
    except RecapError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    app_dir = setup_application_paths()
    logger = initialize_logging(args, config_manager, app_dir)

    sys.excepthook = handle_exception

    try:
        if args.test_connections:
            result = asyncio.run(test_connections_cli(config_manager))
            return 0 if result else 1

        if args.no_gui:
            result = asyncio.run(
                run_headless(
                    config_manager,
                    args.start,
                    args.end,
                    documents=args.doc,
                    output=args.output,
                    format=args.format,
                )
            )
            return 0 if result else 1

        app = QApplication(sys.argv)
        QApplication.setApplicationName("Recap")
        QApplication.setApplicationVersion(__version__)

        setup_application_style(app)

        main_window = RecapMainWindow(config_manager=config_manager)
        main_window.show()

        logger.info("Application GUI started successfully")

        exit_code = app.exec()

        logger.info(f"Application exiting with code: {exit_code}")
        return exit_code

    except RecapError as e:
        logger.error(f"Application error: {e}")
        if QApplication.instance():
            QMessageBox.critical(None, "Application Error", str(e))
        else:
            print(f"Error: {e}", file=sys.stderr)
        return 1

    except Exception as e:
        logger.critical(f"Unexpected error during startup: {e}")
        if QApplication.instance():
            QMessageBox.critical(
                None, "Startup Error", f"Failed to start application: {e}"
            )
        else:
            print(f"Startup error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
