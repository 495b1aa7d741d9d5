"""
Application Initialization
==========================
This module constructs the application objects and starts the Qt Event Loop.

Why is this file needed?
------------------------
It acts as the "Dependency Injection" root. It:
1. Configures logging.
2. Instantiates the note source (the storage collaborator).
3. Instantiates the Main Window (View), passing source and settings in.
4. Prevents circular import errors by being the orchestrator.
"""
import argparse
import logging
import sys
from typing import Optional, Sequence

from PySide6.QtWidgets import QApplication

from notegraph.config import SAMPLE_NOTES_PATH, load_settings
from notegraph.logging_config import setup_logging
from notegraph.model.notes import JsonNoteSource
from notegraph.view.main_window import MainWindow

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="notegraph",
        description="Interactive knowledge graph of linked notes.",
    )
    parser.add_argument(
        "notes", nargs="?", default=SAMPLE_NOTES_PATH,
        help="JSON export of notes (default: bundled sample).",
    )
    parser.add_argument("--settings", default=None, help="JSON file with layout/seed/camera settings.")
    parser.add_argument("--debug", action="store_true", help="Verbose logging.")
    parser.add_argument("--log-file", default=None, help="Also write the log to this file.")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_arg_parser().parse_args(argv)

    # 1. Setup Logging (Console + Optional File)
    setup_logging(level=logging.DEBUG if args.debug else logging.INFO, log_file=args.log_file)

    # 2. Load settings before any window exists so bad files fail fast
    try:
        settings = load_settings(args.settings)
    except (OSError, ValueError) as e:
        logger.error(f"Could not load settings: {e}")
        sys.exit(2)

    # 3. Create the Qt Application
    app = QApplication(sys.argv[:1])
    app.setApplicationName("Knowledge Graph")

    # 4. Initialize the note source and the Main Window
    source = JsonNoteSource(args.notes)
    window = MainWindow(source, settings)
    window.show()

    # 5. Start Event Loop
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
