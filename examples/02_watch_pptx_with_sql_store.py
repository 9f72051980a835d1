"""Persisting snapshot history of a .pptx file in SQLite.

This example demonstrates how to:
1. Load configuration from the environment.
2. Wire a session with a SQL snapshot store.
3. Poll a PowerPoint file a few times and print what changed.

Usage:
    DATABASE_URL=sqlite:///deck_history.sqlite3 \
        python examples/02_watch_pptx_with_sql_store.py deck.pptx
"""

import sys
import time

from deck_monitor.config import build_session, load_config
from deck_monitor.models.results import ErrorResult
from deck_monitor.observability.logging import setup_logging
from deck_monitor.providers.pptx_file import PptxFileProvider
from deck_monitor.reporting import format_changes_markdown


def run_example(path: str, polls: int = 5):
    config = load_config()
    setup_logging(config.log_level)
    session = build_session(PptxFileProvider(path), config)

    result = session.initialize()
    if isinstance(result, ErrorResult):
        print(f"Initialization failed: {result.error}")
        return

    print(f"Watching {path}; save the file in PowerPoint to see changes.")
    for _ in range(polls):
        time.sleep(config.poll_interval)
        detected = session.detect_changes()
        if isinstance(detected, ErrorResult):
            print(f"Poll failed: {detected.error}")
        elif detected.changes:
            print(format_changes_markdown(detected.changes))

    print(session.metrics.render_markdown())
    session.stop()
    session.dispose()


if __name__ == "__main__":
    run_example(sys.argv[1])
