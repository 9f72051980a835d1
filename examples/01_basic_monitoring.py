"""Basic example of a deck monitoring session.

This example demonstrates how to:
1. Expose an in-process document through a provider.
2. Initialize a monitoring session.
3. Edit the document and detect the changes.
4. Inspect the change log through the boundary endpoints.
"""

import json

from deck_monitor.api.endpoints import ApiEndpoints
from deck_monitor.detection.session import MonitoringSession
from deck_monitor.providers.json_document import DictDocumentProvider
from deck_monitor.reporting import format_changes_markdown


def run_example():
    # 1. The document the editing surface would expose
    deck = {
        "presentationId": "example-deck",
        "presentationName": "Example",
        "slides": [
            {
                "slideId": "s1",
                "elements": [
                    {
                        "id": "title",
                        "type": "SHAPE",
                        "position": {"x": 0, "y": 0, "width": 400, "height": 60},
                        "content": "Hello",
                        "style": {"fontSize": 32},
                    }
                ],
            },
            {"slideId": "s2", "elements": []},
        ],
    }

    # 2. The provider re-reads the document on every snapshot
    session = MonitoringSession(DictDocumentProvider(lambda: deck))
    api = ApiEndpoints(session)

    result = api.initialize()
    print(f"Initialized: {result['presentationId']}")

    # 3. Someone edits the deck between polls
    title = deck["slides"][0]["elements"][0]
    title["content"] = "Hello World"
    title["position"]["x"] = 20
    deck["slides"].pop()

    detected = session.detect_changes()
    print(format_changes_markdown(detected.changes))

    # 4. The full log, as a calling layer would receive it
    log = api.dispatch("getChangeLog")
    print(f"\nTotal changes: {log['totalChanges']}")
    print(json.dumps(log["changes"][0]["details"], indent=2))

    session.dispose()


if __name__ == "__main__":
    run_example()
