import json
from pathlib import Path

from deck_monitor.config import MonitorConfig
from deck_monitor.models.change import Change
from deck_monitor.models.results import DetectChangesResult
from deck_monitor.models.snapshot import PresentationSnapshot
from deck_monitor.providers.json_document import DOCUMENT_SCHEMA


OUTPUT_DIR = Path("docs/schemas")


MODELS = {
    "presentation_snapshot.schema.json": PresentationSnapshot,
    "change.schema.json": Change,
    "detect_changes_result.schema.json": DetectChangesResult,
    "monitor_config.schema.json": MonitorConfig,
}


def main() -> None:
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    for filename, model in MODELS.items():
        schema = model.model_json_schema(by_alias=True)
        (OUTPUT_DIR / filename).write_text(
            json.dumps(schema, indent=2),
            encoding="utf-8",
        )
    (OUTPUT_DIR / "document.schema.json").write_text(
        json.dumps(DOCUMENT_SCHEMA, indent=2),
        encoding="utf-8",
    )


if __name__ == "__main__":
    main()
