"""CLI command that ingests one document and reports its pages and contents."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from nebula.ingestion.config import IngestionSettings
from nebula.ingestion.errors import IngestionError
from nebula.ingestion.ingestor import DocumentIngestor
from nebula.ingestion.pagination import paginate

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Extract and paginate a document, emitting a JSON report")
    parser.add_argument("--path", required=True, help="Source file")
    parser.add_argument("--mime", default=None, help="Declared mime type of the upload")
    parser.add_argument("--page-chars", type=int, default=None, help="Character budget per page")
    parser.add_argument("--show-pages", action="store_true", help="Include page contents in the report")
    args = parser.parse_args(argv)
    if args.page_chars is not None and args.page_chars <= 0:
        parser.error("--page-chars must be positive")

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    settings = IngestionSettings.from_env()
    page_chars = args.page_chars or settings.page_char_budget
    source_path = Path(args.path)

    try:
        raw = source_path.read_bytes()
    except OSError as exc:
        logger.error("Failed to read %s: %s", source_path, exc)
        print(json.dumps({"path": str(source_path), "error": str(exc), "kind": "read_failed"}, indent=2))
        return 1

    ingestor = DocumentIngestor(settings)
    try:
        extracted = ingestor.ingest(raw, source_path.name, args.mime)
    except IngestionError as exc:
        print(json.dumps({"path": str(source_path), "error": str(exc), "kind": exc.kind.value}, indent=2))
        return 1

    pagination = paginate(extracted.text, page_chars)
    payload: dict[str, object] = {
        "path": str(source_path),
        "format": extracted.format.value,
        "characters": len(extracted.text),
        "warnings": extracted.warnings,
        "page_count": pagination.page_count,
        "toc": [
            {"title": entry.title, "page_index": entry.page_index, "level": entry.level}
            for entry in pagination.toc
        ],
    }
    if args.show_pages:
        payload["pages"] = [{"ordinal": page.ordinal, "content": page.content} for page in pagination.pages]

    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
