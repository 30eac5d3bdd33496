"""
Command-line interface for span enrichment.

Usage:
    # Enrich a document, print enriched annotations and report
    span-enricher enrich document.json

    # Write to a file, override batching
    span-enricher enrich document.json --output enriched.json --batch-size 10 --workers 8

    # Seed the term store from JSON lines
    span-enricher load-terms ncbitaxon.jsonl --term-store sqlite:///terms.db

Document format:
    {"tokens": [{"start": 0, "end": 6, "text": "canine"}],
     "annotations": [{"start": 0, "end": 6, "provenance": "organism_from_ncbi"}]}
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

import structlog
from pydantic import ValidationError

from span_enricher.config import settings
from span_enricher.enrichment import EnrichmentReport, enrich_document, summarize_annotations
from span_enricher.errors import BatchEnrichmentError, EnrichmentError
from span_enricher.logging_config import setup_logging
from span_enricher.models import EntityAnnotation
from span_enricher.models.api_models import AnnotationPayload, EnrichRequest
from span_enricher.term_store import SqlTermStore, load_terms, read_terms_jsonl
from span_enricher.version import get_component_versions


logger = structlog.get_logger(__name__)


# ============================================================================
# CLI FUNCTIONS
# ============================================================================

def read_document(input_path: Path) -> EnrichRequest:
    """
    Read a ``{"tokens": [...], "annotations": [...]}`` document.

    Raises:
        ValueError: If the file is not valid JSON or fails validation
    """
    with open(input_path, "r", encoding="utf-8") as f:
        try:
            payload = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"{input_path}: invalid JSON: {e}") from e

    try:
        return EnrichRequest.model_validate(payload)
    except ValidationError as e:
        raise ValueError(f"{input_path}: invalid document: {e}") from e


def build_output(
    annotations: List[EntityAnnotation],
    report: Optional[EnrichmentReport],
    error: Optional[BatchEnrichmentError] = None,
) -> dict:
    """Output document; a failed pass still carries every annotation and the partial report."""
    output = {
        "success": error is None,
        "annotations": [
            AnnotationPayload.from_annotation(a).model_dump() for a in annotations
        ],
        "report": report.to_dict() if report is not None else None,
        "versions": get_component_versions(),
    }
    if error is not None:
        output["error"] = str(error)
        output["errors"] = [f"{type(e).__name__}: {e}" for e in error.errors]
    return output


def run_enrich(
    input_path: Path,
    term_store_url: Optional[str] = None,
    batch_size: Optional[int] = None,
    max_workers: Optional[int] = None,
    summary: bool = False,
) -> dict:
    """
    Enrich one document file.

    A pass that fails part way is not raised: annotations enriched before the
    failure are kept and the output is marked ``"success": false``.

    Returns:
        Output dict with annotations, report and component versions
    """
    request = read_document(input_path)
    tokens = [t.to_token() for t in request.tokens]
    annotations = [a.to_annotation() for a in request.annotations]

    store = SqlTermStore(term_store_url)
    try:
        report = enrich_document(
            tokens,
            annotations,
            store,
            batch_size=batch_size or request.batch_size,
            max_workers=max_workers,
        )
        output = build_output(annotations, report)
    except BatchEnrichmentError as e:
        logger.error("cli_enrichment_failed", errors=[str(err) for err in e.errors])
        output = build_output(annotations, e.report, e)

    if summary:
        annotation_summary = summarize_annotations(annotations)
        for annotation_type, count in annotation_summary["counts"].items():
            print(f"\nNumber of annotations for {annotation_type}: {count}", file=sys.stderr)
        for row in annotation_summary["rows"]:
            print(row, file=sys.stderr)

    return output


def run_load_terms(terms_path: Path, term_store_url: Optional[str] = None, source: Optional[str] = None) -> int:
    """Seed the term store from a JSON lines file."""
    with SqlTermStore(term_store_url) as store:
        return load_terms(store, read_terms_jsonl(terms_path), source=source)


def write_output(output: dict, output_path: Optional[Path]) -> None:
    if not output_path:
        print(json.dumps(output, ensure_ascii=False, indent=2))
        return

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(output, f, ensure_ascii=False, indent=2)

    logger.info("output_written", path=str(output_path))


# ============================================================================
# MAIN CLI
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="span-enricher",
        description="Span enrichment CLI - attach term-store attributes to entity annotations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help=f"Log level (default: {settings.log_level})",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    enrich = subparsers.add_parser("enrich", help="Enrich a JSON document")
    enrich.add_argument("input", type=str, help="Path to a JSON document with tokens and annotations")
    enrich.add_argument("--output", "-o", type=str, default=None, help="Output file path (default: stdout)")
    enrich.add_argument(
        "--batch-size",
        "-b",
        type=int,
        default=None,
        help=f"Annotations per batch (default: {settings.enrichment_batch_size})",
    )
    enrich.add_argument(
        "--workers",
        "-w",
        type=int,
        default=None,
        help=f"Concurrent workers (default: {settings.enrichment_max_workers})",
    )
    enrich.add_argument("--term-store", "-t", type=str, default=None, help="Term store URL")
    enrich.add_argument(
        "--summary",
        "-s",
        action="store_true",
        help="Print per-type annotation counts and rows to stderr",
    )

    load = subparsers.add_parser("load-terms", help="Seed the term store from JSON lines")
    load.add_argument("input", type=str, help='JSON lines file of {"label": ..., "features": {...}}')
    load.add_argument("--term-store", "-t", type=str, default=None, help="Term store URL")
    load.add_argument("--source", type=str, default=None, help="Vocabulary name (e.g. ncbitaxon)")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    setup_logging(log_level=args.log_level)

    input_path = Path(args.input)
    if not input_path.is_file():
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        return 1

    try:
        if args.command == "enrich":
            output = run_enrich(
                input_path,
                term_store_url=args.term_store,
                batch_size=args.batch_size,
                max_workers=args.workers,
                summary=args.summary,
            )
            write_output(output, Path(args.output) if args.output else None)
            if not output["success"]:
                print(f"Error: {output['error']}", file=sys.stderr)
                return 1
        else:
            count = run_load_terms(input_path, term_store_url=args.term_store, source=args.source)
            print(f"Loaded {count} terms", file=sys.stderr)

    except (EnrichmentError, ValueError, OSError) as e:
        logger.error("cli_failed", error=str(e), error_type=type(e).__name__)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
