"""Command-line interface for processing OCR extraction files.

Reads the OCR service's JSON output from disk, classifies it, assembles
guides and dispatch sheets, and exports batch summaries to CSV.
"""

import argparse
import csv
import json
import sys
import time
from pathlib import Path
from typing import Any

from pouchdoc.assembly.pipeline import ExtractionPipeline
from pouchdoc.classification.classifier import summary_confidence
from pouchdoc.models import DocumentType, RawExtraction
from pouchdoc.utils.config import load_config
from pouchdoc.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

_CSV_COLUMNS = [
    "filename",
    "status",
    "document_type",
    "language",
    "direction",
    "classification_confidence",
    "record_number",
    "item_count",
    "linked_sheets",
    "validation_passed",
    "processing_time_s",
    "error",
]


def load_raw(file_path: Path) -> RawExtraction:
    """Read one OCR extraction JSON file.

    Raises:
        ValueError: If the file is not valid JSON.
        TypeError: If the top-level JSON value is not an object.
    """
    with open(file_path, encoding="utf-8") as f:
        data = json.load(f)
    return RawExtraction.from_dict(data)


def _find_extractions(input_dir: Path) -> list[Path]:
    return sorted(set(input_dir.glob("*.json")) | set(input_dir.glob("*.JSON")))


def process_folder(
    input_dir: Path,
    output_csv: Path,
    pipeline: ExtractionPipeline | None = None,
    verbose: bool = False,
) -> dict[str, int]:
    """Classify and assemble every extraction file in a folder.

    All files share one pipeline, so dispatch sheets linked by an earlier
    guide are updated by later ones.

    Args:
        input_dir: Directory containing ``*.json`` extraction files.
        output_csv: Path for the output CSV file.
        pipeline: Pipeline to use; built from the default config if omitted.
        verbose: Whether to print per-file progress.

    Returns:
        Summary dict with total, successful, and failed counts.
    """
    pipeline = pipeline or ExtractionPipeline(load_config())

    files = _find_extractions(input_dir)
    if not files:
        logger.warning("No extraction files found in %s", input_dir)
        return {"total": 0, "successful": 0, "failed": 0}

    logger.info("Found %d extraction files to process", len(files))

    results: list[dict[str, Any]] = []
    successful = 0
    failed = 0

    for i, file_path in enumerate(files, 1):
        if verbose:
            print(f"Processing [{i}/{len(files)}]: {file_path.name}")

        start_time = time.time()
        try:
            result = _process_single_file(file_path, pipeline)
            result["processing_time_s"] = round(time.time() - start_time, 2)
            results.append(result)
            successful += 1
        except (OSError, ValueError, TypeError) as exc:
            logger.error("Failed to process %s: %s", file_path.name, exc)
            results.append({"filename": file_path.name, "status": "failed", "error": str(exc)})
            failed += 1

    _write_csv(results, output_csv)
    logger.info("Results written to %s", output_csv)

    summary = {"total": len(files), "successful": successful, "failed": failed}
    _print_summary(summary, output_csv)
    return summary


def _process_single_file(file_path: Path, pipeline: ExtractionPipeline) -> dict[str, Any]:
    """Classify one file and assemble it according to its document type."""
    raw = load_raw(file_path)
    classification = pipeline.classify(raw)

    result: dict[str, Any] = {
        "filename": file_path.name,
        "status": "success",
        "document_type": classification.document_type.value,
        "language": classification.language.value,
        "direction": classification.direction.value,
        "classification_confidence": round(summary_confidence(classification), 3),
        "error": None,
    }

    if classification.document_type == DocumentType.POUCH_MANIFEST:
        guide_result = pipeline.process_guide(raw)
        result["record_number"] = guide_result.guide.guide_number
        result["item_count"] = len(guide_result.guide.items)
        result["linked_sheets"] = len(guide_result.linked_sheets)
        result["validation_passed"] = guide_result.validation.all_valid
    elif classification.document_type == DocumentType.DISPATCH_SHEET:
        sheet_result = pipeline.process_dispatch_sheet(raw)
        result["record_number"] = sheet_result.sheet.full_number
        result["validation_passed"] = sheet_result.validation.all_valid

    return result


def _write_csv(results: list[dict[str, Any]], output_path: Path) -> None:
    """Write batch results to a CSV file.

    Args:
        results: List of result dictionaries.
        output_path: Path for the output CSV file.
    """
    if not results:
        return

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=_CSV_COLUMNS, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(results)


def _print_summary(summary: dict[str, int], output_csv: Path) -> None:
    print(f"\n{'=' * 50}")
    print("Batch Processing Complete")
    print(f"{'=' * 50}")
    print(f"Total:      {summary['total']}")
    print(f"Successful: {summary['successful']}")
    print(f"Failed:     {summary['failed']}")
    print(f"Output:     {output_csv}")


def _emit(payload: dict[str, Any], output: Path | None) -> None:
    output_str = json.dumps(payload, indent=2, ensure_ascii=False)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(output_str, encoding="utf-8")
        print(f"Output written to {output}")
    else:
        print(output_str)


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="Diplomatic pouch document processor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-c", "--config", type=Path, help="YAML configuration file")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    for name, help_text in (
        ("classify", "Classify an extraction file"),
        ("guide", "Assemble a pouch manifest from an extraction file"),
        ("dispatch-sheet", "Assemble a dispatch sheet from an extraction file"),
    ):
        single_parser = subparsers.add_parser(name, help=help_text)
        single_parser.add_argument("file", type=Path, help="Extraction JSON file")
        single_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    batch_parser = subparsers.add_parser("batch", help="Process a folder of extraction files")
    batch_parser.add_argument("input_dir", type=Path, help="Directory with extraction files")
    batch_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("results.csv"),
        help="Output CSV file (default: results.csv)",
    )
    batch_parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    args = parser.parse_args(argv)

    config = load_config(args.config)
    setup_logging(config.log_level)

    if args.command == "batch":
        if not args.input_dir.is_dir():
            print(f"Error: {args.input_dir} is not a directory", file=sys.stderr)
            sys.exit(1)
        process_folder(args.input_dir, args.output, ExtractionPipeline(config), args.verbose)
    elif args.command in ("classify", "guide", "dispatch-sheet"):
        if not args.file.exists():
            print(f"Error: {args.file} does not exist", file=sys.stderr)
            sys.exit(1)
        try:
            raw = load_raw(args.file)
        except (ValueError, TypeError) as exc:
            print(f"Error: {args.file} is not a valid extraction: {exc}", file=sys.stderr)
            sys.exit(1)

        pipeline = ExtractionPipeline(config)
        if args.command == "classify":
            payload = pipeline.classify(raw).to_dict()
        elif args.command == "guide":
            payload = pipeline.process_guide(raw).to_dict()
        else:
            payload = pipeline.process_dispatch_sheet(raw).to_dict()
        _emit(payload, args.output)
    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
