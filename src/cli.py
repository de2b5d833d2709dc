"""Command-line interface for business card parsing and batch export.

Provides subcommands for parsing raw card text, scanning a single card
photo, processing a folder of card photos into CSV, and listing stored
leads.
"""

import argparse
import csv
import json
import sys
import time
from datetime import datetime
from pathlib import Path

from src.extraction.card_parser import CardParser
from src.ocr.card_reader import CardReader, InvalidImageError, NoTextDetectedError
from src.ocr.tesseract_engine import OCRError
from src.storage.lead_store import LeadStore
from src.utils.config import load_config
from src.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

_SUPPORTED_EXTENSIONS = ("*.png", "*.jpg", "*.jpeg", "*.tiff", "*.tif", "*.webp", "*.bmp")
_FIELD_COLUMNS = ["name", "email", "phone", "company", "job_title", "website"]
_META_COLUMNS = ["filename", "status", "ocr_confidence", "processing_time_s", "error"]


def _find_cards(input_dir: Path) -> list[Path]:
    """Find all supported card images in a directory.

    Args:
        input_dir: Directory to scan.

    Returns:
        Sorted list of image paths.
    """
    files: list[Path] = []
    for ext in _SUPPORTED_EXTENSIONS:
        files.extend(input_dir.glob(ext))
        files.extend(input_dir.glob(ext.upper()))
    return sorted(set(files))


def parse_text(text: str) -> dict[str, str]:
    """Parse raw card text and return the recognized fields."""
    return CardParser().parse(text).to_dict(exclude_none=True)


def scan_card(file_path: Path, save: bool = False) -> dict[str, object]:
    """OCR and parse a single card photo.

    Args:
        file_path: Path to the card image.
        save: Store the parsed contact as a lead.

    Returns:
        Dictionary with filename, fields, raw_text and, when saved, the lead.
    """
    config = load_config()
    reader = CardReader(config)
    parser = CardParser()

    ocr_result = reader.read(file_path, file_path.name)
    record = parser.parse(ocr_result.text)

    result: dict[str, object] = {
        "filename": file_path.name,
        "fields": record.to_dict(exclude_none=True),
        "raw_text": ocr_result.text,
    }

    if save:
        store = LeadStore(config.storage.database_url, echo=config.storage.echo)
        try:
            source = f"{config.ocr.source_label} - {datetime.now():%Y-%m-%d %H:%M:%S}"
            lead = store.create_lead(record, source)
            result["lead"] = lead.to_dict()
        finally:
            store.close()
    return result


def process_folder(
    input_dir: Path,
    output_csv: Path,
    verbose: bool = False,
) -> dict[str, int]:
    """Process every card photo in a folder and export contacts to CSV.

    Args:
        input_dir: Directory containing card images.
        output_csv: Path for the output CSV file.
        verbose: Whether to print per-file progress.

    Returns:
        Summary dict with total, successful, and failed counts.
    """
    config = load_config()
    reader = CardReader(config)
    parser = CardParser()

    files = _find_cards(input_dir)
    if not files:
        logger.warning("No card images found in %s", input_dir)
        return {"total": 0, "successful": 0, "failed": 0}

    logger.info("Found %d card images to process", len(files))

    rows: list[dict[str, object]] = []
    successful = 0
    failed = 0

    for i, file_path in enumerate(files, 1):
        if verbose:
            print(f"Processing [{i}/{len(files)}]: {file_path.name}")

        start_time = time.time()
        try:
            ocr_result = reader.read(file_path, file_path.name)
            record = parser.parse(ocr_result.text)
        except (InvalidImageError, NoTextDetectedError, OCRError) as exc:
            logger.error("Failed to process %s: %s", file_path.name, exc)
            rows.append(
                {"filename": file_path.name, "status": "failed", "error": str(exc)}
            )
            failed += 1
            continue

        row: dict[str, object] = {
            "filename": file_path.name,
            "status": "success",
            "ocr_confidence": round(ocr_result.confidence, 3),
            "processing_time_s": round(time.time() - start_time, 2),
            "error": None,
        }
        row.update(record.to_dict())
        rows.append(row)
        successful += 1

    _write_csv(rows, output_csv)
    logger.info("Results written to %s", output_csv)

    summary = {"total": len(files), "successful": successful, "failed": failed}
    _print_summary(summary, output_csv)
    return summary


def _write_csv(rows: list[dict[str, object]], output_path: Path) -> None:
    """Write one row per card, contact fields after the metadata columns."""
    if not rows:
        return

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="") as f:
        writer = csv.DictWriter(
            f, fieldnames=_META_COLUMNS + _FIELD_COLUMNS, extrasaction="ignore"
        )
        writer.writeheader()
        writer.writerows(rows)


def _print_summary(summary: dict[str, int], output_csv: Path) -> None:
    print(f"\n{'=' * 50}")
    print("Batch Processing Complete")
    print(f"{'=' * 50}")
    print(f"Total:      {summary['total']}")
    print(f"Successful: {summary['successful']}")
    print(f"Failed:     {summary['failed']}")
    print(f"Output:     {output_csv}")


def list_leads(limit: int = 50, offset: int = 0) -> dict[str, object]:
    """Return a page of stored leads as plain data."""
    config = load_config()
    store = LeadStore(config.storage.database_url, echo=config.storage.echo)
    try:
        page = store.list_leads(limit=limit, offset=offset)
    finally:
        store.close()
    return {
        "leads": [lead.to_dict() for lead in page.leads],
        "total": page.total,
        "limit": limit,
        "offset": offset,
    }


def _emit(data: object, output: Path | None) -> None:
    output_str = json.dumps(data, indent=2)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(output_str)
        print(f"Output written to {output}")
    else:
        print(output_str)


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = argparse.ArgumentParser(
        description="Business Card Lead Capture",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    parse_parser = subparsers.add_parser("parse", help="Parse raw card text")
    parse_parser.add_argument(
        "file",
        nargs="?",
        default="-",
        help="Text file to parse, or - for stdin (default: -)",
    )
    parse_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    scan_parser = subparsers.add_parser("scan", help="Scan a single card photo")
    scan_parser.add_argument("file", type=Path, help="Card image to scan")
    scan_parser.add_argument(
        "--save", action="store_true", help="Store the contact as a lead"
    )
    scan_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    batch_parser = subparsers.add_parser("batch", help="Process a folder of cards")
    batch_parser.add_argument("input_dir", type=Path, help="Directory with card images")
    batch_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("contacts.csv"),
        help="Output CSV file (default: contacts.csv)",
    )
    batch_parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose output"
    )

    leads_parser = subparsers.add_parser("leads", help="List stored leads")
    leads_parser.add_argument("--limit", type=int, default=50)
    leads_parser.add_argument("--offset", type=int, default=0)

    args = parser.parse_args(argv)

    config = load_config()
    setup_logging(config.log_level, config.log_file, stream=sys.stderr)

    if args.command == "parse":
        if args.file == "-":
            text = sys.stdin.read()
        else:
            path = Path(args.file)
            if not path.exists():
                print(f"Error: {path} does not exist", file=sys.stderr)
                sys.exit(1)
            text = path.read_text(encoding="utf-8")
        _emit(parse_text(text), args.output)
    elif args.command == "scan":
        if not args.file.exists():
            print(f"Error: {args.file} does not exist", file=sys.stderr)
            sys.exit(1)
        try:
            result = scan_card(args.file, save=args.save)
        except (InvalidImageError, NoTextDetectedError, OCRError) as exc:
            print(f"Error: {exc}", file=sys.stderr)
            sys.exit(1)
        _emit(result, args.output)
    elif args.command == "batch":
        if not args.input_dir.is_dir():
            print(f"Error: {args.input_dir} is not a directory", file=sys.stderr)
            sys.exit(1)
        process_folder(args.input_dir, args.output, args.verbose)
    elif args.command == "leads":
        _emit(list_leads(args.limit, args.offset), None)
    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
