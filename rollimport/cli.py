"""
Command line entry point.

    rollimport pdf roll.pdf --output voters.json
    rollimport text pasted.txt
    rollimport pdf roll.pdf --save --center-id c1 --owner-id u1
"""

from __future__ import annotations

import argparse
import json
import sys
import tempfile
import time
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from .config import get_config
from .exceptions import RollImportError
from .logger import setup_logger
from .models import ImportResult, VoterRecord
from .pipeline import VoterImportPipeline
from .utils.progress import get_progress, progress_callback

console = Console()
logger = setup_logger("rollimport.cli")


def print_summary(voters: List[VoterRecord], title: str, limit: int = 20) -> None:
    table = Table(title=title)
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("Voter No")
    table.add_column("Father / Husband")
    table.add_column("Gender")
    table.add_column("Date of Birth")

    for voter in voters[:limit]:
        table.add_row(
            str(voter.serial_no),
            voter.name,
            voter.voter_no,
            voter.father_name or voter.husband_name,
            voter.gender.value,
            voter.date_of_birth,
        )
    console.print(table)
    if len(voters) > limit:
        console.print(f"... and {len(voters) - limit} more")


def write_output(payload: dict, output: Optional[str]) -> None:
    if not output:
        return
    path = Path(output)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info(f"💾 Wrote {path}")


def save_to_db(voters: List[VoterRecord], center_id: str, owner_id: str) -> dict:
    from .persistence.postgres import PostgresRepository
    from .jobs import InMemoryJobStore, JobTracker
    from .services import ImportService

    config = get_config()
    if not config.db.is_configured:
        raise RollImportError("Database is not configured (set DB_HOST, DB_NAME and DB_USER)")

    repo = PostgresRepository(config.db)
    try:
        repo.init_db()
        repo.ensure_center(center_id, owner_id)
        tracker = JobTracker(InMemoryJobStore(), config=config)
        try:
            service = ImportService(tracker, repo, repo, config=config)
            return service.persist_records(owner_id, center_id, [v.to_dict() for v in voters])
        finally:
            tracker.shutdown()
    finally:
        repo.close()


def run_pdf(args: argparse.Namespace) -> List[VoterRecord]:
    pipeline = VoterImportPipeline()
    start_time = time.perf_counter()

    with tempfile.TemporaryDirectory(prefix="ocr_") as work_dir:
        progress = get_progress(console)
        with progress:
            task_id = progress.add_task("starting", total=None)
            result: ImportResult = pipeline.run(
                Path(args.path),
                Path(work_dir),
                on_progress=progress_callback(progress, task_id),
            )

    elapsed = time.perf_counter() - start_time
    logger.info(
        f"✅ {result.total_extracted} voters from {result.total_pages} pages "
        f"via {result.method} in {elapsed:.2f} seconds"
    )
    print_summary(result.voters, Path(args.path).name)
    payload = result.to_dict()
    if result.pages:
        payload["pages"] = [page.to_dict() for page in result.pages]
    write_output(payload, args.output)
    return result.voters


def run_text(args: argparse.Namespace) -> List[VoterRecord]:
    text = Path(args.path).read_text(encoding="utf-8")
    voters = VoterImportPipeline().parse_text(text)
    logger.info(f"✅ {len(voters)} voters extracted from text")
    print_summary(voters, Path(args.path).name)
    write_output({"voters": [v.to_dict() for v in voters], "totalExtracted": len(voters)}, args.output)
    return voters


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rollimport", description="Bengali voter roll importer")
    sub = parser.add_subparsers(dest="command", required=True)

    pdf = sub.add_parser("pdf", help="Import a voter roll PDF (text layer or OCR)")
    pdf.add_argument("path")
    pdf.set_defaults(handler=run_pdf)

    text = sub.add_parser("text", help="Extract voters from already-recognized text")
    text.add_argument("path")
    text.set_defaults(handler=run_text)

    for command in (pdf, text):
        command.add_argument("--output", "-o", help="Write the result as JSON")
        command.add_argument("--save", action="store_true", help="Persist voters to PostgreSQL")
        command.add_argument("--center-id")
        command.add_argument("--owner-id")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.save and not (args.center_id and args.owner_id):
        parser.error("--save requires --center-id and --owner-id")

    try:
        voters = args.handler(args)
        if args.save:
            summary = save_to_db(voters, args.center_id, args.owner_id)
            logger.info(f"📥 Saved {summary['inserted']}/{summary['total']} voters")
            for error in summary["errors"] or []:
                logger.warning(f"Batch error: {error}")
    except RollImportError as e:
        logger.error(f"❌ {e}")
        return 1
    except FileNotFoundError as e:
        logger.error(f"❌ {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
