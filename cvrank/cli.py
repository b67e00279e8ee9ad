"""
Command line interface for cvrank.

This module exposes subcommands to manage CV batches stored in a local
directory: creating a batch from extracted résumé text files and one or
more job descriptions, ranking it, showing or listing stored batches,
printing a recruiter-facing report and exporting the ranking to CSV.

Document text extraction (PDF, DOCX) happens upstream; the CLI reads
plain text files.
"""

from __future__ import annotations

import argparse
import csv
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from tqdm import tqdm

from .config import Settings, load_config
from .errors import CVRankError
from .rank.schema import Batch, BatchMode
from .service import BatchService
from .store.json_store import JsonFileBatchStore

logger = logging.getLogger("cvrank.cli")

LOG_FORMAT = "[%(levelname)s] %(message)s"


def configure_logging(settings: Settings) -> None:
    """Configure the root logger from the runtime settings."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file, encoding="utf-8"))
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)


def _read_text(path: str) -> str:
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return f.read()


def _build_service(args: argparse.Namespace) -> BatchService:
    ruleset, settings = args.ruleset, args.settings
    store_dir = args.store or settings.store_dir
    return BatchService(JsonFileBatchStore(store_dir), ruleset, settings)


def _print_summary(batch: Batch) -> None:
    summary = batch.summary
    print(f"Batch {batch.id} ({batch.name}): {batch.status.value}")
    if batch.failure_reason:
        print(f"  Reason: {batch.failure_reason}")
    print(
        f"  Ranked: {summary.total_processed}  Failed: {summary.failed_count}  "
        f"Average: {summary.average_score:.1f}  "
        f"Highly recommended: {summary.highly_recommended_count}  "
        f"Recommended: {summary.recommended_count}"
    )


def cmd_create(args: argparse.Namespace) -> None:
    """Create a batch from résumé text files and job description files."""
    service = _build_service(args)
    texts = [_read_text(p) for p in args.cvs]
    filenames = [Path(p).name for p in args.cvs]
    jobs = [_read_text(p) for p in args.job]
    mode = BatchMode(args.mode)
    batch = service.create_batch(
        args.name,
        texts,
        jobs if mode is BatchMode.MULTI else jobs[0],
        filenames=filenames,
        mode=mode,
    )
    print(batch.id)


def cmd_rank(args: argparse.Namespace) -> None:
    """Rank a stored batch with a per-candidate progress bar."""
    service = _build_service(args)
    batch = service.get_batch(args.batch_id)
    with tqdm(total=len(batch.candidate_documents), desc="Scoring CVs", unit="cv") as bar:
        ranked = service.rank(
            args.batch_id,
            timeout=args.timeout,
            progress=lambda done, total: bar.update(1),
        )
    _print_summary(ranked)


def cmd_show(args: argparse.Namespace) -> None:
    """Print a stored batch as JSON."""
    batch = _build_service(args).get_batch(args.batch_id)
    data = batch.to_dict()
    if not args.include_text:
        for doc in data["candidateDocuments"]:
            doc.pop("text", None)
        for job in data["jobDescriptions"]:
            job.pop("text", None)
    print(json.dumps(data, indent=2, ensure_ascii=False))


def cmd_list(args: argparse.Namespace) -> None:
    """List stored batches, oldest first."""
    batches = _build_service(args).list_batches()
    if not batches:
        print("No batches found")
        return
    for batch in batches:
        print(
            f"{batch.id}  {batch.status.value:<10}  {len(batch.candidate_documents):>3} CVs  "
            f"{batch.created_at}  {batch.name}"
        )


def cmd_report(args: argparse.Namespace) -> None:
    """Print the top candidates of a ranked batch."""
    batch = _build_service(args).get_batch(args.batch_id)
    _print_summary(batch)
    print()
    limit = args.limit or len(batch.candidates)
    for candidate in batch.candidates[:limit]:
        name = candidate.contact.name or candidate.document.source_filename
        print(f"{candidate.rank:02d}. {name} – {candidate.final_score}% ({candidate.recommendation})")
        result = candidate.match_result
        if result.matched_skills:
            print(f"   Matched: {', '.join(sorted(result.matched_skills))}")
        if result.missing_skills:
            print(f"   Missing: {', '.join(sorted(result.missing_skills))}")
        for strength in result.strengths:
            print(f"   + {strength}")
        for concern in result.concerns:
            print(f"   - {concern}")
        print()
    for failure in batch.failures:
        print(f"-- {failure.source_filename or failure.document_id}: {failure.message}")


def cmd_export(args: argparse.Namespace) -> None:
    """Write the ranking of a batch to CSV."""
    batch = _build_service(args).get_batch(args.batch_id)
    fieldnames = [
        "rank",
        "name",
        "email",
        "phone",
        "linkedin",
        "source_filename",
        "final_score",
        "recommendation",
        "fit_level",
        "skill_score",
        "experience_score",
        "title_score",
        "matched_skills",
        "missing_skills",
        "strengths",
        "concerns",
    ]
    with open(args.out, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        for candidate in batch.candidates:
            result = candidate.match_result
            writer.writerow(
                {
                    "rank": candidate.rank,
                    "name": candidate.contact.name,
                    "email": candidate.contact.email or "",
                    "phone": candidate.contact.phone or "",
                    "linkedin": candidate.contact.linkedin or "",
                    "source_filename": candidate.document.source_filename,
                    "final_score": candidate.final_score,
                    "recommendation": candidate.recommendation,
                    "fit_level": candidate.fit_level,
                    "skill_score": f"{result.skill_score:.1f}",
                    "experience_score": f"{result.experience_score:.1f}",
                    "title_score": f"{result.title_score:.1f}",
                    "matched_skills": "; ".join(sorted(result.matched_skills)),
                    "missing_skills": "; ".join(sorted(result.missing_skills)),
                    "strengths": "; ".join(result.strengths),
                    "concerns": "; ".join(result.concerns),
                }
            )
    logger.info("Wrote %d candidates to %s", len(batch.candidates), args.out)


def cmd_delete(args: argparse.Namespace) -> None:
    """Delete a stored batch."""
    _build_service(args).delete_batch(args.batch_id)
    print(f"Deleted {args.batch_id}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cvrank", description="Rank CVs against job descriptions")
    parser.add_argument("--config", help="YAML config file (defaults to $CVRANK_CONFIG or the packaged config)")
    parser.add_argument("--store", help="Batch store directory (overrides runtime.store_dir)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    create_cmd = subparsers.add_parser("create", help="Create a batch from CV text files")
    create_cmd.add_argument("--name", required=True, help="Batch name")
    create_cmd.add_argument(
        "--job",
        action="append",
        required=True,
        help="Job description text file; repeat for multi mode",
    )
    create_cmd.add_argument(
        "--mode",
        choices=[m.value for m in BatchMode],
        default=BatchMode.SINGLE.value,
        help="single: one job description; multi: best of several",
    )
    create_cmd.add_argument("cvs", nargs="+", help="CV text files")
    create_cmd.set_defaults(func=cmd_create)

    rank_cmd = subparsers.add_parser("rank", help="Rank a stored batch")
    rank_cmd.add_argument("batch_id")
    rank_cmd.add_argument("--timeout", type=float, help="Give up after this many seconds")
    rank_cmd.set_defaults(func=cmd_rank)

    show_cmd = subparsers.add_parser("show", help="Print a batch as JSON")
    show_cmd.add_argument("batch_id")
    show_cmd.add_argument("--include-text", action="store_true", help="Include document text")
    show_cmd.set_defaults(func=cmd_show)

    list_cmd = subparsers.add_parser("list", help="List stored batches")
    list_cmd.set_defaults(func=cmd_list)

    report_cmd = subparsers.add_parser("report", help="Print a text report of a ranked batch")
    report_cmd.add_argument("batch_id")
    report_cmd.add_argument("--limit", type=int, default=10, help="Number of top candidates to display")
    report_cmd.set_defaults(func=cmd_report)

    export_cmd = subparsers.add_parser("export", help="Export a ranking to CSV")
    export_cmd.add_argument("batch_id")
    export_cmd.add_argument("--out", default="ranking.csv", help="Output CSV path")
    export_cmd.set_defaults(func=cmd_export)

    delete_cmd = subparsers.add_parser("delete", help="Delete a stored batch")
    delete_cmd.add_argument("batch_id")
    delete_cmd.set_defaults(func=cmd_delete)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        args.ruleset, args.settings = load_config(args.config)
        configure_logging(args.settings)
        args.func(args)
    except CVRankError as exc:
        logger.error("%s", exc)
        return 1
    except OSError as exc:
        logger.error("I/O error: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
