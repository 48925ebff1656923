#!/usr/bin/env python3
"""CLI for batch résumé screening: create a session, queue résumés, print rankings."""

import argparse
import asyncio
import json
import sys
from pathlib import Path

import jsonschema
from dotenv import load_dotenv

load_dotenv()

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent))

from screening.pipeline.extract import DOCX_MIME, PDF_MIME
from screening.pipeline.orchestrator import abandon_resume_job, process_resume_job
from resume_triage.audit import setup_app_logging
from resume_triage.config import get_queue_concurrency
from resume_triage.jobs import JobQueue
from resume_triage.runtime import build_context
from resume_triage.service import (
    UnsupportedDocument,
    create_session,
    job_statuses,
    session_rankings,
    submit_documents,
)

MIME_BY_SUFFIX = {".pdf": PDF_MIME, ".docx": DOCX_MIME}


def _load_uploads(paths: list[str]) -> list[tuple[str, str, bytes]]:
    uploads = []
    for raw in paths:
        path = Path(raw)
        if not path.exists():
            print(f"Error: Resume not found: {path}", file=sys.stderr)
            sys.exit(1)
        mime_type = MIME_BY_SUFFIX.get(path.suffix.lower())
        if mime_type is None:
            print(f"Error: Only PDF and DOCX files are allowed: {path}", file=sys.stderr)
            sys.exit(1)
        uploads.append((path.name, mime_type, path.read_bytes()))
    return uploads


async def _screen(job_requirements: dict, uploads, concurrency: int) -> dict:
    context = build_context()
    queue = JobQueue(process_resume_job, context, concurrency, on_abandon=abandon_resume_job)
    await queue.start()
    try:
        session = await create_session(context.store, job_requirements)
        submitted = await submit_documents(context, queue, session["id"], uploads)
        await queue.join()
        statuses = job_statuses(queue, [s["job_id"] for s in submitted])
        rankings = await session_rankings(context.store, session["id"])
    finally:
        await queue.close()
    return {"session_id": session["id"], "jobs": submitted, "statuses": statuses, "rankings": rankings}


def cmd_screen(args: argparse.Namespace) -> None:
    """Screen résumés against a job requirements file."""
    req_path = Path(args.requirements)
    if not req_path.exists():
        print(f"Error: Requirements file not found: {req_path}", file=sys.stderr)
        sys.exit(1)
    job_requirements = json.loads(req_path.read_text(encoding="utf-8"))
    uploads = _load_uploads(args.resumes)
    concurrency = args.concurrency or get_queue_concurrency()

    try:
        report = asyncio.run(_screen(job_requirements, uploads, concurrency))
    except (jsonschema.ValidationError, UnsupportedDocument, ValueError) as e:
        print(f"Error: {getattr(e, 'message', e)}", file=sys.stderr)
        sys.exit(1)

    if args.json:
        print(json.dumps(report, indent=2))
        return

    print(f"Session: {report['session_id']}\n")
    print("=== Jobs ===")
    for job in report["jobs"]:
        status = report["statuses"][job["job_id"]]
        line = f"  {job['file_name']}: {status['status']}"
        if status["error"]:
            line += f" ({status['error']})"
        print(line)

    print("\n=== Rankings ===")
    if not report["rankings"]:
        print("  No evaluated résumés.")
    for i, r in enumerate(report["rankings"], start=1):
        s = r["scores"]
        print(
            f"  {i}. {r['file_name']} [{r['bucket']}] total={s['total_score']:.3f} "
            f"keyword={s['keyword_score']:.3f} qualitative={s['qualitative_score']:.3f}"
        )


def main():
    parser = argparse.ArgumentParser(description="Résumé triage pipeline")
    sub = parser.add_subparsers(dest="command", required=True)

    p_screen = sub.add_parser("screen", help="Screen résumés against job requirements")
    p_screen.add_argument("--requirements", "-r", required=True, help="Path to job requirements JSON")
    p_screen.add_argument("resumes", nargs="+", help="Résumé files (PDF or DOCX)")
    p_screen.add_argument("--concurrency", type=int, default=None, help="Worker count (default: QUEUE_CONCURRENCY)")
    p_screen.add_argument("--json", action="store_true", help="Output report as JSON")
    p_screen.set_defaults(func=cmd_screen)

    args = parser.parse_args()
    setup_app_logging()
    args.func(args)


if __name__ == "__main__":
    main()
