"""Audit trail for pipeline runs and API operations."""

import csv
import json
import logging
import os
from pathlib import Path

from screening.utils import iso_now

AUDIT_DIR = Path(os.environ.get("AUDIT_LOG_DIR") or Path(__file__).resolve().parent.parent / "logs")
AUDIT_FILE = AUDIT_DIR / "audit.log"
APP_LOG_FILE = AUDIT_DIR / "app.log"
SCORES_CSV = AUDIT_DIR / "evaluation_scores.csv"

LOGGER_NAMES = ("resume_triage", "screening")

CSV_HEADERS = [
    "timestamp",
    "job_id",
    "session_id",
    "resume_id",
    "file_name",
    "status",
    "bucket",
    "keyword_score",
    "qualitative_score",
    "total_score",
    "resume_char_count",
]


def _ensure_log_dir():
    AUDIT_DIR.mkdir(parents=True, exist_ok=True)


def audit_log(
    action: str,
    status: str,
    *,
    model: str | None = None,
    session_id: str | None = None,
    job_id: str | None = None,
    resume_id: str | None = None,
    filename: str | None = None,
    error: str | None = None,
    extra: dict | None = None,
):
    """Append a structured audit entry to the audit log (JSONL)."""
    _ensure_log_dir()
    entry = {
        "timestamp": iso_now(),
        "action": action,
        "status": status,
    }
    if model:
        entry["model"] = model
    if session_id:
        entry["session_id"] = session_id
    if job_id:
        entry["job_id"] = job_id
    if resume_id:
        entry["resume_id"] = resume_id
    if filename:
        entry["filename"] = filename
    if error:
        entry["error"] = error
    if extra:
        entry.update(extra)

    with open(AUDIT_FILE, "a", encoding="utf-8") as f:
        f.write(json.dumps(entry, default=str) + "\n")


def log_evaluation_scores(*, job_id: str, session_id: str, file_name: str, result: dict):
    """
    Append one row per finished résumé to evaluation_scores.csv so score drift
    across model versions can be reviewed later.
    """
    _ensure_log_dir()
    scores = result.get("scores") or {}
    csv_exists = SCORES_CSV.exists()
    with open(SCORES_CSV, "a", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_HEADERS)
        if not csv_exists:
            writer.writeheader()
        writer.writerow({
            "timestamp": iso_now(),
            "job_id": job_id,
            "session_id": session_id,
            "resume_id": result.get("resume_id", ""),
            "file_name": file_name,
            "status": result.get("status", ""),
            "bucket": result.get("bucket") or "",
            "keyword_score": scores.get("keyword_score", ""),
            "qualitative_score": scores.get("qualitative_score", ""),
            "total_score": scores.get("total_score", ""),
            "resume_char_count": result.get("resume_char_count", ""),
        })


def setup_app_logging():
    """Configure application logging to console and file."""
    _ensure_log_dir()
    fmt = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"

    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        if logger.handlers:
            continue
        logger.setLevel(logging.DEBUG)

        # Console
        ch = logging.StreamHandler()
        ch.setLevel(logging.INFO)
        ch.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
        logger.addHandler(ch)

        # File
        fh = logging.FileHandler(APP_LOG_FILE, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
        logger.addHandler(fh)

    return logging.getLogger(LOGGER_NAMES[0])
