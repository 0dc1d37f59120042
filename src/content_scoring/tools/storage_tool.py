"""Storage tool - persist scan results and read leaderboards back."""

import json
import logging
import os
import sqlite3
import threading
from pathlib import Path

from ..models.scan_result import StoredScan

logger = logging.getLogger(__name__)

# Scan workers share one output file; every write holds this lock
_write_lock = threading.Lock()

SCANS_TABLE = """
    CREATE TABLE IF NOT EXISTS scans (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        url TEXT NOT NULL,
        final_url TEXT,
        http_status INTEGER,
        success INTEGER,
        error TEXT,
        fetch_mode TEXT,
        total INTEGER,
        quality TEXT,
        graaf_total INTEGER,
        craft_total INTEGER,
        technical_total INTEGER,
        breakdown TEXT,
        validation_fallback INTEGER,
        validation_fallback_reason TEXT,
        rejections TEXT,
        counts TEXT,
        model_version TEXT,
        scanned_at TEXT,
        content_hash TEXT
    )
"""


def _is_sqlite(path: str) -> bool:
    return str(path).endswith(".db")


def init_storage(output_path: str, export_format: str = "jsonl") -> None:
    """
    Initialize storage - clear existing results to start fresh.
    For JSONL: delete file if exists, then create empty file.
    For SQLite: clear the scans table.
    """
    path = Path(output_path).resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("Initializing storage at %s", path)

    if _is_sqlite(output_path):
        conn = sqlite3.connect(str(path))
        try:
            conn.execute(SCANS_TABLE)
            conn.execute("DELETE FROM scans")
            conn.commit()
        finally:
            conn.close()
        logger.info("Cleared SQLite database at %s", path)
        return

    if path.exists():
        path.unlink()
        logger.info("Deleted existing file at %s", path)
    path.touch()


def storage_tool(result: StoredScan, output_path: str, export_format: str = "jsonl") -> None:
    """
    Persist one scan result.
    jsonl appends one line per scan; any other format rewrites a JSON array.
    """
    path = Path(output_path).resolve()
    path.parent.mkdir(parents=True, exist_ok=True)
    data = result.model_dump(mode="json")

    try:
        if export_format == "jsonl":
            with open(path, "a", encoding="utf-8") as f:
                f.write(json.dumps(data, ensure_ascii=False) + "\n")
                f.flush()
                os.fsync(f.fileno())
            logger.debug("Stored result for %s to %s", result.url, path)
            return

        arr = []
        if path.exists():
            content = path.read_text(encoding="utf-8").strip()
            if content:
                try:
                    arr = json.loads(content)
                except json.JSONDecodeError:
                    logger.warning("Could not parse %s as JSON array, starting fresh", path)
                    arr = []
                if not isinstance(arr, list):
                    logger.warning("File %s contains non-list JSON, converting to list", path)
                    arr = [arr]
        arr.append(data)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(arr, f, ensure_ascii=False, indent=2)
        logger.debug("Stored result for %s to %s (JSON array)", result.url, path)
    except Exception as e:
        logger.error("Failed to store result for %s to %s: %s", result.url, path, e, exc_info=True)
        raise


def storage_tool_sqlite(result: StoredScan, db_path: str) -> None:
    """Persist to SQLite for querying."""
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = result.model_dump(mode="json")
    score = data.get("score") or {}

    conn = sqlite3.connect(str(path))
    try:
        conn.execute(SCANS_TABLE)
        conn.execute(
            """
            INSERT INTO scans
            (url, final_url, http_status, success, error, fetch_mode, total, quality,
             graaf_total, craft_total, technical_total, breakdown, validation_fallback,
             validation_fallback_reason, rejections, counts, model_version, scanned_at,
             content_hash)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                data["url"],
                data["final_url"],
                data.get("http_status"),
                1 if data["success"] else 0,
                data.get("error"),
                data["fetch_mode"],
                score.get("total"),
                score.get("quality"),
                (score.get("graaf") or {}).get("total"),
                (score.get("craft") or {}).get("total"),
                (score.get("technical") or {}).get("total"),
                json.dumps(score) if score else None,
                1 if data["validation_fallback"] else 0,
                data.get("validation_fallback_reason"),
                json.dumps(data["rejections"]),
                json.dumps(data["counts"]),
                data["model_version"],
                data["scanned_at"],
                data.get("content_hash"),
            ),
        )
        conn.commit()
    finally:
        conn.close()


def store_result(result: StoredScan, output_path: str, export_format: str = "jsonl") -> None:
    """
    Dispatch on the storage path: .db goes to SQLite, anything else to a file.
    Safe to call from several scan workers at once.
    """
    with _write_lock:
        if _is_sqlite(output_path):
            storage_tool_sqlite(result, output_path)
        else:
            storage_tool(result, output_path, export_format)


def load_records(output_path: str) -> list[dict]:
    path = Path(output_path)
    if not path.exists():
        return []
    content = path.read_text(encoding="utf-8").strip()
    if not content:
        return []
    if content.startswith("["):
        return json.loads(content)
    records = []
    for line_num, line in enumerate(content.splitlines(), 1):
        line = line.strip()
        if not line:
            continue
        try:
            records.append(json.loads(line))
        except json.JSONDecodeError as e:
            logger.warning("Skipping invalid JSON on line %d of %s: %s", line_num, path, e)
    return records


def load_leaderboard(output_path: str, limit: int = 10) -> list[dict]:
    """
    Latest successful scan per URL, best score first.
    Ties break on URL so the order is stable.
    """
    if _is_sqlite(output_path):
        if not Path(output_path).exists():
            return []
        conn = sqlite3.connect(str(output_path))
        conn.row_factory = sqlite3.Row
        try:
            conn.execute(SCANS_TABLE)
            rows = conn.execute(
                """
                SELECT url, total, quality, validation_fallback, scanned_at
                FROM scans s
                WHERE success = 1 AND id = (
                    SELECT MAX(id) FROM scans WHERE url = s.url AND success = 1
                )
                ORDER BY total DESC, url ASC
                LIMIT ?
                """,
                (limit,),
            ).fetchall()
        finally:
            conn.close()
        return [
            {**dict(row), "validation_fallback": bool(row["validation_fallback"])}
            for row in rows
        ]

    latest: dict[str, dict] = {}
    for record in load_records(output_path):
        if record.get("success") and record.get("score"):
            latest[record["url"]] = record
    entries = [
        {
            "url": url,
            "total": rec["score"]["total"],
            "quality": rec["score"].get("quality"),
            "validation_fallback": rec.get("validation_fallback", True),
            "scanned_at": rec.get("scanned_at"),
        }
        for url, rec in latest.items()
    ]
    entries.sort(key=lambda e: (-e["total"], e["url"]))
    return entries[:limit]
