"""SQLite-backed local workspace: credential, prompts, saved resumes."""

from __future__ import annotations

import json
import logging
import sqlite3
import time
from dataclasses import dataclass
from pathlib import Path

from resume_optimizer.models.metadata import OptimizationMetadata
from resume_optimizer.workflow.state import WorkflowState

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path.home() / ".resume-optimizer" / "workspace.db"
STORE_VERSION = "1"

API_KEY = "api_key"
WORKSPACE_JSON = "workspace_json"
RESUME_TEXT = "resume_text"
JOB_DESCRIPTION = "job_description"
METADATA = "optimization_metadata"
PROMPT_KEYS = ("optimization_prompt", "adjustment_prompt", "conversion_prompt")


def mask_api_key(key: str) -> str:
    """``sk-ant-api03-abcdef...wxyz`` style masking for display."""
    if len(key) <= 12:
        return key
    return f"{key[:8]}…{key[-4:]}"


@dataclass(frozen=True)
class SavedResume:
    id: str
    original: dict
    optimized: dict | None
    updated_at: float


class WorkspaceStore:
    """Local persistence for everything except the session baseline.

    The baseline is never stored: reopening the workspace
    starts a fresh session whose current resume is the last saved one.
    """

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(str(self.db_path))

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at REAL NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS resumes (
                    id TEXT PRIMARY KEY,
                    original_json TEXT NOT NULL,
                    optimized_json TEXT,
                    updated_at REAL NOT NULL
                )
            """)
            row = conn.execute(
                "SELECT value FROM settings WHERE key = 'version'"
            ).fetchone()
            if row is not None and row[0] != STORE_VERSION:
                logger.warning("Workspace store version %s is stale, resetting", row[0])
                conn.execute("DELETE FROM settings")
                conn.execute("DELETE FROM resumes")
            conn.execute(
                "INSERT OR REPLACE INTO settings (key, value, updated_at) VALUES ('version', ?, ?)",
                (STORE_VERSION, time.time()),
            )

    # --- key/value settings ---------------------------------------------------

    def _get(self, key: str) -> str | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value FROM settings WHERE key = ?", (key,)
            ).fetchone()
        return row[0] if row else None

    def _set(self, key: str, value: str | None) -> None:
        with self._connect() as conn:
            if value is None:
                conn.execute("DELETE FROM settings WHERE key = ?", (key,))
            else:
                conn.execute(
                    "INSERT OR REPLACE INTO settings (key, value, updated_at) VALUES (?, ?, ?)",
                    (key, value, time.time()),
                )

    def get_api_key(self) -> str | None:
        return self._get(API_KEY)

    def save_api_key(self, api_key: str) -> None:
        self._set(API_KEY, api_key.strip())

    def remove_api_key(self) -> None:
        self._set(API_KEY, None)

    def get_prompts(self) -> dict[str, str]:
        """Saved prompt overrides keyed like PromptConfig fields."""
        prompts = {}
        for key in PROMPT_KEYS:
            value = self._get(key)
            if value:
                prompts[key] = value
        return prompts

    def save_prompts(self, **prompts: str | None) -> None:
        for key, value in prompts.items():
            if key not in PROMPT_KEYS:
                raise ValueError(f"Unknown prompt: {key}")
            self._set(key, value or None)

    def get_workspace(self) -> dict | None:
        raw = self._get(WORKSPACE_JSON)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable workspace resume")
            self._set(WORKSPACE_JSON, None)
            return None

    def save_workspace(self, document: dict | None) -> None:
        self._set(WORKSPACE_JSON, json.dumps(document) if document is not None else None)

    def get_resume_text(self) -> str | None:
        return self._get(RESUME_TEXT)

    def save_resume_text(self, text: str | None) -> None:
        self._set(RESUME_TEXT, text)

    def get_job_description(self) -> str | None:
        return self._get(JOB_DESCRIPTION)

    def save_job_description(self, text: str | None) -> None:
        self._set(JOB_DESCRIPTION, text)

    def get_metadata(self) -> OptimizationMetadata | None:
        raw = self._get(METADATA)
        if raw is None:
            return None
        return OptimizationMetadata.model_validate_json(raw)

    def save_metadata(self, metadata: OptimizationMetadata | None) -> None:
        self._set(
            METADATA,
            metadata.model_dump_json(by_alias=True, exclude_none=True) if metadata else None,
        )

    # --- saved resumes ---------------------------------------------------------

    def save_resume(
        self,
        resume_id: str,
        original: dict,
        optimized: dict | None = None,
    ) -> None:
        with self._connect() as conn:
            conn.execute(
                """INSERT OR REPLACE INTO resumes
                   (id, original_json, optimized_json, updated_at)
                   VALUES (?, ?, ?, ?)""",
                (
                    resume_id,
                    json.dumps(original),
                    json.dumps(optimized) if optimized is not None else None,
                    time.time(),
                ),
            )

    def get_resume(self, resume_id: str) -> SavedResume | None:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT id, original_json, optimized_json, updated_at FROM resumes WHERE id = ?",
                (resume_id,),
            ).fetchone()
        return _saved_resume(row) if row else None

    def list_resumes(self) -> list[SavedResume]:
        """Saved resumes, most recently updated first."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT id, original_json, optimized_json, updated_at FROM resumes "
                "ORDER BY updated_at DESC"
            ).fetchall()
        return [_saved_resume(row) for row in rows]

    def delete_resume(self, resume_id: str) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM resumes WHERE id = ?", (resume_id,))

    # --- workflow integration --------------------------------------------------

    def persist(self, state: WorkflowState) -> None:
        """Save the current resume and metadata; the baseline is not stored."""
        self.save_workspace(state.current)
        self.save_metadata(state.metadata)

    def hydrate(self) -> WorkflowState:
        """A fresh session on the last saved workspace resume."""
        return WorkflowState(current=self.get_workspace())

    def clear(self) -> int:
        """Remove everything. Returns the number of saved resumes deleted."""
        with self._connect() as conn:
            conn.execute("DELETE FROM settings WHERE key != 'version'")
            cursor = conn.execute("DELETE FROM resumes")
            return cursor.rowcount


def _saved_resume(row: tuple) -> SavedResume:
    resume_id, original_json, optimized_json, updated_at = row
    return SavedResume(
        id=resume_id,
        original=json.loads(original_json),
        optimized=json.loads(optimized_json) if optimized_json else None,
        updated_at=updated_at,
    )
