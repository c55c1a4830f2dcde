"""Email history repository - JSON flat-file storage for sent emails"""

import json
import logging
import math
import random
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the history file cannot be written"""


class EmailRepository:
    """
    Repository for the sent-email history.

    The whole history is one JSON array, newest first. Every mutation reads
    the file, changes the list and rewrites the file wholesale.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._ensure_file()

    def _ensure_file(self) -> None:
        """Create the data directory and an empty history on first use"""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            if not self.path.exists():
                self._write([])
        except OSError as e:
            logger.error(f"Error initialising database at {self.path}: {e}")
            raise StoreError(f"Cannot initialise database: {e}") from e

    def _read(self) -> list[dict[str, Any]]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error reading database: {e}")
            return []

        if not isinstance(data, list):
            logger.error(f"Error reading database: expected a JSON array in {self.path}")
            return []
        return data

    def _write(self, emails: list[dict[str, Any]]) -> None:
        try:
            self.path.write_text(json.dumps(emails, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            logger.error(f"Error writing database: {e}")
            raise StoreError(f"Cannot write database: {e}") from e

    @staticmethod
    def _matches(email: dict[str, Any], email_id: str) -> bool:
        """Loose id comparison: '1700000000000.5' matches 1700000000000.5"""
        stored = email.get("id")
        if str(stored) == str(email_id):
            return True
        try:
            return float(stored) == float(email_id)
        except (TypeError, ValueError):
            return False

    @staticmethod
    def generate_id() -> float:
        """Millisecond timestamp plus a random fraction (not collision-proof)"""
        return time.time() * 1000 + random.random()

    def add_email(self, email_data: dict[str, Any]) -> float:
        """Prepend a new record and return its id"""
        emails = self._read()
        new_email = {
            "id": self.generate_id(),
            **email_data,
            "sent_at": datetime.now(timezone.utc).isoformat(),
        }
        emails.insert(0, new_email)
        self._write(emails)
        return new_email["id"]

    def get_emails(self, page: int = 1, limit: int = 10) -> dict[str, Any]:
        """Return one page of history plus the totals needed for pagination"""
        emails = self._read()
        start_index = (page - 1) * limit
        end_index = start_index + limit

        return {
            "emails": emails[start_index:end_index],
            "total": len(emails),
            "page": page,
            "total_pages": math.ceil(len(emails) / limit),
        }

    def get_email_by_id(self, email_id: str) -> Optional[dict[str, Any]]:
        """Find a record by id"""
        return next((email for email in self._read() if self._matches(email, email_id)), None)

    def delete_email_by_id(self, email_id: str) -> bool:
        """Remove a record; the file is only rewritten when something was removed"""
        emails = self._read()
        remaining = [email for email in emails if not self._matches(email, email_id)]
        deleted = len(remaining) != len(emails)
        if deleted:
            self._write(remaining)
        return deleted
