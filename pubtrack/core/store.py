"""In-memory user store.

Reference implementation of the persistence collaborator. Email and
faculty id are unique indexes (case-insensitive; ``N/A`` faculty ids are
not indexed), enforced under a lock at write time. The pipeline's
advisory lookups read the same indexes without the lock.
"""
from __future__ import annotations
import logging
import threading
import uuid
from dataclasses import replace
from typing import Iterable, Optional

from pubtrack.core.catalog import NA
from pubtrack.core.exceptions import DuplicateEmailError, DuplicateFacultyIdError
from pubtrack.core.models import CandidateUser, UserRecord

logger = logging.getLogger(__name__)


class InMemoryUserStore:
    """Thread-safe dict-backed store with unique email / faculty id."""

    def __init__(self, records: Iterable[UserRecord] = ()):
        self._lock = threading.Lock()
        self._records: dict[str, UserRecord] = {}
        self._emails: dict[str, str] = {}
        self._faculty_ids: dict[str, str] = {}
        for record in records:
            self._write(record)

    # ─────────────────────────────────────────────────────────────────────
    # Advisory lookups
    # ─────────────────────────────────────────────────────────────────────

    def email_exists(self, email: str, exclude_id: Optional[str] = None) -> bool:
        owner = self._emails.get(email.lower())
        return owner is not None and owner != exclude_id

    def faculty_id_exists(self, faculty_id: str, exclude_id: Optional[str] = None) -> bool:
        if faculty_id == NA:
            return False
        owner = self._faculty_ids.get(faculty_id.lower())
        return owner is not None and owner != exclude_id

    # ─────────────────────────────────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────────────────────────────────

    def get(self, user_id: str) -> Optional[UserRecord]:
        return self._records.get(user_id)

    def all(self) -> list[UserRecord]:
        return list(self._records.values())

    def __len__(self) -> int:
        return len(self._records)

    # ─────────────────────────────────────────────────────────────────────
    # Writes
    # ─────────────────────────────────────────────────────────────────────

    def insert(self, user: CandidateUser, created_by: Optional[str] = None) -> UserRecord:
        """Insert a new user.

        Raises:
            DuplicateEmailError: If the email is taken
            DuplicateFacultyIdError: If the faculty id is taken
        """
        record = UserRecord(id=uuid.uuid4().hex, user=user, created_by=created_by)
        with self._lock:
            self._check_unique(user, exclude_id=None)
            self._write(record)
        logger.debug("Inserted user %s (%s)", record.id, user.role.value)
        return record

    def update(self, user_id: str, user: CandidateUser) -> UserRecord:
        """Replace the user fields of an existing record.

        Raises:
            KeyError: If no record has ``user_id``
            DuplicateEmailError / DuplicateFacultyIdError: On index conflict
        """
        with self._lock:
            current = self._records[user_id]
            self._check_unique(user, exclude_id=user_id)
            self._unindex(current)
            record = replace(current, user=user)
            self._write(record)
        return record

    def replace(self, record: UserRecord) -> UserRecord:
        """Store a record whose indexed fields are unchanged (profile edits)."""
        with self._lock:
            current = self._records[record.id]
            if current.user.email != record.user.email or current.user.faculty_id != record.user.faculty_id:
                raise ValueError("replace() cannot change indexed fields; use update()")
            self._records[record.id] = record
        return record

    def delete(self, user_id: str) -> bool:
        with self._lock:
            record = self._records.pop(user_id, None)
            if record is None:
                return False
            self._unindex(record)
        return True

    def _check_unique(self, user: CandidateUser, exclude_id: Optional[str]) -> None:
        if self.email_exists(user.email, exclude_id):
            raise DuplicateEmailError(user.email)
        if self.faculty_id_exists(user.faculty_id, exclude_id):
            raise DuplicateFacultyIdError(user.faculty_id)

    def _write(self, record: UserRecord) -> None:
        self._records[record.id] = record
        self._emails[record.user.email.lower()] = record.id
        if record.user.faculty_id != NA:
            self._faculty_ids[record.user.faculty_id.lower()] = record.id

    def _unindex(self, record: UserRecord) -> None:
        self._emails.pop(record.user.email.lower(), None)
        if record.user.faculty_id != NA:
            self._faculty_ids.pop(record.user.faculty_id.lower(), None)
