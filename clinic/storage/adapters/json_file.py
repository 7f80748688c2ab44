import os
import tempfile
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from clinic.domain.exceptions import ClinicError, StorageError
from clinic.domain.roster import Roster, RosterSnapshot
from clinic.storage.ports import AbstractRosterStorage


def dump_roster(roster: Roster) -> str:
    return roster.snapshot().model_dump_json(indent=2)


def load_roster(text: str) -> Roster:
    """Rebuild a roster from JSON produced by :func:`dump_roster`.

    Raises:
        StorageError: If the JSON is malformed, a record fails validation, or
            two records share an NRIC.
    """
    try:
        snapshot = RosterSnapshot.model_validate_json(text)
    except ValidationError as exc:
        raise StorageError(f"Data file is corrupted: {exc.error_count()} invalid value(s)") from exc

    try:
        return Roster.restore(snapshot)
    except ClinicError as exc:
        raise StorageError(f"Data file is corrupted: {exc}") from exc


class JsonFileRosterStorage(AbstractRosterStorage):
    """Stores the roster as a single JSON document on disk."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Roster:
        if not self._path.exists():
            logger.warning("Data file {} not found; starting with an empty roster", self._path)
            return Roster()

        try:
            text = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Could not read {self._path}: {exc}") from exc

        roster = load_roster(text)
        logger.info("Loaded {} patient(s) from {}", len(roster), self._path)
        return roster

    def save(self, roster: Roster) -> None:
        """Write through a temporary file; a failed save leaves the existing file intact."""
        payload = dump_roster(roster)
        tmp_name: str | None = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, self._path)
        except OSError as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Could not write {self._path}: {exc}") from exc

        logger.info("Saved {} patient(s) to {}", len(roster), self._path)
