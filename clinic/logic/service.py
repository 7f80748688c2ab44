import threading

from loguru import logger

from clinic.domain.exceptions import StorageError
from clinic.domain.roster import Roster, RosterSnapshot
from clinic.logic.commands.base import Command
from clinic.logic.parser import parse_command
from clinic.logic.results import CommandResult
from clinic.storage.ports import AbstractRosterStorage


class ClinicService:
    """Runs operator commands against the roster and persists the changes.

    One command runs at a time. A mutating command whose save fails is rolled
    back, so the in-memory roster always matches what was last stored.
    """

    def __init__(self, storage: AbstractRosterStorage) -> None:
        self._storage = storage
        self._lock = threading.Lock()
        self._last_result: CommandResult | None = None

        try:
            self._roster = storage.load()
        except StorageError:
            raise
        except Exception as exc:
            raise StorageError(f"Roster load failed: {exc}") from exc

    @property
    def roster(self) -> Roster:
        return self._roster

    @property
    def last_result(self) -> CommandResult | None:
        """The result of the most recent successful command, for redrawing the view."""
        return self._last_result

    def execute(self, command_text: str) -> CommandResult:
        """Parse and run one line of operator input."""
        return self.run(parse_command(command_text))

    def run(self, command: Command) -> CommandResult:
        with self._lock:
            logger.info("Executing '{}' command", command.COMMAND_WORD)
            before = self._roster.snapshot() if command.MUTATES else None

            result = command.execute(self._roster)

            if before is not None:
                self._save(before)

            self._last_result = result
            return result

    def _save(self, before: RosterSnapshot) -> None:
        try:
            self._storage.save(self._roster)
        except Exception as exc:
            logger.error("Save failed; rolling back the last command")
            self._roster = Roster.restore(before)
            if isinstance(exc, StorageError):
                raise
            raise StorageError(f"Roster save failed: {exc}") from exc
