from clinic.domain.roster import Roster, RosterSnapshot
from clinic.storage.ports import AbstractRosterStorage


class InMemoryRosterStorage(AbstractRosterStorage):
    """Keeps the roster in memory. Used for throwaway sessions and as a test double.

    Pre-load ``snapshot`` to control what ``load`` returns.  Set ``load_error``
    or ``save_error`` to make the corresponding method raise.

    After calls, inspect ``saves`` to see how many times the roster was
    written and ``snapshot`` for the last saved contents.
    """

    def __init__(self, snapshot: RosterSnapshot | None = None) -> None:
        self.snapshot: RosterSnapshot = snapshot or RosterSnapshot()
        self.saves: int = 0

        self.load_error: Exception | None = None
        self.save_error: Exception | None = None

    def load(self) -> Roster:
        if self.load_error:
            raise self.load_error
        return Roster.restore(self.snapshot)

    def save(self, roster: Roster) -> None:
        if self.save_error:
            raise self.save_error
        self.snapshot = roster.snapshot()
        self.saves += 1
