from abc import ABC, abstractmethod

from clinic.domain.roster import Roster


class AbstractRosterStorage(ABC):
    """Abstract base class for durable roster storage."""

    @abstractmethod
    def load(self) -> Roster:
        """Read the stored roster.

        Returns:
            The stored roster, or an empty roster if nothing has been saved yet.

        Raises:
            StorageError: If stored data exists but cannot be read or is invalid.
        """

    @abstractmethod
    def save(self, roster: Roster) -> None:
        """Replace the stored roster with ``roster``.

        Raises:
            StorageError: If the roster cannot be written.
        """
