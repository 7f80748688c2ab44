from abc import ABC, abstractmethod
from typing import ClassVar

from pydantic import BaseModel, ConfigDict

from clinic.domain.roster import Roster
from clinic.logic.results import CommandResult


class Command(BaseModel, ABC):
    """A parsed operator command, ready to run against a roster.

    Commands are frozen value objects: two commands built from the same
    arguments compare equal.
    """

    model_config = ConfigDict(frozen=True)

    COMMAND_WORD: ClassVar[str]
    USAGE: ClassVar[str]
    # Whether a successful run changes the roster and should be persisted.
    MUTATES: ClassVar[bool] = False

    @abstractmethod
    def execute(self, roster: Roster) -> CommandResult:
        """Apply the command to ``roster``.

        Args:
            roster: The roster to read and, for mutating commands, modify.

        Returns:
            The result describing what the presentation layer should show.

        Raises:
            CommandError: If a precondition fails. The roster is left untouched.
            InvalidArgumentError: If an argument is invalid for the current roster.
        """
