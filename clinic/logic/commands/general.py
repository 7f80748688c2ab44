from typing import ClassVar

from clinic.domain.roster import Roster
from clinic.logic.commands.base import Command
from clinic.logic.results import CommandResult, ResultView


class HelpCommand(Command):
    """Shows usage text. The parser resolves which text to show."""

    COMMAND_WORD = "help"
    USAGE = (
        "help: Shows the available commands, or the usage of one command.\n"
        "Parameters: [COMMAND]\n"
        "Example: help bookappt"
    )

    message: str

    def execute(self, roster: Roster) -> CommandResult:
        return CommandResult(feedback=self.message, view=ResultView.HELP)


class ExitCommand(Command):
    COMMAND_WORD = "exit"
    USAGE = "exit: Exits the program.\nExample: exit"
    SUCCESS: ClassVar[str] = "Exiting clinic records as requested ..."

    def execute(self, roster: Roster) -> CommandResult:
        return CommandResult(feedback=self.SUCCESS, view=ResultView.EXIT)
