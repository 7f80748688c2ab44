"""Turns operator input such as ``bookappt S1234567A dt/2024-10-01 14:30 h/consult``
into a typed :class:`Command`.

Every value is validated here; commands only ever receive domain types.
"""

from typing import Any, Callable

from loguru import logger
from pydantic import ValidationError

from clinic.domain.exceptions import InvalidArgumentError
from clinic.domain.models import AllergyList, AppointmentDateFilter, Appt, Patient
from clinic.logic.commands.appointments import BookApptCommand, DeleteApptCommand, FilterCommand
from clinic.logic.commands.base import Command
from clinic.logic.commands.general import ExitCommand, HelpCommand
from clinic.logic.commands.patients import (
    AddCommand,
    ClearCommand,
    DeleteCommand,
    EditCommand,
    EditPatientDescriptor,
    FindCommand,
    HomeCommand,
    ViewCommand,
)
from clinic.logic.parsing_helpers import (
    ArgumentMultimap,
    parse_address,
    parse_allergy,
    parse_birthdate,
    parse_blood_type,
    parse_date,
    parse_datetime,
    parse_email,
    parse_health_risk,
    parse_health_service,
    parse_name,
    parse_note,
    parse_nric,
    parse_phone,
    parse_sex,
    tokenize,
)

PREFIX_NAME = "n/"
PREFIX_NRIC = "i/"
PREFIX_SEX = "s/"
PREFIX_BIRTHDATE = "b/"
PREFIX_PHONE = "p/"
PREFIX_EMAIL = "e/"
PREFIX_ADDRESS = "a/"
PREFIX_BLOOD_TYPE = "bt/"
PREFIX_ALLERGY = "al/"
PREFIX_REMOVE_ALLERGY = "rmal/"
PREFIX_HEALTH_RISK = "hr/"
PREFIX_EXISTING_CONDITION = "ec/"
PREFIX_NOTE = "no/"
PREFIX_NOK_NAME = "nokn/"
PREFIX_NOK_PHONE = "nokp/"
PREFIX_DATETIME = "dt/"
PREFIX_HEALTH_SERVICE = "h/"
PREFIX_START_DATE = "sd/"
PREFIX_END_DATE = "ed/"

INVALID_FORMAT = "Invalid command format!"
UNKNOWN_COMMAND = "Unknown command"

_REQUIRED_PATIENT_PREFIXES = (PREFIX_NAME, PREFIX_NRIC, PREFIX_SEX, PREFIX_BIRTHDATE, PREFIX_PHONE)

# Single-valued optional fields shared by addf and edit, with the parser for each.
_OPTIONAL_FIELDS: dict[str, tuple[str, Callable[[str], Any]]] = {
    PREFIX_EMAIL: ("email", parse_email),
    PREFIX_ADDRESS: ("address", parse_address),
    PREFIX_BLOOD_TYPE: ("blood_type", parse_blood_type),
    PREFIX_HEALTH_RISK: ("health_risk", parse_health_risk),
    PREFIX_EXISTING_CONDITION: ("existing_condition", parse_note),
    PREFIX_NOTE: ("note", parse_note),
    PREFIX_NOK_NAME: ("nok_name", parse_name),
    PREFIX_NOK_PHONE: ("nok_phone", parse_phone),
}

_REQUIRED_FIELDS: dict[str, tuple[str, Callable[[str], Any]]] = {
    PREFIX_NAME: ("name", parse_name),
    PREFIX_NRIC: ("nric", parse_nric),
    PREFIX_SEX: ("sex", parse_sex),
    PREFIX_BIRTHDATE: ("birthdate", parse_birthdate),
    PREFIX_PHONE: ("phone", parse_phone),
}


def _parse_fields(
    arguments: ArgumentMultimap, fields: dict[str, tuple[str, Callable[[str], Any]]]
) -> dict[str, Any]:
    parsed: dict[str, Any] = {}
    for prefix, (name, parse) in fields.items():
        value = arguments.get(prefix)
        if value is not None:
            parsed[name] = parse(value)
    return parsed


def _parse_allergies(values: list[str]) -> AllergyList:
    return AllergyList(items=frozenset(parse_allergy(v) for v in values))


def _build_patient(fields: dict[str, Any], usage: str) -> Patient:
    try:
        return Patient(**fields)
    except ValidationError as exc:
        raise InvalidArgumentError(exc.errors()[0]["msg"], usage) from exc


def _parse_add(args: str) -> Command:
    arguments = tokenize(args, *_REQUIRED_PATIENT_PREFIXES)
    if not arguments.has(*_REQUIRED_PATIENT_PREFIXES) or arguments.preamble:
        raise InvalidArgumentError(INVALID_FORMAT, AddCommand.USAGE)

    arguments.verify_no_duplicates(*_REQUIRED_PATIENT_PREFIXES, usage=AddCommand.USAGE)
    fields = _parse_fields(arguments, _REQUIRED_FIELDS)
    return AddCommand(patient=_build_patient(fields, AddCommand.USAGE))


def _parse_add_full(args: str) -> Command:
    prefixes = (*_REQUIRED_PATIENT_PREFIXES, *_OPTIONAL_FIELDS, PREFIX_ALLERGY)
    arguments = tokenize(args, *prefixes)
    if not arguments.has(*_REQUIRED_PATIENT_PREFIXES) or arguments.preamble:
        raise InvalidArgumentError(INVALID_FORMAT, AddCommand.FULL_USAGE)

    arguments.verify_no_duplicates(*_REQUIRED_PATIENT_PREFIXES, *_OPTIONAL_FIELDS, usage=AddCommand.FULL_USAGE)
    fields = _parse_fields(arguments, _REQUIRED_FIELDS | _OPTIONAL_FIELDS)
    fields["allergies"] = _parse_allergies(arguments.get_all(PREFIX_ALLERGY))
    return AddCommand(patient=_build_patient(fields, AddCommand.FULL_USAGE))


def _parse_preamble_nric(arguments: ArgumentMultimap, usage: str) -> str:
    if not arguments.preamble or len(arguments.preamble.split()) != 1:
        raise InvalidArgumentError(INVALID_FORMAT, usage)
    return parse_nric(arguments.preamble)


def _parse_delete(args: str) -> Command:
    return DeleteCommand(nric=_parse_preamble_nric(tokenize(args), DeleteCommand.USAGE))


def _parse_view(args: str) -> Command:
    return ViewCommand(nric=_parse_preamble_nric(tokenize(args), ViewCommand.USAGE))


def _parse_edit(args: str) -> Command:
    single = (*_REQUIRED_PATIENT_PREFIXES, *_OPTIONAL_FIELDS)
    arguments = tokenize(args, *single, PREFIX_ALLERGY, PREFIX_REMOVE_ALLERGY)
    nric = _parse_preamble_nric(arguments, EditCommand.USAGE)

    arguments.verify_no_duplicates(*single, usage=EditCommand.USAGE)
    fields = _parse_fields(arguments, _REQUIRED_FIELDS | _OPTIONAL_FIELDS)
    descriptor = EditPatientDescriptor(
        **fields,
        add_allergies=_parse_allergies(arguments.get_all(PREFIX_ALLERGY)),
        remove_allergies=_parse_allergies(arguments.get_all(PREFIX_REMOVE_ALLERGY)),
    )
    if not descriptor.is_any_field_edited():
        raise InvalidArgumentError(EditCommand.NOT_EDITED, EditCommand.USAGE)
    return EditCommand(nric=nric, descriptor=descriptor)


def _parse_appt_arguments(args: str, usage: str) -> tuple[str, Appt]:
    arguments = tokenize(args, PREFIX_DATETIME, PREFIX_HEALTH_SERVICE)
    if not arguments.has(PREFIX_DATETIME, PREFIX_HEALTH_SERVICE):
        raise InvalidArgumentError(INVALID_FORMAT, usage)

    nric = _parse_preamble_nric(arguments, usage)
    arguments.verify_no_duplicates(PREFIX_DATETIME, PREFIX_HEALTH_SERVICE)
    appt = Appt(
        date_time=parse_datetime(arguments.get(PREFIX_DATETIME) or ""),
        health_service=parse_health_service(arguments.get(PREFIX_HEALTH_SERVICE) or ""),
    )
    return nric, appt


def _parse_book_appt(args: str) -> Command:
    nric, appt = _parse_appt_arguments(args, BookApptCommand.USAGE)
    return BookApptCommand(nric=nric, appt=appt)


def _parse_delete_appt(args: str) -> Command:
    nric, appt = _parse_appt_arguments(args, DeleteApptCommand.USAGE)
    return DeleteApptCommand(nric=nric, appt=appt)


def _parse_filter(args: str) -> Command:
    arguments = tokenize(args, PREFIX_START_DATE, PREFIX_END_DATE, PREFIX_HEALTH_SERVICE)
    if not arguments.has(PREFIX_START_DATE, PREFIX_END_DATE) or arguments.preamble:
        raise InvalidArgumentError(INVALID_FORMAT, FilterCommand.USAGE)

    arguments.verify_no_duplicates(PREFIX_START_DATE, PREFIX_END_DATE)
    start = parse_date(arguments.get(PREFIX_START_DATE) or "")
    end = parse_date(arguments.get(PREFIX_END_DATE) or "")
    services = frozenset(parse_health_service(s) for s in arguments.get_all(PREFIX_HEALTH_SERVICE))

    try:
        date_filter = AppointmentDateFilter(start_date=start, end_date=end, services=services)
    except ValidationError as exc:
        raise InvalidArgumentError("End date cannot be before start date", FilterCommand.USAGE) from exc
    return FilterCommand(date_filter=date_filter)


def _parse_find(args: str) -> Command:
    keywords = tuple(args.split())
    if not keywords:
        raise InvalidArgumentError(INVALID_FORMAT, FindCommand.USAGE)
    return FindCommand(keywords=keywords)


def _parse_help(args: str) -> Command:
    topic = args.strip().lower()
    if not topic:
        overview = "\n".join(command.USAGE.splitlines()[0] for command in _COMMANDS.values())
        return HelpCommand(message=f"Available commands:\n{overview}")

    command = _COMMANDS.get(topic)
    if command is None:
        raise InvalidArgumentError(f"{UNKNOWN_COMMAND}: {topic}", HelpCommand.USAGE)
    usage = AddCommand.FULL_USAGE if topic == "addf" else command.USAGE
    return HelpCommand(message=usage)


_COMMANDS: dict[str, type[Command]] = {
    AddCommand.COMMAND_WORD: AddCommand,
    "addf": AddCommand,
    DeleteCommand.COMMAND_WORD: DeleteCommand,
    EditCommand.COMMAND_WORD: EditCommand,
    BookApptCommand.COMMAND_WORD: BookApptCommand,
    DeleteApptCommand.COMMAND_WORD: DeleteApptCommand,
    FilterCommand.COMMAND_WORD: FilterCommand,
    FindCommand.COMMAND_WORD: FindCommand,
    ViewCommand.COMMAND_WORD: ViewCommand,
    HomeCommand.COMMAND_WORD: HomeCommand,
    ClearCommand.COMMAND_WORD: ClearCommand,
    HelpCommand.COMMAND_WORD: HelpCommand,
    ExitCommand.COMMAND_WORD: ExitCommand,
}

_PARSERS: dict[str, Callable[[str], Command]] = {
    AddCommand.COMMAND_WORD: _parse_add,
    "addf": _parse_add_full,
    DeleteCommand.COMMAND_WORD: _parse_delete,
    EditCommand.COMMAND_WORD: _parse_edit,
    BookApptCommand.COMMAND_WORD: _parse_book_appt,
    DeleteApptCommand.COMMAND_WORD: _parse_delete_appt,
    FilterCommand.COMMAND_WORD: _parse_filter,
    FindCommand.COMMAND_WORD: _parse_find,
    ViewCommand.COMMAND_WORD: _parse_view,
    HomeCommand.COMMAND_WORD: lambda _: HomeCommand(),
    ClearCommand.COMMAND_WORD: lambda _: ClearCommand(),
    HelpCommand.COMMAND_WORD: _parse_help,
    ExitCommand.COMMAND_WORD: lambda _: ExitCommand(),
}


def parse_command(text: str) -> Command:
    """Parse one line of operator input.

    Raises:
        InvalidArgumentError: If the command word is unknown or its arguments
            are malformed or invalid.
    """
    word, _, args = text.strip().partition(" ")
    if not word:
        raise InvalidArgumentError(INVALID_FORMAT, HelpCommand.USAGE)

    parse = _PARSERS.get(word.lower())
    if parse is None:
        raise InvalidArgumentError(UNKNOWN_COMMAND)

    logger.debug("Parsing '{}' command", word.lower())
    return parse(" " + args)
