import datetime as dt
import re
from typing import Any, TypeVar

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from clinic.domain.exceptions import InvalidArgumentError
from clinic.domain.models import (
    Address,
    Allergy,
    Birthdate,
    BloodType,
    Email,
    HealthRisk,
    HealthService,
    Name,
    Note,
    Nric,
    Phone,
    Sex,
)

T = TypeVar("T")

DATE_FORMAT = "%Y-%m-%d"
DATETIME_FORMAT = "%Y-%m-%d %H:%M"

NRIC_CONSTRAINTS = "NRIC should start with S, T, F, G or M, followed by 7 digits, and end with a letter."
NAME_CONSTRAINTS = (
    "Names should start with a letter or digit and contain only letters, digits, spaces "
    "and the characters ' - . /"
)
PHONE_CONSTRAINTS = "Phone numbers should only contain digits, and be 3 to 15 digits long."
EMAIL_CONSTRAINTS = "Emails should be of the format local-part@domain, e.g. john@example.com"
ADDRESS_CONSTRAINTS = "Addresses can take any value, but should not be blank or longer than 200 characters."
NOTE_CONSTRAINTS = "Notes can take any value, but should not be blank or longer than 500 characters."
ALLERGY_CONSTRAINTS = (
    "Allergies should be 1 to 30 characters of letters, digits, spaces and hyphens."
)
SEX_CONSTRAINTS = "Sex should be either M or F."
BLOOD_TYPE_CONSTRAINTS = "Blood type should be one of: " + ", ".join(b.value for b in BloodType)
HEALTH_RISK_CONSTRAINTS = "Health risk should be one of: " + ", ".join(r.value for r in HealthRisk)
HEALTH_SERVICE_CONSTRAINTS = "Health service should be one of: " + ", ".join(
    s.value for s in HealthService
)
DATE_CONSTRAINTS = "Dates should be in the format YYYY-MM-DD."
BIRTHDATE_CONSTRAINTS = "Birthdates should be in the format YYYY-MM-DD and cannot be in the future."
DATETIME_CONSTRAINTS = "Appointment date-times should be in the format YYYY-MM-DD HH:MM."


class ArgumentMultimap:
    """Values found after each prefix in a command's arguments.

    A prefix may appear several times; ``get`` returns the last occurrence.
    Text before the first prefix is the preamble.
    """

    def __init__(self, preamble: str, values: dict[str, list[str]]) -> None:
        self.preamble = preamble
        self._values = values

    def get(self, prefix: str) -> str | None:
        found = self._values.get(prefix)
        return found[-1] if found else None

    def get_all(self, prefix: str) -> list[str]:
        return list(self._values.get(prefix, []))

    def has(self, *prefixes: str) -> bool:
        return all(prefix in self._values for prefix in prefixes)

    def verify_no_duplicates(self, *prefixes: str, usage: str | None = None) -> None:
        duplicated = [p for p in prefixes if len(self._values.get(p, [])) > 1]
        if duplicated:
            raise InvalidArgumentError(
                "Multiple values specified for the following single-valued field(s): "
                + " ".join(duplicated),
                usage,
            )


def tokenize(args: str, *prefixes: str) -> ArgumentMultimap:
    """Split ``args`` on whitespace-preceded prefixes such as ``n/`` or ``dt/``.

    Longer prefixes are tried first, so ``nokn/`` is never read as ``n/``.
    """
    if not prefixes:
        return ArgumentMultimap(args.strip(), {})

    alternatives = "|".join(re.escape(p) for p in sorted(prefixes, key=len, reverse=True))
    pattern = re.compile(rf"(?:^|\s)({alternatives})")
    matches = list(pattern.finditer(args))

    preamble = args[: matches[0].start()] if matches else args
    values: dict[str, list[str]] = {}
    for match, following in zip(matches, [*matches[1:], None]):
        end = following.start() if following else len(args)
        values.setdefault(match.group(1), []).append(args[match.end() : end].strip())

    return ArgumentMultimap(preamble.strip(), values)


def _validate(adapter: TypeAdapter[T], value: Any, message: str) -> T:
    try:
        return adapter.validate_python(value)
    except ValidationError as exc:
        logger.debug("Rejected value: {}", exc.errors()[0]["msg"])
        raise InvalidArgumentError(message) from exc


_NRIC: TypeAdapter[str] = TypeAdapter(Nric)
_NAME: TypeAdapter[str] = TypeAdapter(Name)
_PHONE: TypeAdapter[str] = TypeAdapter(Phone)
_EMAIL: TypeAdapter[str] = TypeAdapter(Email)
_ADDRESS: TypeAdapter[str] = TypeAdapter(Address)
_NOTE: TypeAdapter[str] = TypeAdapter(Note)
_ALLERGY: TypeAdapter[str] = TypeAdapter(Allergy)
_BIRTHDATE: TypeAdapter[dt.date] = TypeAdapter(Birthdate)


def parse_nric(text: str) -> str:
    return _validate(_NRIC, text, NRIC_CONSTRAINTS)


def parse_name(text: str) -> str:
    return _validate(_NAME, text, NAME_CONSTRAINTS)


def parse_phone(text: str) -> str:
    return _validate(_PHONE, text, PHONE_CONSTRAINTS)


def parse_email(text: str) -> str:
    return _validate(_EMAIL, text, EMAIL_CONSTRAINTS)


def parse_address(text: str) -> str:
    return _validate(_ADDRESS, text, ADDRESS_CONSTRAINTS)


def parse_note(text: str) -> str:
    return _validate(_NOTE, text, NOTE_CONSTRAINTS)


def parse_allergy(text: str) -> str:
    return _validate(_ALLERGY, text, ALLERGY_CONSTRAINTS)


def parse_sex(text: str) -> Sex:
    try:
        return Sex(text.strip().upper())
    except ValueError as exc:
        raise InvalidArgumentError(SEX_CONSTRAINTS) from exc


def parse_blood_type(text: str) -> BloodType:
    try:
        return BloodType(text.strip().upper())
    except ValueError as exc:
        raise InvalidArgumentError(BLOOD_TYPE_CONSTRAINTS) from exc


def parse_health_risk(text: str) -> HealthRisk:
    try:
        return HealthRisk(text.strip().upper())
    except ValueError as exc:
        raise InvalidArgumentError(HEALTH_RISK_CONSTRAINTS) from exc


def parse_health_service(text: str) -> HealthService:
    """Accept ``VACCINATION``, ``vaccination`` or ``blood test`` style input."""
    normalized = re.sub(r"[\s\-]+", "_", text.strip()).upper()
    try:
        return HealthService(normalized)
    except ValueError as exc:
        raise InvalidArgumentError(HEALTH_SERVICE_CONSTRAINTS) from exc


def parse_date(text: str) -> dt.date:
    try:
        return dt.datetime.strptime(text.strip(), DATE_FORMAT).date()
    except ValueError as exc:
        raise InvalidArgumentError(DATE_CONSTRAINTS) from exc


def parse_birthdate(text: str) -> dt.date:
    try:
        value = dt.datetime.strptime(text.strip(), DATE_FORMAT).date()
    except ValueError as exc:
        raise InvalidArgumentError(BIRTHDATE_CONSTRAINTS) from exc
    return _validate(_BIRTHDATE, value, BIRTHDATE_CONSTRAINTS)


def parse_datetime(text: str) -> dt.datetime:
    """Parse ``2024-10-01 14:30``. Extra spaces between date and time are allowed."""
    collapsed = " ".join(text.split())
    try:
        return dt.datetime.strptime(collapsed, DATETIME_FORMAT)
    except ValueError as exc:
        raise InvalidArgumentError(DATETIME_CONSTRAINTS) from exc
