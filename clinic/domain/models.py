import datetime as dt
from enum import Enum
from typing import Annotated

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    NaiveDatetime,
    StringConstraints,
    field_validator,
    model_validator,
)


class Sex(str, Enum):
    MALE = "M"
    FEMALE = "F"


class BloodType(str, Enum):
    A_POSITIVE = "A+"
    A_NEGATIVE = "A-"
    B_POSITIVE = "B+"
    B_NEGATIVE = "B-"
    AB_POSITIVE = "AB+"
    AB_NEGATIVE = "AB-"
    O_POSITIVE = "O+"
    O_NEGATIVE = "O-"


class HealthRisk(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class HealthService(str, Enum):
    """Services an appointment can be booked under."""

    CONSULT = "CONSULT"
    BLOOD_TEST = "BLOOD_TEST"
    CANCER_SCREENING = "CANCER_SCREENING"
    VACCINATION = "VACCINATION"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


def _not_in_future(value: dt.date) -> dt.date:
    if value > dt.date.today():
        raise ValueError("Birthdate cannot be in the future")
    return value


Nric = Annotated[
    str,
    StringConstraints(strip_whitespace=True, to_upper=True, pattern=r"^[STFGMstfgm]\d{7}[A-Za-z]$"),
]
Name = Annotated[
    str,
    StringConstraints(strip_whitespace=True, max_length=100, pattern=r"^[A-Za-z0-9][A-Za-z0-9 '\-./]*$"),
]
Phone = Annotated[str, StringConstraints(strip_whitespace=True, pattern=r"^\d{3,15}$")]
Email = Annotated[
    str,
    StringConstraints(strip_whitespace=True, pattern=r"^[\w.+\-]+@[A-Za-z0-9\-]+(\.[A-Za-z0-9\-]+)+$"),
]
Address = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
Note = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=500)]
Allergy = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=30, pattern=r"^[A-Za-z0-9][A-Za-z0-9 \-]*$"),
]
Birthdate = Annotated[dt.date, AfterValidator(_not_in_future)]


class AllergyList(BaseModel):
    """An immutable set of allergies.

    Allergies are compared case-insensitively, so ``Peanuts`` and ``peanuts``
    collapse into one entry. ``allergies`` is always sorted alphabetically,
    regardless of the order the values were supplied in.
    """

    model_config = ConfigDict(frozen=True)

    items: frozenset[Allergy] = frozenset()

    @field_validator("items", mode="after")
    @classmethod
    def _collapse_case(cls, value: frozenset[str]) -> frozenset[str]:
        seen: dict[str, str] = {}
        for allergy in sorted(value):
            seen.setdefault(allergy.lower(), allergy)
        return frozenset(seen.values())

    @classmethod
    def of(cls, *allergies: str) -> "AllergyList":
        return cls(items=frozenset(allergies))

    @property
    def allergies(self) -> tuple[str, ...]:
        return tuple(sorted(self.items, key=lambda a: (a.lower(), a)))

    def contains(self, allergy: str) -> bool:
        return allergy.strip().lower() in {a.lower() for a in self.items}

    def with_added(self, allergies: "AllergyList") -> "AllergyList":
        return AllergyList(items=self.items | allergies.items)

    def without(self, allergies: "AllergyList") -> "AllergyList":
        removed = {a.lower() for a in allergies.items}
        return AllergyList(items=frozenset(a for a in self.items if a.lower() not in removed))

    def __len__(self) -> int:
        return len(self.items)

    def __str__(self) -> str:
        return ", ".join(self.allergies)


class Appt(BaseModel):
    """A single booked appointment."""

    model_config = ConfigDict(frozen=True)

    date_time: NaiveDatetime
    health_service: HealthService

    @field_validator("date_time", mode="after")
    @classmethod
    def _minute_precision(cls, value: dt.datetime) -> dt.datetime:
        return value.replace(second=0, microsecond=0)

    def matches(self, date_filter: "AppointmentDateFilter") -> bool:
        """True when the appointment falls in the filter's date range and service set."""
        if not date_filter.start_date <= self.date_time.date() <= date_filter.end_date:
            return False
        return not date_filter.services or self.health_service in date_filter.services

    def __str__(self) -> str:
        return f"{self.date_time:%Y-%m-%d %H:%M} {self.health_service.label}"


class AppointmentDateFilter(BaseModel):
    """Inclusive date range plus an optional set of accepted services."""

    model_config = ConfigDict(frozen=True)

    start_date: dt.date
    end_date: dt.date
    services: frozenset[HealthService] = frozenset()

    @model_validator(mode="after")
    def _check_range(self) -> "AppointmentDateFilter":
        if self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        return self


class Patient(BaseModel):
    """A registered patient and the appointments booked for them.

    The NRIC identifies the patient within a roster. Appointments are exposed
    as a tuple; use ``add_appt``/``remove_appt`` to change them.
    """

    nric: Nric
    name: Name
    sex: Sex
    birthdate: Birthdate
    phone: Phone
    email: Email | None = None
    address: Address | None = None
    blood_type: BloodType | None = None
    health_risk: HealthRisk | None = None
    existing_condition: Note | None = None
    note: Note | None = None
    nok_name: Name | None = None
    nok_phone: Phone | None = None
    allergies: AllergyList = Field(default_factory=AllergyList)
    appts: tuple[Appt, ...] = ()

    def add_appt(self, appt: Appt) -> None:
        self.appts = (*self.appts, appt)

    def remove_appt(self, appt: Appt) -> bool:
        """Drop one appointment equal to ``appt``. Returns False if none matched."""
        for index, existing in enumerate(self.appts):
            if existing == appt:
                self.appts = self.appts[:index] + self.appts[index + 1 :]
                return True
        return False

    def has_appt(self, appt: Appt) -> bool:
        return any(existing == appt for existing in self.appts)


class FilteredAppointment(BaseModel):
    """An appointment paired with the patient who owns it."""

    model_config = ConfigDict(frozen=True)

    appt: Appt
    patient: Patient

    @property
    def sort_key(self) -> tuple[dt.datetime, str]:
        return self.appt.date_time, self.patient.nric


def sort_appointments(appointments: list[FilteredAppointment]) -> list[FilteredAppointment]:
    """Order by appointment time, then patient NRIC. Ties on both are all kept."""
    return sorted(appointments, key=lambda fa: fa.sort_key)
