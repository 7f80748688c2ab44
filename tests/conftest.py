import datetime as dt

import pytest

from clinic.domain.models import AllergyList, Appt, HealthService, Patient, Sex
from clinic.domain.roster import Roster
from clinic.logic.service import ClinicService
from clinic.storage.adapters.memory import InMemoryRosterStorage


@pytest.fixture
def alice() -> Patient:
    return Patient(
        nric="S1234567A",
        name="Alice Pauline",
        sex=Sex.FEMALE,
        birthdate=dt.date(1990, 1, 15),
        phone="94351253",
        allergies=AllergyList.of("peanuts"),
        appts=(
            Appt(date_time=dt.datetime(2024, 9, 10, 9, 0), health_service=HealthService.VACCINATION),
            Appt(date_time=dt.datetime(2024, 12, 1, 10, 30), health_service=HealthService.CONSULT),
        ),
    )


@pytest.fixture
def benson() -> Patient:
    return Patient(
        nric="T0123456B",
        name="Benson Meier",
        sex=Sex.MALE,
        birthdate=dt.date(2001, 6, 30),
        phone="98765432",
        appts=(
            Appt(date_time=dt.datetime(2024, 8, 30, 8, 0), health_service=HealthService.BLOOD_TEST),
            Appt(date_time=dt.datetime(2024, 11, 30, 16, 45), health_service=HealthService.VACCINATION),
        ),
    )


@pytest.fixture
def carl() -> Patient:
    return Patient(
        nric="G7654321C",
        name="Carl Kurz",
        sex=Sex.MALE,
        birthdate=dt.date(1975, 3, 2),
        phone="95352563",
    )


@pytest.fixture
def roster(alice: Patient, benson: Patient, carl: Patient) -> Roster:
    return Roster([alice, benson, carl])


@pytest.fixture
def storage(roster: Roster) -> InMemoryRosterStorage:
    return InMemoryRosterStorage(roster.snapshot())


@pytest.fixture
def service(storage: InMemoryRosterStorage) -> ClinicService:
    return ClinicService(storage=storage)
