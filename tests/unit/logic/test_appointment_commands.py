import datetime as dt

import pytest

from clinic.domain.exceptions import (
    AppointmentNotFoundError,
    DuplicateAppointmentError,
    PatientNotFoundError,
)
from clinic.domain.models import AppointmentDateFilter, Appt, HealthService, Patient
from clinic.domain.roster import Roster
from clinic.logic.commands.appointments import BookApptCommand, DeleteApptCommand, FilterCommand
from clinic.logic.results import AppointmentListResult, PatientDetailResult, ResultView

# Fixtures (alice, benson, carl, roster) provided by tests/conftest.py


@pytest.fixture
def new_appt() -> Appt:
    return Appt(date_time=dt.datetime(2024, 10, 1, 14, 30), health_service=HealthService.CANCER_SCREENING)


class TestBookApptCommand:
    def test_adds_appointment_in_place(self, roster: Roster, carl: Patient, new_appt: Appt) -> None:
        result = BookApptCommand(nric=carl.nric, appt=new_appt).execute(roster)

        assert isinstance(result, PatientDetailResult)
        assert result.view is ResultView.PATIENT_DETAIL
        assert result.feedback.startswith("Appointment added successfully for Carl Kurz")
        assert roster.get(carl.nric) is carl
        assert carl.appts == (new_appt,)
        assert result.patient.appts == (new_appt,)

    def test_count_grows_by_exactly_one(self, roster: Roster, alice: Patient, new_appt: Appt) -> None:
        before = len(alice.appts)

        BookApptCommand(nric=alice.nric, appt=new_appt).execute(roster)

        assert len(alice.appts) == before + 1
        assert new_appt in alice.appts

    def test_duplicate_fails_without_mutation(self, roster: Roster, carl: Patient, new_appt: Appt) -> None:
        command = BookApptCommand(nric=carl.nric, appt=new_appt)
        command.execute(roster)

        with pytest.raises(DuplicateAppointmentError, match="Appointment already exists on this date and time"):
            command.execute(roster)

        assert len(carl.appts) == 1

    def test_same_slot_allowed_for_different_patients(
        self, roster: Roster, alice: Patient, carl: Patient
    ) -> None:
        slot = alice.appts[0]

        BookApptCommand(nric=carl.nric, appt=slot).execute(roster)

        assert carl.appts == (slot,)

    def test_same_time_different_service_is_not_duplicate(
        self, roster: Roster, alice: Patient
    ) -> None:
        existing = alice.appts[0]
        other = Appt(date_time=existing.date_time, health_service=HealthService.BLOOD_TEST)

        BookApptCommand(nric=alice.nric, appt=other).execute(roster)

        assert len(alice.appts) == 3

    def test_unknown_patient_fails(self, roster: Roster, new_appt: Appt) -> None:
        before = roster.snapshot()

        with pytest.raises(PatientNotFoundError, match="Patient not found"):
            BookApptCommand(nric="F0000000Z", appt=new_appt).execute(roster)

        assert Roster.restore(before) == roster

    def test_equality(self, new_appt: Appt) -> None:
        command = BookApptCommand(nric="S1234567A", appt=new_appt)
        other_appt = Appt(date_time=new_appt.date_time, health_service=HealthService.CONSULT)

        assert command == command
        assert command == BookApptCommand(nric="S1234567A", appt=new_appt)
        assert command != BookApptCommand(nric="T0123456B", appt=new_appt)
        assert command != BookApptCommand(nric="S1234567A", appt=other_appt)
        assert command != 1
        assert command is not None


class TestDeleteApptCommand:
    def test_removes_appointment(self, roster: Roster, alice: Patient) -> None:
        target = alice.appts[0]

        result = DeleteApptCommand(nric=alice.nric, appt=target).execute(roster)

        assert target not in alice.appts
        assert result.feedback == "Appointment deleted successfully for Alice Pauline"

    def test_missing_appointment_fails(self, roster: Roster, carl: Patient, new_appt: Appt) -> None:
        with pytest.raises(AppointmentNotFoundError):
            DeleteApptCommand(nric=carl.nric, appt=new_appt).execute(roster)

    def test_unknown_patient_fails(self, roster: Roster, new_appt: Appt) -> None:
        with pytest.raises(PatientNotFoundError):
            DeleteApptCommand(nric="F0000000Z", appt=new_appt).execute(roster)


def _filter(start: dt.date, end: dt.date, *services: HealthService) -> FilterCommand:
    return FilterCommand(
        date_filter=AppointmentDateFilter(start_date=start, end_date=end, services=frozenset(services))
    )


class TestFilterCommand:
    def test_filters_by_range_and_service_across_patients(self, roster: Roster) -> None:
        result = _filter(dt.date(2024, 8, 30), dt.date(2024, 11, 30), HealthService.VACCINATION).execute(roster)

        assert isinstance(result, AppointmentListResult)
        assert result.view is ResultView.APPOINTMENTS
        assert [(fa.patient.nric, fa.appt.date_time) for fa in result.appointments] == [
            ("S1234567A", dt.datetime(2024, 9, 10, 9, 0)),
            ("T0123456B", dt.datetime(2024, 11, 30, 16, 45)),
        ]
        assert all(fa.appt.health_service is HealthService.VACCINATION for fa in result.appointments)

    def test_empty_service_set_accepts_every_service(self, roster: Roster) -> None:
        result = _filter(dt.date(2024, 8, 30), dt.date(2024, 11, 30)).execute(roster)

        assert [fa.appt.health_service for fa in result.appointments] == [
            HealthService.BLOOD_TEST,
            HealthService.VACCINATION,
            HealthService.VACCINATION,
        ]

    def test_multiple_services(self, roster: Roster) -> None:
        result = _filter(
            dt.date(2024, 1, 1), dt.date(2024, 12, 31), HealthService.CONSULT, HealthService.BLOOD_TEST
        ).execute(roster)

        assert [fa.appt.health_service for fa in result.appointments] == [
            HealthService.BLOOD_TEST,
            HealthService.CONSULT,
        ]

    def test_results_are_ordered_by_time(self, roster: Roster) -> None:
        result = _filter(dt.date(2024, 1, 1), dt.date(2024, 12, 31)).execute(roster)

        times = [fa.appt.date_time for fa in result.appointments]
        assert times == sorted(times)
        assert len(times) == 4

    def test_keeps_appointments_sharing_a_timestamp(
        self, roster: Roster, alice: Patient, carl: Patient
    ) -> None:
        carl.add_appt(alice.appts[0])

        result = _filter(dt.date(2024, 9, 10), dt.date(2024, 9, 10)).execute(roster)

        assert [fa.patient.nric for fa in result.appointments] == ["G7654321C", "S1234567A"]

    def test_no_matches_returns_empty_view(self, roster: Roster) -> None:
        result = _filter(dt.date(2030, 1, 1), dt.date(2030, 1, 31)).execute(roster)

        assert result.appointments == ()

    def test_does_not_mutate_roster(self, roster: Roster) -> None:
        before = roster.snapshot()

        _filter(dt.date(2024, 1, 1), dt.date(2024, 12, 31)).execute(roster)

        assert Roster.restore(before) == roster
