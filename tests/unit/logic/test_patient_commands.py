import datetime as dt

import pytest

from clinic.domain.exceptions import DuplicateNricError, InvalidArgumentError, PatientNotFoundError
from clinic.domain.models import AllergyList, HealthRisk, Patient, Sex
from clinic.domain.roster import Roster
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
from clinic.logic.results import PatientDetailResult, PatientListResult, ResultView

# Fixtures (alice, benson, carl, roster) provided by tests/conftest.py


@pytest.fixture
def daniel() -> Patient:
    return Patient(
        nric="F9876543D",
        name="Daniel Meier",
        sex=Sex.MALE,
        birthdate=dt.date(1988, 12, 24),
        phone="87652533",
    )


def _nrics(roster: Roster) -> list[str]:
    return [p.nric for p in roster]


class TestAddCommand:
    def test_adds_patient(self, roster: Roster, daniel: Patient) -> None:
        result = AddCommand(patient=daniel).execute(roster)

        assert isinstance(result, PatientDetailResult)
        assert result.feedback == "New patient added: Daniel Meier"
        assert roster.get(daniel.nric) == daniel
        assert len(roster) == 4

    def test_duplicate_nric_fails(self, roster: Roster, alice: Patient) -> None:
        clone = alice.model_copy(update={"name": "Someone Else", "appts": ()})

        with pytest.raises(DuplicateNricError, match="This patient already exists"):
            AddCommand(patient=clone).execute(roster)

        assert len(roster) == 3

    def test_roster_does_not_share_command_patient(self, roster: Roster, daniel: Patient) -> None:
        command = AddCommand(patient=daniel)
        command.execute(roster)

        roster.get(daniel.nric).add_appt(roster.get("S1234567A").appts[0])

        assert command.patient.appts == ()


class TestDeleteCommand:
    def test_deletes_patient(self, roster: Roster, alice: Patient) -> None:
        result = DeleteCommand(nric=alice.nric).execute(roster)

        assert isinstance(result, PatientListResult)
        assert result.feedback == "Deleted Patient: Alice Pauline"
        assert alice.nric not in roster
        assert [p.nric for p in result.patients] == ["T0123456B", "G7654321C"]

    def test_unknown_nric_fails(self, roster: Roster) -> None:
        with pytest.raises(PatientNotFoundError):
            DeleteCommand(nric="S1234567B").execute(roster)

        assert len(roster) == 3

    def test_equality(self) -> None:
        first = DeleteCommand(nric="S1234567A")

        assert first == first
        assert first == DeleteCommand(nric="S1234567A")
        assert first != DeleteCommand(nric="S1234567B")
        assert first != 1
        assert first is not None

    def test_repr_names_nric(self) -> None:
        assert repr(DeleteCommand(nric="S1234567A")) == "DeleteCommand(nric='S1234567A')"


class TestEditCommand:
    def test_edits_fields_and_keeps_appointments(self, roster: Roster, alice: Patient) -> None:
        descriptor = EditPatientDescriptor(phone="91234567", health_risk=HealthRisk.HIGH)

        result = EditCommand(nric=alice.nric, descriptor=descriptor).execute(roster)

        edited = roster.get(alice.nric)
        assert edited.phone == "91234567"
        assert edited.health_risk is HealthRisk.HIGH
        assert edited.name == alice.name
        assert edited.appts == alice.appts
        assert result.feedback == "Edited Patient: Alice Pauline"

    def test_changes_nric(self, roster: Roster, benson: Patient) -> None:
        EditCommand(nric=benson.nric, descriptor=EditPatientDescriptor(nric="F1111111F")).execute(roster)

        assert _nrics(roster) == ["S1234567A", "F1111111F", "G7654321C"]

    def test_nric_taken_by_other_patient_fails(self, roster: Roster, alice: Patient, benson: Patient) -> None:
        with pytest.raises(DuplicateNricError):
            EditCommand(nric=benson.nric, descriptor=EditPatientDescriptor(nric=alice.nric)).execute(roster)

        assert _nrics(roster) == ["S1234567A", "T0123456B", "G7654321C"]

    def test_keeping_own_nric_is_allowed(self, roster: Roster, alice: Patient) -> None:
        EditCommand(
            nric=alice.nric, descriptor=EditPatientDescriptor(nric=alice.nric, name="Alice Tan")
        ).execute(roster)

        assert roster.get(alice.nric).name == "Alice Tan"

    def test_adds_and_removes_allergies(self, roster: Roster, alice: Patient) -> None:
        descriptor = EditPatientDescriptor(
            add_allergies=AllergyList.of("shellfish", "dust"),
            remove_allergies=AllergyList.of("Peanuts"),
        )

        EditCommand(nric=alice.nric, descriptor=descriptor).execute(roster)

        assert roster.get(alice.nric).allergies.allergies == ("dust", "shellfish")

    def test_removing_absent_allergy_fails(self, roster: Roster, carl: Patient) -> None:
        descriptor = EditPatientDescriptor(remove_allergies=AllergyList.of("latex"))

        with pytest.raises(InvalidArgumentError, match="Patient does not have allergy: latex"):
            EditCommand(nric=carl.nric, descriptor=descriptor).execute(roster)

        assert roster.get(carl.nric) is carl

    def test_adding_and_removing_same_allergy_fails(self, roster: Roster, alice: Patient) -> None:
        descriptor = EditPatientDescriptor(
            add_allergies=AllergyList.of("peanuts"), remove_allergies=AllergyList.of("peanuts")
        )

        with pytest.raises(InvalidArgumentError, match="Cannot add and remove"):
            EditCommand(nric=alice.nric, descriptor=descriptor).execute(roster)

    def test_empty_descriptor_fails(self, roster: Roster, alice: Patient) -> None:
        with pytest.raises(InvalidArgumentError, match="At least one field"):
            EditCommand(nric=alice.nric, descriptor=EditPatientDescriptor()).execute(roster)

    def test_unknown_patient_fails(self, roster: Roster) -> None:
        with pytest.raises(PatientNotFoundError):
            EditCommand(nric="F0000000Z", descriptor=EditPatientDescriptor(phone="999")).execute(roster)


class TestFindCommand:
    @pytest.mark.parametrize(
        ("keywords", "expected"),
        [
            (("meier",), ["T0123456B"]),
            (("ALICE", "kurz"), ["S1234567A", "G7654321C"]),
            (("Mei",), []),
        ],
        ids=["single-keyword", "any-keyword-case-insensitive", "partial-word-no-match"],
    )
    def test_matches_whole_words(self, roster: Roster, keywords: tuple[str, ...], expected: list[str]) -> None:
        result = FindCommand(keywords=keywords).execute(roster)

        assert [p.nric for p in result.patients] == expected
        assert result.feedback == f"{len(expected)} patient(s) listed!"


class TestViewHomeClear:
    def test_view_returns_snapshot(self, roster: Roster, alice: Patient) -> None:
        result = ViewCommand(nric=alice.nric).execute(roster)

        assert result.view is ResultView.PATIENT_DETAIL
        assert result.patient == alice
        assert result.patient is not alice

    def test_view_unknown_fails(self, roster: Roster) -> None:
        with pytest.raises(PatientNotFoundError):
            ViewCommand(nric="F0000000Z").execute(roster)

    def test_home_lists_everyone(self, roster: Roster) -> None:
        result = HomeCommand().execute(roster)

        assert result.view is ResultView.PATIENTS
        assert [p.nric for p in result.patients] == ["S1234567A", "T0123456B", "G7654321C"]

    def test_clear_empties_roster(self, roster: Roster) -> None:
        result = ClearCommand().execute(roster)

        assert len(roster) == 0
        assert result.patients == ()
