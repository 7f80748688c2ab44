from typing import Any, ClassVar

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from clinic.domain.exceptions import DuplicateNricError, InvalidArgumentError
from clinic.domain.models import (
    Address,
    AllergyList,
    BloodType,
    Birthdate,
    Email,
    HealthRisk,
    Name,
    Note,
    Nric,
    Patient,
    Phone,
    Sex,
)
from clinic.domain.roster import Roster
from clinic.logic.commands.base import Command
from clinic.logic.results import PatientDetailResult, PatientListResult


_CASE_NOTE = "Prefixes are lower case, so write s/o or d/o inside a name as S/O or D/O."


class AddCommand(Command):
    """Registers a new patient."""

    COMMAND_WORD = "add"
    USAGE = (
        "add: Adds a patient with the required details.\n"
        "Parameters: n/NAME i/NRIC s/SEX b/BIRTHDATE p/PHONE\n"
        f"{_CASE_NOTE}\n"
        "Example: add n/John Doe i/S1234567A s/M b/1990-01-01 p/98765432"
    )
    FULL_USAGE: ClassVar[str] = (
        "addf: Adds a patient with the required and any optional details.\n"
        "Parameters: n/NAME i/NRIC s/SEX b/BIRTHDATE p/PHONE [e/EMAIL] [a/ADDRESS] "
        "[bt/BLOOD_TYPE] [al/ALLERGY]... [hr/HEALTH_RISK] [ec/EXISTING_CONDITION] "
        "[no/NOTE] [nokn/NEXT_OF_KIN_NAME] [nokp/NEXT_OF_KIN_PHONE]\n"
        f"{_CASE_NOTE}\n"
        "Example: addf n/John Doe i/S1234567A s/M b/1990-01-01 p/98765432 bt/O+ al/peanuts"
    )
    MUTATES = True
    SUCCESS: ClassVar[str] = "New patient added: {}"

    patient: Patient

    def execute(self, roster: Roster) -> PatientDetailResult:
        if self.patient.nric in roster:
            raise DuplicateNricError(self.patient.nric)

        patient = self.patient.model_copy(deep=True)
        roster.add(patient)
        logger.info("Added patient; roster now holds {} patient(s)", len(roster))

        return PatientDetailResult(
            feedback=self.SUCCESS.format(patient.name),
            patient=patient.model_copy(deep=True),
        )


class DeleteCommand(Command):
    """Removes the patient with the given NRIC."""

    COMMAND_WORD = "delete"
    USAGE = (
        "delete: Deletes the patient identified by NRIC.\n"
        "Parameters: NRIC\n"
        "Example: delete S1234567A"
    )
    MUTATES = True
    SUCCESS: ClassVar[str] = "Deleted Patient: {}"

    nric: Nric

    def execute(self, roster: Roster) -> PatientListResult:
        patient = roster.remove(self.nric)
        logger.info("Deleted patient; roster now holds {} patient(s)", len(roster))
        return PatientListResult(feedback=self.SUCCESS.format(patient.name), patients=roster.patients)


class EditPatientDescriptor(BaseModel):
    """The fields to change on a patient. Unset fields keep their current value."""

    model_config = ConfigDict(frozen=True)

    name: Name | None = None
    nric: Nric | None = None
    sex: Sex | None = None
    birthdate: Birthdate | None = None
    phone: Phone | None = None
    email: Email | None = None
    address: Address | None = None
    blood_type: BloodType | None = None
    health_risk: HealthRisk | None = None
    existing_condition: Note | None = None
    note: Note | None = None
    nok_name: Name | None = None
    nok_phone: Phone | None = None
    add_allergies: AllergyList = Field(default_factory=AllergyList)
    remove_allergies: AllergyList = Field(default_factory=AllergyList)

    def field_updates(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True, exclude={"add_allergies", "remove_allergies"})

    def is_any_field_edited(self) -> bool:
        return bool(self.field_updates() or self.add_allergies or self.remove_allergies)


class EditCommand(Command):
    """Edits the details of the patient with the given NRIC."""

    COMMAND_WORD = "edit"
    USAGE = (
        "edit: Edits the details of the patient identified by NRIC. "
        "Existing values are overwritten; appointments are kept.\n"
        "Parameters: NRIC [n/NAME] [i/NRIC] [s/SEX] [b/BIRTHDATE] [p/PHONE] [e/EMAIL] "
        "[a/ADDRESS] [bt/BLOOD_TYPE] [al/ALLERGY]... [rmal/ALLERGY]... [hr/HEALTH_RISK] "
        "[ec/EXISTING_CONDITION] [no/NOTE] [nokn/NEXT_OF_KIN_NAME] [nokp/NEXT_OF_KIN_PHONE]\n"
        f"{_CASE_NOTE}\n"
        "Example: edit S1234567A p/91234567 al/shellfish"
    )
    MUTATES = True
    SUCCESS: ClassVar[str] = "Edited Patient: {}"
    NOT_EDITED: ClassVar[str] = "At least one field to edit must be provided."
    MISSING_ALLERGY: ClassVar[str] = "Patient does not have allergy: {}"
    CONFLICTING_ALLERGY: ClassVar[str] = "Cannot add and remove the same allergy: {}"

    nric: Nric
    descriptor: EditPatientDescriptor

    def execute(self, roster: Roster) -> PatientDetailResult:
        if not self.descriptor.is_any_field_edited():
            raise InvalidArgumentError(self.NOT_EDITED, self.USAGE)

        patient = roster.get(self.nric)
        edited = self._apply(patient)

        if edited.nric != patient.nric and edited.nric in roster:
            raise DuplicateNricError(edited.nric)

        roster.replace(patient.nric, edited)
        logger.info("Edited patient record")

        return PatientDetailResult(
            feedback=self.SUCCESS.format(edited.name),
            patient=edited.model_copy(deep=True),
        )

    def _apply(self, patient: Patient) -> Patient:
        added = self.descriptor.add_allergies
        removed = self.descriptor.remove_allergies

        for allergy in removed.allergies:
            if added.contains(allergy):
                raise InvalidArgumentError(self.CONFLICTING_ALLERGY.format(allergy))
            if not patient.allergies.contains(allergy):
                raise InvalidArgumentError(self.MISSING_ALLERGY.format(allergy))

        updates = self.descriptor.field_updates()
        updates["allergies"] = patient.allergies.without(removed).with_added(added)
        return patient.model_copy(update=updates, deep=True)


class FindCommand(Command):
    """Lists patients whose name contains any of the keywords as a whole word."""

    COMMAND_WORD = "find"
    USAGE = (
        "find: Finds all patients whose names contain any of the given keywords "
        "(case-insensitive).\n"
        "Parameters: KEYWORD [MORE_KEYWORDS]...\n"
        "Example: find alice bob"
    )
    SUCCESS: ClassVar[str] = "{} patient(s) listed!"

    keywords: tuple[str, ...]

    def matches(self, patient: Patient) -> bool:
        words = {word.lower() for word in patient.name.split()}
        return any(keyword.lower() in words for keyword in self.keywords)

    def execute(self, roster: Roster) -> PatientListResult:
        found = tuple(p for p in roster if self.matches(p))
        return PatientListResult(feedback=self.SUCCESS.format(len(found)), patients=found)


class ViewCommand(Command):
    """Shows the full record of one patient."""

    COMMAND_WORD = "view"
    USAGE = (
        "view: Shows the full details of the patient identified by NRIC.\n"
        "Parameters: NRIC\n"
        "Example: view S1234567A"
    )
    SUCCESS: ClassVar[str] = "Showing details of {}"

    nric: Nric

    def execute(self, roster: Roster) -> PatientDetailResult:
        patient = roster.get(self.nric)
        return PatientDetailResult(
            feedback=self.SUCCESS.format(patient.name),
            patient=patient.model_copy(deep=True),
        )


class HomeCommand(Command):
    """Lists every patient."""

    COMMAND_WORD = "home"
    USAGE = "home: Lists all patients.\nExample: home"
    SUCCESS: ClassVar[str] = "Listed all patients"

    def execute(self, roster: Roster) -> PatientListResult:
        return PatientListResult(feedback=self.SUCCESS, patients=roster.patients)


class ClearCommand(Command):
    """Removes every patient."""

    COMMAND_WORD = "clear"
    USAGE = "clear: Deletes all patients.\nExample: clear"
    MUTATES = True
    SUCCESS: ClassVar[str] = "All patients have been cleared!"

    def execute(self, roster: Roster) -> PatientListResult:
        roster.clear()
        logger.info("Cleared roster")
        return PatientListResult(feedback=self.SUCCESS)
