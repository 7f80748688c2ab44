from typing import ClassVar

from loguru import logger

from clinic.domain.exceptions import AppointmentNotFoundError, DuplicateAppointmentError
from clinic.domain.models import (
    AppointmentDateFilter,
    Appt,
    FilteredAppointment,
    Nric,
    sort_appointments,
)
from clinic.domain.roster import Roster
from clinic.logic.commands.base import Command
from clinic.logic.results import AppointmentListResult, PatientDetailResult


class BookApptCommand(Command):
    """Books an appointment for the patient with the given NRIC."""

    COMMAND_WORD = "bookappt"
    USAGE = (
        "bookappt: Records an appointment under a health service for a registered patient.\n"
        "Parameters: NRIC dt/YYYY-MM-DD HH:MM h/HEALTHSERVICE\n"
        "Example: bookappt S1234567A dt/2024-10-01 14:30 h/VACCINATION"
    )
    MUTATES = True
    SUCCESS: ClassVar[str] = 'Appointment added successfully for {}\nInput "home" to return to home page'

    nric: Nric
    appt: Appt

    def execute(self, roster: Roster) -> PatientDetailResult:
        patient = roster.get(self.nric)

        if patient.has_appt(self.appt):
            raise DuplicateAppointmentError(self.nric)

        patient.add_appt(self.appt)
        logger.info("Booked {} appointment at {}", self.appt.health_service.value, self.appt.date_time)

        return PatientDetailResult(
            feedback=self.SUCCESS.format(patient.name),
            patient=patient.model_copy(deep=True),
        )


class DeleteApptCommand(Command):
    """Removes an existing appointment from a patient."""

    COMMAND_WORD = "deleteappt"
    USAGE = (
        "deleteappt: Deletes an appointment of a registered patient.\n"
        "Parameters: NRIC dt/YYYY-MM-DD HH:MM h/HEALTHSERVICE\n"
        "Example: deleteappt S1234567A dt/2024-10-01 14:30 h/VACCINATION"
    )
    MUTATES = True
    SUCCESS: ClassVar[str] = "Appointment deleted successfully for {}"

    nric: Nric
    appt: Appt

    def execute(self, roster: Roster) -> PatientDetailResult:
        patient = roster.get(self.nric)

        if not patient.remove_appt(self.appt):
            raise AppointmentNotFoundError(self.nric)

        logger.info("Deleted {} appointment at {}", self.appt.health_service.value, self.appt.date_time)
        return PatientDetailResult(
            feedback=self.SUCCESS.format(patient.name),
            patient=patient.model_copy(deep=True),
        )


class FilterCommand(Command):
    """Lists appointments across all patients within a date range, soonest first."""

    COMMAND_WORD = "filter"
    USAGE = (
        "filter: Filters appointments by date range and health services.\n"
        "Parameters: sd/START_DATE ed/END_DATE [h/HEALTHSERVICE]...\n"
        "Example: filter sd/2024-08-30 ed/2024-11-30 h/VACCINATION"
    )
    SUCCESS: ClassVar[str] = "List of appointments sorted by date"

    date_filter: AppointmentDateFilter

    def execute(self, roster: Roster) -> AppointmentListResult:
        matched = [
            FilteredAppointment(appt=appt, patient=patient)
            for patient in roster
            for appt in patient.appts
            if appt.matches(self.date_filter)
        ]
        logger.info("Filter matched {} appointment(s)", len(matched))

        return AppointmentListResult(
            feedback=self.SUCCESS,
            appointments=tuple(sort_appointments(matched)),
        )
