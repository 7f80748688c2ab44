from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict

from clinic.domain.models import FilteredAppointment, Patient


class ResultView(str, Enum):
    """Which view the presentation layer should render for a result."""

    MESSAGE = "message"
    PATIENTS = "patients"
    PATIENT_DETAIL = "patient_detail"
    APPOINTMENTS = "appointments"
    HELP = "help"
    EXIT = "exit"


class CommandResult(BaseModel):
    """Outcome of a successfully executed command."""

    model_config = ConfigDict(frozen=True)

    feedback: str
    view: ResultView = ResultView.MESSAGE


class PatientListResult(CommandResult):
    view: Literal[ResultView.PATIENTS] = ResultView.PATIENTS
    patients: tuple[Patient, ...] = ()


class PatientDetailResult(CommandResult):
    """Carries a copy of the patient taken when the command finished."""

    view: Literal[ResultView.PATIENT_DETAIL] = ResultView.PATIENT_DETAIL
    patient: Patient


class AppointmentListResult(CommandResult):
    view: Literal[ResultView.APPOINTMENTS] = ResultView.APPOINTMENTS
    appointments: tuple[FilteredAppointment, ...] = ()
