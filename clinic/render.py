from rich.console import Console
from rich.markup import escape
from rich.table import Table

from clinic.domain.models import Patient
from clinic.logic.results import (
    AppointmentListResult,
    CommandResult,
    PatientDetailResult,
    PatientListResult,
)


def _patient_table(patients: tuple[Patient, ...]) -> Table:
    table = Table(title="Patients", show_header=True, header_style="bold magenta")
    for column in ("NRIC", "Name", "Sex", "Birthdate", "Phone", "Appointments"):
        table.add_column(column)
    for p in patients:
        table.add_row(p.nric, p.name, p.sex.value, p.birthdate.isoformat(), p.phone, str(len(p.appts)))
    return table


def _patient_detail(patient: Patient) -> Table:
    table = Table(title=patient.name, show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")

    rows = [
        ("NRIC", patient.nric),
        ("Sex", patient.sex.value),
        ("Birthdate", patient.birthdate.isoformat()),
        ("Phone", patient.phone),
        ("Email", patient.email),
        ("Address", patient.address),
        ("Blood type", patient.blood_type.value if patient.blood_type else None),
        ("Health risk", patient.health_risk.value if patient.health_risk else None),
        ("Existing condition", patient.existing_condition),
        ("Note", patient.note),
        ("Next of kin", patient.nok_name),
        ("Next of kin phone", patient.nok_phone),
        ("Allergies", str(patient.allergies) or None),
    ]
    for field, value in rows:
        table.add_row(field, escape(value) if value else "-")

    appts = sorted(patient.appts, key=lambda a: a.date_time)
    table.add_row("Appointments", "\n".join(str(a) for a in appts) or "-")
    return table


def _appointment_table(result: AppointmentListResult) -> Table:
    table = Table(title="Appointments", show_header=True, header_style="bold magenta")
    for column in ("Date", "Time", "Service", "Patient", "NRIC"):
        table.add_column(column)
    for entry in result.appointments:
        when = entry.appt.date_time
        table.add_row(
            when.date().isoformat(),
            when.strftime("%H:%M"),
            entry.appt.health_service.label,
            entry.patient.name,
            entry.patient.nric,
        )
    return table


def render_result(console: Console, result: CommandResult) -> None:
    """Print ``result`` in the view it asks for."""
    console.print(result.feedback, markup=False)

    if isinstance(result, PatientListResult):
        console.print(_patient_table(result.patients))
    elif isinstance(result, PatientDetailResult):
        console.print(_patient_detail(result.patient))
    elif isinstance(result, AppointmentListResult):
        console.print(_appointment_table(result))
