class ClinicError(Exception):
    """Base exception for all clinic record errors."""


class CommandError(ClinicError):
    """Raised when a command cannot be applied to the roster."""


class PatientNotFoundError(CommandError):
    """Raised when no patient matches the requested NRIC."""

    MESSAGE = "Patient not found"

    def __init__(self, nric: str | None = None) -> None:
        self.nric = nric
        super().__init__(self.MESSAGE)


class AppointmentNotFoundError(CommandError):
    """Raised when a patient has no appointment matching the one requested."""

    MESSAGE = "Appointment not found for this patient"

    def __init__(self, nric: str | None = None) -> None:
        self.nric = nric
        super().__init__(self.MESSAGE)


class DuplicateNricError(CommandError):
    """Raised when a patient with the same NRIC is already registered."""

    MESSAGE = "This patient already exists"

    def __init__(self, nric: str | None = None) -> None:
        self.nric = nric
        super().__init__(self.MESSAGE)


class DuplicateAppointmentError(CommandError):
    """Raised when the patient already has an identical appointment."""

    MESSAGE = "Appointment already exists on this date and time"

    def __init__(self, nric: str | None = None) -> None:
        self.nric = nric
        super().__init__(self.MESSAGE)


class InvalidArgumentError(ClinicError):
    """Raised when command input is malformed or holds an invalid value."""

    def __init__(self, reason: str, usage: str | None = None) -> None:
        self.reason = reason
        self.usage = usage
        message = f"{reason}\n{usage}" if usage else reason
        super().__init__(message)


class StorageError(ClinicError):
    """Raised when the roster cannot be read from or written to storage."""


class ConfigError(ClinicError):
    """Raised when the application settings cannot be loaded."""
