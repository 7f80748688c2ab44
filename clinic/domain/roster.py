from collections.abc import Iterable, Iterator

from pydantic import BaseModel

from clinic.domain.exceptions import DuplicateNricError, PatientNotFoundError
from clinic.domain.models import Patient


class RosterSnapshot(BaseModel):
    """Serializable copy of every patient in a roster."""

    patients: list[Patient] = []


class Roster:
    """All registered patients, indexed by NRIC.

    Patients returned by ``get`` are the roster's own instances, so mutating
    them (for example booking an appointment) is visible to every later
    lookup.
    """

    def __init__(self, patients: Iterable[Patient] = ()) -> None:
        self._patients: dict[str, Patient] = {}
        for patient in patients:
            self.add(patient)

    def __len__(self) -> int:
        return len(self._patients)

    def __iter__(self) -> Iterator[Patient]:
        return iter(self._patients.values())

    def __contains__(self, nric: object) -> bool:
        return isinstance(nric, str) and nric.upper() in self._patients

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Roster):
            return NotImplemented
        return list(self) == list(other)

    @property
    def patients(self) -> tuple[Patient, ...]:
        return tuple(self._patients.values())

    def get(self, nric: str) -> Patient:
        try:
            return self._patients[nric.upper()]
        except KeyError:
            raise PatientNotFoundError(nric) from None

    def add(self, patient: Patient) -> None:
        if patient.nric in self._patients:
            raise DuplicateNricError(patient.nric)
        self._patients[patient.nric] = patient

    def remove(self, nric: str) -> Patient:
        try:
            return self._patients.pop(nric.upper())
        except KeyError:
            raise PatientNotFoundError(nric) from None

    def replace(self, nric: str, edited: Patient) -> None:
        """Swap the patient at ``nric`` for ``edited``, which may carry a new NRIC.

        Roster order is kept: the edited patient takes the original's slot.
        """
        key = nric.upper()
        if key not in self._patients:
            raise PatientNotFoundError(nric)
        if edited.nric != key and edited.nric in self._patients:
            raise DuplicateNricError(edited.nric)
        self._patients = {
            (edited.nric if existing == key else existing): (edited if existing == key else patient)
            for existing, patient in self._patients.items()
        }

    def clear(self) -> None:
        self._patients.clear()

    def snapshot(self) -> RosterSnapshot:
        return RosterSnapshot(patients=[p.model_copy(deep=True) for p in self._patients.values()])

    @classmethod
    def restore(cls, snapshot: RosterSnapshot) -> "Roster":
        return cls(p.model_copy(deep=True) for p in snapshot.patients)
