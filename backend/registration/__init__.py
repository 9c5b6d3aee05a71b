from .alert import SimilarPatientsAlert
from .client import PatientApiClient
from .config import RegistrationConfig
from .exceptions import (
    ActionNotAvailable,
    DuplicatePatientConflict,
    PatientApiError,
    RegistrationError,
    SessionExpiredError,
    UnknownFieldError,
)
from .gate import DuplicateCheckGate, GateResult
from .payload import build_create_payload
from .session import SessionContext
from .types import RegistrationDraft, SimilarPatientCandidate, Step
from .wizard import Outcome, RegistrationWizard

__all__ = [
    "ActionNotAvailable",
    "DuplicateCheckGate",
    "DuplicatePatientConflict",
    "GateResult",
    "Outcome",
    "PatientApiClient",
    "PatientApiError",
    "RegistrationConfig",
    "RegistrationDraft",
    "RegistrationError",
    "RegistrationWizard",
    "SessionContext",
    "SessionExpiredError",
    "SimilarPatientCandidate",
    "SimilarPatientsAlert",
    "Step",
    "UnknownFieldError",
    "build_create_payload",
]
