from .parser import parse_create_payload
from .types import AddressData, EmergencyContactData, InsuranceData, PatientCreateData

__all__ = [
    "parse_create_payload",
    "AddressData",
    "EmergencyContactData",
    "InsuranceData",
    "PatientCreateData",
]
