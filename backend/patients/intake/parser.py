"""
建档请求体的解析 + 校验。

两步流水线：collect errors → build PatientCreateData
所有字段错误一次性收集，统一抛一个 ValidationError（与现有异常体系兼容）。
"""

import re
from datetime import date

from ..demographics import KNOWN_CODE_SYSTEMS
from ..exceptions import ValidationError
from ..models import Patient
from .types import AddressData, EmergencyContactData, InsuranceData, PatientCreateData

# ── 共用校验正则 ───────────────────────────────────────────────────────────
ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
PHONE_RE = re.compile(r"^[\d()+\-.\s]{7,20}$")
POSTAL_CODE_RE = re.compile(r"^\d{5}(-\d{4})?$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

US_STATE_CODES = frozenset({
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "FL", "GA",
    "HI", "ID", "IL", "IN", "IA", "KS", "KY", "LA", "ME", "MD",
    "MA", "MI", "MN", "MS", "MO", "MT", "NE", "NV", "NH", "NJ",
    "NM", "NY", "NC", "ND", "OH", "OK", "OR", "PA", "RI", "SC",
    "SD", "TN", "TX", "UT", "VT", "VA", "WA", "WV", "WI", "WY",
    "DC", "AS", "GU", "MP", "PR", "VI",
})

SEX_VALUES = frozenset(value for value, _ in Patient.SEX_CHOICES)
MAX_EMERGENCY_CONTACTS = 5


def _str(data: dict, key: str) -> str:
    value = data.get(key)
    return str(value).strip() if value is not None else ""


def _parse_date(value: str) -> date | None:
    if not ISO_DATE_RE.match(value or ""):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def _valid_coding(coding) -> bool:
    """code 必填；system 给了就必须是已知编码体系。"""
    if not isinstance(coding, dict) or not coding.get("code"):
        return False
    system = coding.get("system")
    return not system or system in KNOWN_CODE_SYSTEMS


def _check_coding(data: dict, key: str, errors: list) -> dict | None:
    concept = data.get(key)
    if concept in (None, ""):
        return None
    if not isinstance(concept, dict) or not isinstance(concept.get("coding"), list) \
            or not concept["coding"] or not all(_valid_coding(c) for c in concept["coding"]):
        errors.append({"field": key, "message": "Must be a coded concept with a non-empty coding list."})
        return None
    return concept


def _parse_address(raw, errors: list) -> AddressData | None:
    if not raw:
        return None
    if not isinstance(raw, dict):
        errors.append({"field": "address", "message": "Address must be an object."})
        return None

    address = AddressData(
        line1=_str(raw, "line1"),
        line2=_str(raw, "line2"),
        city=_str(raw, "city"),
        state=_str(raw, "state").upper(),
        postal_code=_str(raw, "postalCode"),
    )
    if not address.line1:
        errors.append({"field": "address.line1", "message": "Address line 1 is required."})
    if not address.city:
        errors.append({"field": "address.city", "message": "City is required."})
    if address.state not in US_STATE_CODES:
        errors.append({"field": "address.state", "message": "Invalid US state code."})
    if not POSTAL_CODE_RE.match(address.postal_code):
        errors.append({"field": "address.postalCode", "message": "Invalid US postal code format."})
    return address


def _parse_emergency_contacts(raw, errors: list) -> list[EmergencyContactData]:
    if not raw:
        return []
    if not isinstance(raw, list):
        errors.append({"field": "emergencyContacts", "message": "Emergency contacts must be a list."})
        return []
    if len(raw) > MAX_EMERGENCY_CONTACTS:
        errors.append({
            "field": "emergencyContacts",
            "message": f"At most {MAX_EMERGENCY_CONTACTS} emergency contacts are allowed.",
        })

    contacts = []
    for i, item in enumerate(raw):
        item = item if isinstance(item, dict) else {}
        contact = EmergencyContactData(
            name=_str(item, "name"),
            phone=_str(item, "phone"),
            relationship=_str(item, "relationship"),
        )
        if not contact.name:
            errors.append({"field": f"emergencyContacts[{i}].name", "message": "Contact name is required."})
        if not contact.relationship:
            errors.append({"field": f"emergencyContacts[{i}].relationship", "message": "Relationship is required."})
        if not PHONE_RE.match(contact.phone):
            errors.append({"field": f"emergencyContacts[{i}].phone", "message": "Invalid phone number format."})
        contacts.append(contact)
    return contacts


def _parse_insurance(raw, errors: list) -> InsuranceData | None:
    if not raw:
        return None
    if not isinstance(raw, dict):
        errors.append({"field": "insurance", "message": "Insurance must be an object."})
        return None

    insurance = InsuranceData(
        plan=_str(raw, "plan"),
        member_id=_str(raw, "memberId"),
        group_number=_str(raw, "groupNumber"),
        subscriber_name=_str(raw, "subscriberName"),
        subscriber_relation=_str(raw, "subscriberRelation"),
    )
    if not insurance.plan:
        errors.append({"field": "insurance.plan", "message": "Insurance plan is required."})

    subscriber_dob = _str(raw, "subscriberDob")
    if subscriber_dob:
        insurance.subscriber_dob = _parse_date(subscriber_dob)
        if insurance.subscriber_dob is None:
            errors.append({"field": "insurance.subscriberDob", "message": "Must be YYYY-MM-DD format."})
    return insurance


def parse_create_payload(data) -> PatientCreateData:
    """
    校验建档请求体并返回 PatientCreateData。

    Raises:
        ValidationError: 任一字段不合法，detail['errors'] 列出全部问题
    """
    if not isinstance(data, dict):
        raise ValidationError(message="Request body must be a JSON object.")

    errors = []

    first_name = _str(data, "firstName")
    last_name = _str(data, "lastName")
    if not first_name:
        errors.append({"field": "firstName", "message": "First name is required."})
    elif len(first_name) > 100:
        errors.append({"field": "firstName", "message": "First name must not exceed 100 characters."})
    if not last_name:
        errors.append({"field": "lastName", "message": "Last name is required."})
    elif len(last_name) > 100:
        errors.append({"field": "lastName", "message": "Last name must not exceed 100 characters."})

    dob = _parse_date(_str(data, "dateOfBirth"))
    if dob is None:
        errors.append({"field": "dateOfBirth", "message": "Date of birth must be in YYYY-MM-DD format."})
    elif dob >= date.today():
        errors.append({"field": "dateOfBirth", "message": "Date of birth must be a valid date in the past."})

    sex = _str(data, "sex").lower()
    if sex not in SEX_VALUES:
        errors.append({"field": "sex", "message": "Sex must be one of: male, female, other, unknown."})

    phone = _str(data, "phone")
    if phone and not PHONE_RE.match(phone):
        errors.append({"field": "phone", "message": "Invalid phone number format."})

    email = _str(data, "email")
    if email and not EMAIL_RE.match(email):
        errors.append({"field": "email", "message": "Invalid email address."})

    race = data.get("race") or []
    if not isinstance(race, list) or not all(_valid_coding(r) for r in race):
        errors.append({"field": "race", "message": "Race must be a list of codings."})
        race = []

    consent = data.get("consent") or {}
    if not isinstance(consent, dict):
        errors.append({"field": "consent", "message": "Consent must be an object."})
        consent = {}
    if consent.get("consentToTreat") is not True:
        errors.append({"field": "consent.consentToTreat", "message": "Consent to treatment is required."})

    patient = PatientCreateData(
        first_name=first_name,
        middle_name=_str(data, "middleName"),
        last_name=last_name,
        dob=dob,
        sex=sex,
        gender=_str(data, "gender"),
        gender_identity=_check_coding(data, "genderIdentity", errors),
        sexual_orientation=_check_coding(data, "sexualOrientation", errors),
        race=race,
        ethnicity=_check_coding(data, "ethnicity", errors),
        preferred_language=_str(data, "preferredLanguage"),
        marital_status=_str(data, "maritalStatus"),
        phone=phone,
        email=email,
        address=_parse_address(data.get("address"), errors),
        emergency_contacts=_parse_emergency_contacts(data.get("emergencyContacts"), errors),
        insurance=_parse_insurance(data.get("insurance"), errors),
        consent_to_treat=consent.get("consentToTreat") is True,
        consent_to_share_info=bool(consent.get("consentToShareInfo", False)),
        advance_directive=bool(consent.get("advanceDirective", False)),
        notes=_str(data, "notes"),
        bypass_duplicate_check=data.get("bypassDuplicateCheck") is True,
        raw_payload=data,
    )

    if errors:
        raise ValidationError(
            message="Request validation failed.",
            code="VALIDATION_ERROR",
            detail={"errors": errors},
        )

    return patient
