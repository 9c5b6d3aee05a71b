"""
向导的字段校验。

每个字段对应一组规则，规则返回错误信息或 None；一个字段只报第一条错误。
validate_step() 只校验当前步骤的字段，validate_all() 在提交时校验整份草稿。
"""

import re

from .types import RegistrationDraft, Step

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
POSTAL_CODE_RE = re.compile(r"^\d{5}(-\d{4})?$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

CONSENT_REQUIRED_MESSAGE = 'Consent to treatment is required'


def required(message):
    def rule(value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return message
        return None
    return rule


def min_length(n, message):
    def rule(value):
        if len((value or '').strip()) < n:
            return message
        return None
    return rule


def matches(pattern, message, optional=False):
    def rule(value):
        value = (value or '').strip()
        if optional and not value:
            return None
        if not pattern.match(value):
            return message
        return None
    return rule


def must_be_true(message):
    def rule(value):
        return None if value is True else message
    return rule


FIELD_RULES = {
    # Step 1
    'first_name': [required('First name is required')],
    'last_name': [required('Last name is required')],
    'dob': [
        required('Date of birth is required'),
        matches(ISO_DATE_RE, 'Date of birth must be YYYY-MM-DD'),
    ],
    'gender': [required('Gender is required')],
    'sex': [required('Sex at birth is required')],
    # Step 2
    'address_line1': [required('Address is required')],
    'city': [required('City is required')],
    'state': [required('State is required')],
    'postal_code': [
        min_length(5, 'Valid ZIP code required'),
        matches(POSTAL_CODE_RE, 'Invalid ZIP code format'),
    ],
    'phone': [min_length(10, 'Valid phone number required')],
    'email': [matches(EMAIL_RE, 'Invalid email', optional=True)],
    # Step 3
    'emergency_contact1_name': [required('Emergency contact name is required')],
    'emergency_contact1_phone': [min_length(10, 'Valid phone number required')],
    'emergency_contact1_relationship': [required('Relationship is required')],
    # Step 4
    'subscriber_dob': [matches(ISO_DATE_RE, 'Subscriber date of birth must be YYYY-MM-DD', optional=True)],
    # Step 5
    'consent_to_treat': [must_be_true(CONSENT_REQUIRED_MESSAGE)],
}

# Step 4 只有可选字段
STEP_FIELDS = {
    Step.DEMOGRAPHICS: ('first_name', 'last_name', 'dob', 'gender', 'sex'),
    Step.CONTACT_INFO: ('address_line1', 'city', 'state', 'postal_code', 'phone', 'email'),
    Step.EMERGENCY_CONTACTS: (
        'emergency_contact1_name',
        'emergency_contact1_phone',
        'emergency_contact1_relationship',
    ),
    Step.INSURANCE: ('subscriber_dob',),
    Step.CONSENT_REVIEW: ('consent_to_treat',),
}


def validate_fields(draft: RegistrationDraft, names) -> dict[str, str]:
    errors = {}
    for name in names:
        value = getattr(draft, name)
        for rule in FIELD_RULES.get(name, ()):
            message = rule(value)
            if message:
                errors[name] = message
                break
    return errors


def validate_step(draft: RegistrationDraft, step) -> dict[str, str]:
    return validate_fields(draft, STEP_FIELDS[Step(step)])


def validate_all(draft: RegistrationDraft) -> dict[str, str]:
    return validate_fields(draft, FIELD_RULES)


def step_of(field_name: str) -> Step | None:
    """字段属于哪一步；用于提交失败时跳回第一个出错的步骤。"""
    for step, names in STEP_FIELDS.items():
        if field_name in names:
            return step
    return None
