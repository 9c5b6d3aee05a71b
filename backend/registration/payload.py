"""
RegistrationDraft → POST /patients 请求体（camelCase）。

下拉框里的 key（'white'、'non-binary' ...）在这里换成标准编码：
CDC Race & Ethnicity / SNOMED CT / HL7 NullFlavor。
"""

from .types import RegistrationDraft

CDC_RACE_ETHNICITY = 'urn:oid:2.16.840.1.113883.6.238'
SNOMED = 'http://snomed.info/sct'
NULL_FLAVOR = 'http://terminology.hl7.org/CodeSystem/v3-NullFlavor'


def _coding(code, display, system):
    return {'code': code, 'display': display, 'system': system}


RACE_CODE_MAP = {
    'american-indian': _coding('1002-5', 'American Indian or Alaska Native', CDC_RACE_ETHNICITY),
    'asian': _coding('2028-9', 'Asian', CDC_RACE_ETHNICITY),
    'black': _coding('2054-5', 'Black or African American', CDC_RACE_ETHNICITY),
    'pacific-islander': _coding('2076-8', 'Native Hawaiian or Other Pacific Islander', CDC_RACE_ETHNICITY),
    'white': _coding('2106-3', 'White', CDC_RACE_ETHNICITY),
    'two-or-more': _coding('2131-1', 'Other Race', CDC_RACE_ETHNICITY),
    'other': _coding('2131-1', 'Other Race', CDC_RACE_ETHNICITY),
    'declined': _coding('ASKU', 'Asked but no answer', NULL_FLAVOR),
}

GENDER_IDENTITY_MAP = {
    'male': _coding('446151000124109', 'Identifies as male gender', SNOMED),
    'female': _coding('446141000124107', 'Identifies as female gender', SNOMED),
    'non-binary': _coding('33791000087105', 'Identifies as nonbinary gender', SNOMED),
    'transgender-male': _coding('407377005', 'Female-to-male transsexual', SNOMED),
    'transgender-female': _coding('407376001', 'Male-to-female transsexual', SNOMED),
    'other': _coding('OTH', 'Other', NULL_FLAVOR),
    'declined': _coding('ASKU', 'Asked but no answer', NULL_FLAVOR),
}

SEXUAL_ORIENTATION_MAP = {
    'straight': _coding('20430005', 'Heterosexual', SNOMED),
    'gay-lesbian': _coding('38628009', 'Homosexual', SNOMED),
    'bisexual': _coding('42035005', 'Bisexual', SNOMED),
    'other': _coding('OTH', 'Other', NULL_FLAVOR),
    'declined': _coding('ASKU', 'Asked but no answer', NULL_FLAVOR),
    'unknown': _coding('UNK', 'Unknown', NULL_FLAVOR),
}

ETHNICITY_CODE_MAP = {
    'hispanic': _coding('2135-2', 'Hispanic or Latino', CDC_RACE_ETHNICITY),
    'not-hispanic': _coding('2186-5', 'Not Hispanic or Latino', CDC_RACE_ETHNICITY),
}


def _concept(mapping, key):
    """下拉 key → {coding: [...], text}；未选或未知 key 返回 None。"""
    coding = mapping.get(key) if key else None
    if coding is None:
        return None
    return {'coding': [dict(coding)], 'text': coding['display']}


def _compact(data: dict) -> dict:
    """去掉空值字段（空串 / None），False 保留。"""
    return {k: v for k, v in data.items() if v not in ('', None)}


def _emergency_contacts(draft: RegistrationDraft) -> list[dict]:
    contacts = [{
        'name': draft.emergency_contact1_name,
        'phone': draft.emergency_contact1_phone,
        'relationship': draft.emergency_contact1_relationship,
    }]
    # 第二联系人：姓名和电话都填了才提交，关系缺省为 Other
    if draft.emergency_contact2_name and draft.emergency_contact2_phone:
        contacts.append({
            'name': draft.emergency_contact2_name,
            'phone': draft.emergency_contact2_phone,
            'relationship': draft.emergency_contact2_relationship or 'Other',
        })
    return contacts


def _insurance(draft: RegistrationDraft) -> dict | None:
    if not draft.insurance_plan:
        return None
    return _compact({
        'plan': draft.insurance_plan,
        'memberId': draft.member_id,
        'groupNumber': draft.group_number,
        'subscriberName': draft.subscriber_name,
        'subscriberDob': draft.subscriber_dob,
        'subscriberRelation': draft.subscriber_relation,
    })


def build_create_payload(draft: RegistrationDraft, bypass: bool = False) -> dict:
    race = RACE_CODE_MAP.get(draft.race) if draft.race else None

    payload = _compact({
        'firstName': draft.first_name,
        'lastName': draft.last_name,
        'middleName': draft.middle_name,
        'dateOfBirth': draft.dob,
        'gender': draft.gender,
        'sex': draft.sex,
        'genderIdentity': _concept(GENDER_IDENTITY_MAP, draft.gender_identity),
        'sexualOrientation': _concept(SEXUAL_ORIENTATION_MAP, draft.sexual_orientation),
        'race': [dict(race)] if race else None,
        'ethnicity': _concept(ETHNICITY_CODE_MAP, draft.ethnicity),
        'preferredLanguage': draft.preferred_language,
        'maritalStatus': draft.marital_status,
        'phone': draft.phone,
        'email': draft.email,
        'address': _compact({
            'line1': draft.address_line1,
            'line2': draft.address_line2,
            'city': draft.city,
            'state': draft.state,
            'postalCode': draft.postal_code,
        }),
        'emergencyContacts': _emergency_contacts(draft),
        'insurance': _insurance(draft),
        'consent': {
            'consentToTreat': draft.consent_to_treat is True,
            'consentToShareInfo': bool(draft.consent_to_share_info),
            'advanceDirective': bool(draft.advance_directive),
        },
        'notes': draft.notes,
    })
    if bypass:
        payload['bypassDuplicateCheck'] = True
    return payload
