"""
Response serializers — ORM 对象 → JSON-able dict（camelCase）。

只负责「输出格式化」，不做任何解析或校验。
输入解析和校验在 patients/intake/。
"""


def serialize_similar_patient(match):
    """Serialize one find_similar_patients() candidate."""
    patient = match['patient']
    return {
        'id': str(patient.id),
        'mrn': patient.mrn,
        'firstName': patient.first_name,
        'lastName': patient.last_name,
        'dateOfBirth': patient.dob.isoformat() if patient.dob else '',
        'sex': patient.sex or '',
        'confidence': match['confidence'],
        'matchReasons': list(match['match_reasons']),
    }


def serialize_patient(patient):
    """Serialize a patient with its emergency contacts and insurance coverage."""
    return {
        'id': str(patient.id),
        'mrn': patient.mrn,
        'firstName': patient.first_name,
        'middleName': patient.middle_name or None,
        'lastName': patient.last_name,
        'dateOfBirth': patient.dob.isoformat(),
        'sex': patient.sex,
        'gender': patient.gender or None,
        'genderIdentity': patient.gender_identity,
        'sexualOrientation': patient.sexual_orientation,
        'race': patient.race or [],
        'ethnicity': patient.ethnicity,
        'preferredLanguage': patient.preferred_language or None,
        'maritalStatus': patient.marital_status or None,
        'phone': patient.phone or None,
        'email': patient.email or None,
        'address': patient.address,
        'emergencyContacts': [
            {
                'name': c.name,
                'phone': c.phone,
                'relationship': c.relationship,
            }
            for c in patient.emergency_contacts.order_by('created_at')
        ],
        'insurance': [
            {
                'plan': i.plan_name,
                'memberId': i.member_id,
                'groupNumber': i.group_number or None,
                'subscriberName': i.subscriber_name or None,
                'subscriberDob': i.subscriber_dob.isoformat() if i.subscriber_dob else None,
                'subscriberRelation': i.subscriber_relation or None,
            }
            for i in patient.insurance_coverage.order_by('created_at')
        ],
        'consent': {
            'consentToTreat': patient.consent_to_treat,
            'consentToShareInfo': patient.consent_to_share_info,
            'advanceDirective': patient.advance_directive,
        },
        'active': patient.active,
        'createdAt': patient.created_at.isoformat(),
        'updatedAt': patient.updated_at.isoformat(),
    }


def serialize_temporary_patient(temp):
    response = {
        'id': str(temp.id),
        'temporaryMrn': temp.temporary_mrn,
        'reason': temp.reason,
        'firstName': temp.first_name,
        'lastName': temp.last_name,
        'dateOfBirth': temp.dob.isoformat() if temp.dob else None,
        'sex': temp.sex,
        'active': temp.active,
        'createdAt': temp.created_at.isoformat(),
    }

    if temp.merged_to_id:
        response['mergedToPatientId'] = str(temp.merged_to_id)
        response['mergedAt'] = temp.merged_at.isoformat() if temp.merged_at else None
        response['mergedBy'] = temp.merged_by

    return response
