"""
RegistrationDraft → 建档请求体。

请求体必须能直接通过服务端 parse_create_payload()。
"""
from patients.intake import parse_create_payload
from registration.payload import RACE_CODE_MAP, build_create_payload


class TestBuildCreatePayload:

    def test_minimal_draft(self, complete_draft):
        payload = build_create_payload(complete_draft)

        assert payload['firstName'] == 'Alice'
        assert payload['dateOfBirth'] == '1985-03-20'
        assert payload['address'] == {
            'line1': '1 Main St',
            'city': 'Springfield',
            'state': 'IL',
            'postalCode': '62701',
        }
        assert payload['consent'] == {
            'consentToTreat': True,
            'consentToShareInfo': False,
            'advanceDirective': False,
        }
        # 空的可选字段不出现
        assert 'middleName' not in payload
        assert 'email' not in payload
        assert 'insurance' not in payload
        assert 'genderIdentity' not in payload
        assert 'bypassDuplicateCheck' not in payload

    def test_accepted_by_server_intake(self, complete_draft):
        complete_draft.race = 'asian'
        complete_draft.ethnicity = 'not-hispanic'
        complete_draft.gender_identity = 'non-binary'
        complete_draft.sexual_orientation = 'declined'
        complete_draft.insurance_plan = 'Aetna HMO'
        complete_draft.subscriber_dob = '1960-01-01'

        data = parse_create_payload(build_create_payload(complete_draft))

        assert data.race == [RACE_CODE_MAP['asian']]
        assert data.insurance.plan == 'Aetna HMO'

    def test_coded_concepts(self, complete_draft):
        complete_draft.gender_identity = 'female'
        complete_draft.race = 'declined'

        payload = build_create_payload(complete_draft)

        assert payload['genderIdentity'] == {
            'coding': [{
                'code': '446141000124107',
                'display': 'Identifies as female gender',
                'system': 'http://snomed.info/sct',
            }],
            'text': 'Identifies as female gender',
        }
        assert payload['race'] == [{
            'code': 'ASKU',
            'display': 'Asked but no answer',
            'system': 'http://terminology.hl7.org/CodeSystem/v3-NullFlavor',
        }]

    def test_unknown_code_key_dropped(self, complete_draft):
        complete_draft.ethnicity = 'martian'
        assert 'ethnicity' not in build_create_payload(complete_draft)

    def test_second_contact_needs_name_and_phone(self, complete_draft):
        complete_draft.emergency_contact2_name = 'Carol'
        assert len(build_create_payload(complete_draft)['emergencyContacts']) == 1

        complete_draft.emergency_contact2_phone = '5552223333'
        contacts = build_create_payload(complete_draft)['emergencyContacts']
        assert len(contacts) == 2
        assert contacts[1]['relationship'] == 'Other'

    def test_insurance_only_with_plan(self, complete_draft):
        complete_draft.member_id = 'M1'
        assert 'insurance' not in build_create_payload(complete_draft)

        complete_draft.insurance_plan = 'Blue Cross'
        assert build_create_payload(complete_draft)['insurance'] == {'plan': 'Blue Cross', 'memberId': 'M1'}

    def test_bypass_flag(self, complete_draft):
        assert build_create_payload(complete_draft, bypass=True)['bypassDuplicateCheck'] is True

    def test_lookup_tables_not_shared(self, complete_draft):
        complete_draft.race = 'white'
        build_create_payload(complete_draft)['race'][0]['code'] = 'mutated'
        assert RACE_CODE_MAP['white']['code'] == '2106-3'
