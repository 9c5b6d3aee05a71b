"""
Integration tests — 真实 HTTP 请求打到 Django View，验证完整流程。

用 Django test Client，走完：
  HTTP Request → urls.py → APIView → intake → Service → ORM → DB → Response

成功响应：{data: ...}；失败响应：统一格式 {type, code, message, detail?}。
"""
import json
import pytest
import uuid
from datetime import date

from tests.conftest import PatientFactory, TemporaryPatientFactory
from patients.models import Patient


# -------------------------------------------------------------------
# Helper
# -------------------------------------------------------------------

def post_json(api_client, url, payload):
    """快捷方式：POST JSON，返回 (status_code, body_dict)。"""
    response = api_client.post(url, data=json.dumps(payload), content_type='application/json')
    return response.status_code, json.loads(response.content)


def get_json(api_client, url, params=None):
    response = api_client.get(url, params or {})
    return response.status_code, json.loads(response.content)


# ===================================================================
# POST /api/v1/patients/
# ===================================================================

@pytest.mark.django_db
class TestCreatePatientApi:

    def test_create_success(self, api_client, sample_patient_payload):
        status, body = post_json(api_client, '/api/v1/patients/', sample_patient_payload)

        assert status == 201
        assert 'type' not in body
        patient = body['data']
        assert patient['firstName'] == 'Alice'
        assert patient['mrn'] == 'TRB-000001-0'
        assert patient['emergencyContacts'][0]['name'] == 'Bob Wang'
        assert patient['consent']['consentToTreat'] is True
        assert Patient.objects.count() == 1

    def test_duplicate_returns_409_with_matches(self, api_client, sample_patient_payload):
        existing = PatientFactory(first_name='Alice', last_name='Wang', dob=date(1985, 3, 20), sex='female')

        status, body = post_json(api_client, '/api/v1/patients/', sample_patient_payload)

        assert status == 409
        assert body['type'] == 'warning'
        assert body['code'] == 'POSSIBLE_DUPLICATE_PATIENT'
        match = body['detail']['matches'][0]
        assert match['id'] == str(existing.id)
        assert match['confidence'] == 1.0
        assert 'exact date of birth' in match['matchReasons']
        assert Patient.objects.count() == 1

    def test_bypass_creates_anyway(self, api_client, sample_patient_payload):
        PatientFactory(first_name='Alice', last_name='Wang', dob=date(1985, 3, 20))
        sample_patient_payload['bypassDuplicateCheck'] = True

        status, _ = post_json(api_client, '/api/v1/patients/', sample_patient_payload)

        assert status == 201
        assert Patient.objects.count() == 2

    def test_validation_error(self, api_client, sample_patient_payload):
        sample_patient_payload['consent'] = {'consentToTreat': False}
        sample_patient_payload['dateOfBirth'] = 'yesterday'

        status, body = post_json(api_client, '/api/v1/patients/', sample_patient_payload)

        assert status == 400
        assert body['type'] == 'validation_error'
        fields = {e['field'] for e in body['detail']['errors']}
        assert fields == {'consent.consentToTreat', 'dateOfBirth'}

    def test_consent_not_an_object(self, api_client, sample_patient_payload):
        sample_patient_payload['consent'] = 'yes'

        status, body = post_json(api_client, '/api/v1/patients/', sample_patient_payload)

        assert status == 400
        assert body['type'] == 'validation_error'
        assert 'consent' in {e['field'] for e in body['detail']['errors']}
        assert Patient.objects.count() == 0

    def test_invalid_json(self, api_client):
        response = api_client.post('/api/v1/patients/', data='{not json', content_type='application/json')

        assert response.status_code == 400
        body = json.loads(response.content)
        assert body['message'] == 'Invalid JSON in request body'


# ===================================================================
# GET /api/v1/patients/similar/
# ===================================================================

@pytest.mark.django_db
class TestSimilarPatientsApi:

    def test_returns_ranked_candidates(self, api_client):
        PatientFactory(first_name='Maria', last_name='Gonzales', dob=date(1962, 3, 15))
        PatientFactory(first_name='Zed', last_name='Quinn', dob=date(1962, 3, 15))

        status, body = get_json(api_client, '/api/v1/patients/similar/', {
            'firstName': 'Maria', 'lastName': 'Gonzalez', 'dateOfBirth': '1962-03-15',
        })

        assert status == 200
        assert [c['lastName'] for c in body['data']] == ['Gonzales', 'Quinn']
        top = body['data'][0]
        assert set(top) == {'id', 'mrn', 'firstName', 'lastName', 'dateOfBirth', 'sex', 'confidence', 'matchReasons'}
        assert top['confidence'] == 0.85

    def test_no_match_returns_empty_list(self, api_client):
        status, body = get_json(api_client, '/api/v1/patients/similar/', {
            'firstName': 'Maria', 'lastName': 'Gonzalez', 'dateOfBirth': '1962-03-15',
        })

        assert status == 200
        assert body == {'data': []}

    def test_missing_parameters(self, api_client):
        status, body = get_json(api_client, '/api/v1/patients/similar/')

        assert status == 400
        assert body['code'] == 'MISSING_SEARCH_PARAMETERS'


# ===================================================================
# GET /api/v1/patients/<id>/
# ===================================================================

@pytest.mark.django_db
class TestPatientDetailApi:

    def test_existing(self, api_client):
        patient = PatientFactory()

        status, body = get_json(api_client, f'/api/v1/patients/{patient.id}/')

        assert status == 200
        assert body['data']['id'] == str(patient.id)

    def test_not_found(self, api_client):
        status, body = get_json(api_client, f'/api/v1/patients/{uuid.uuid4()}/')

        assert status == 404
        assert body['type'] == 'block'
        assert body['code'] == 'PATIENT_NOT_FOUND'


# ===================================================================
# Temporary patients
# ===================================================================

@pytest.mark.django_db
class TestTemporaryPatientApi:

    def test_create(self, api_client):
        status, body = post_json(api_client, '/api/v1/patients/temporary/', {
            'reason': 'Unresponsive, no ID', 'sex': 'male', 'createdBy': 'dr.house',
        })

        assert status == 201
        assert body['data']['temporaryMrn'].startswith('TEMP-')
        assert body['data']['active'] is True
        assert 'mergedToPatientId' not in body['data']

    def test_create_without_reason(self, api_client):
        status, body = post_json(api_client, '/api/v1/patients/temporary/', {})

        assert status == 400
        assert body['code'] == 'TEMPORARY_REASON_REQUIRED'

    def test_merge(self, api_client):
        temp = TemporaryPatientFactory()
        patient = PatientFactory()

        status, body = post_json(api_client, f'/api/v1/patients/temporary/{temp.id}/merge/', {
            'patientId': str(patient.id), 'mergedBy': 'registrar',
        })

        assert status == 200
        assert body['data']['active'] is False
        assert body['data']['mergedToPatientId'] == str(patient.id)
        assert body['data']['mergedBy'] == 'registrar'

    def test_merge_requires_patient_id(self, api_client):
        temp = TemporaryPatientFactory()

        status, body = post_json(api_client, f'/api/v1/patients/temporary/{temp.id}/merge/', {})

        assert status == 400
        assert body['code'] == 'PATIENT_ID_REQUIRED'


# ===================================================================
# GET /api/v1/demographics/codes/
# ===================================================================

class TestDemographicsCodesApi:

    def test_code_sets(self, api_client):
        status, body = get_json(api_client, '/api/v1/demographics/codes/')

        assert status == 200
        assert set(body['data']) == {'genderIdentity', 'sexualOrientation', 'race', 'ethnicity', 'language'}
        assert {'code': '2106-3', 'system': 'urn:oid:2.16.840.1.113883.6.238', 'display': 'White'} \
            in body['data']['race']
