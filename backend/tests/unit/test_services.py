"""
Unit tests for service layer functions not covered by similar-patient tests.

覆盖：create_patient, generate_mrn, get_patient, 临时患者的创建与合并, backfill_soundex。
"""
import logging
import pytest
import uuid
from datetime import date

from patients.exceptions import BlockError, DuplicatePatientError, ValidationError
from patients.intake import parse_create_payload
from patients.matching import validate_mrn_check_digit
from patients.models import Patient
from patients.services import (
    backfill_soundex,
    create_patient,
    create_temporary_patient,
    generate_mrn,
    get_patient,
    merge_temporary_patient,
)
from tests.conftest import PatientFactory, TemporaryPatientFactory


@pytest.mark.django_db
class TestCreatePatient:

    def test_new_patient_created(self, sample_patient_payload):
        patient = create_patient(parse_create_payload(sample_patient_payload))

        assert patient.first_name == 'Alice'
        assert patient.dob == date(1985, 3, 20)
        assert patient.soundex_last == 'W520'
        assert patient.address['postalCode'] == '62701'
        assert validate_mrn_check_digit(patient.mrn)
        assert patient.emergency_contacts.count() == 1

    def test_insurance_coverage_created(self, sample_patient_payload):
        sample_patient_payload['insurance'] = {
            'plan': 'Aetna HMO',
            'memberId': 'A1',
            'subscriberDob': '1960-01-01',
        }

        patient = create_patient(parse_create_payload(sample_patient_payload))

        coverage = patient.insurance_coverage.get()
        assert coverage.plan_name == 'Aetna HMO'
        assert coverage.subscriber_dob == date(1960, 1, 1)

    def test_likely_duplicate_raises(self, sample_patient_payload):
        existing = PatientFactory(first_name='Alice', last_name='Wang', dob=date(1985, 3, 20), sex='female')

        with pytest.raises(DuplicatePatientError) as exc_info:
            create_patient(parse_create_payload(sample_patient_payload))

        err = exc_info.value
        assert err.code == 'POSSIBLE_DUPLICATE_PATIENT'
        assert err.http_status == 409
        assert err.type == 'warning'
        assert err.matches[0]['id'] == str(existing.id)
        assert err.matches[0]['confidence'] == 1.0
        assert Patient.objects.count() == 1

    def test_weak_match_does_not_block(self, sample_patient_payload):
        # 只有 DOB 一致：0.3 < CONFLICT_THRESHOLD
        PatientFactory(first_name='Zed', last_name='Quinn', dob=date(1985, 3, 20))

        create_patient(parse_create_payload(sample_patient_payload))

        assert Patient.objects.count() == 2

    def test_bypass_skips_check_and_logs_warning(self, sample_patient_payload, caplog):
        PatientFactory(first_name='Alice', last_name='Wang', dob=date(1985, 3, 20))
        sample_patient_payload['bypassDuplicateCheck'] = True

        with caplog.at_level(logging.WARNING, logger='patients.services'):
            create_patient(parse_create_payload(sample_patient_payload))

        assert Patient.objects.count() == 2
        assert any('bypassed' in r.message for r in caplog.records)

    def test_truthy_non_boolean_bypass_ignored(self, sample_patient_payload):
        PatientFactory(first_name='Alice', last_name='Wang', dob=date(1985, 3, 20))
        sample_patient_payload['bypassDuplicateCheck'] = 'yes'

        with pytest.raises(DuplicatePatientError):
            create_patient(parse_create_payload(sample_patient_payload))


@pytest.mark.django_db
class TestGenerateMrn:

    def test_first_mrn(self):
        assert generate_mrn() == 'TRB-000001-0'

    def test_follows_highest_existing(self):
        PatientFactory(mrn='TRB-000041-2')
        mrn = generate_mrn()

        assert mrn.startswith('TRB-000042-')
        assert validate_mrn_check_digit(mrn)

    def test_ignores_foreign_mrns(self):
        PatientFactory(mrn='LEGACY-99')
        assert generate_mrn() == 'TRB-000001-0'


@pytest.mark.django_db
class TestGetPatient:

    def test_existing_patient(self):
        patient = PatientFactory()
        assert get_patient(patient.id).id == patient.id

    def test_nonexistent_patient_raises(self):
        with pytest.raises(BlockError) as exc_info:
            get_patient(uuid.uuid4())

        assert exc_info.value.code == 'PATIENT_NOT_FOUND'
        assert exc_info.value.http_status == 404

    def test_malformed_id_raises_not_found(self):
        with pytest.raises(BlockError) as exc_info:
            get_patient('not-a-uuid')

        assert exc_info.value.http_status == 404


@pytest.mark.django_db
class TestTemporaryPatients:

    def test_create_requires_reason(self):
        with pytest.raises(ValidationError) as exc_info:
            create_temporary_patient('   ')

        assert exc_info.value.code == 'TEMPORARY_REASON_REQUIRED'

    def test_create_assigns_temporary_mrn(self):
        temp = create_temporary_patient('Unconscious trauma patient', sex='male', date_of_birth='1980-01-01')

        assert temp.temporary_mrn.startswith('TEMP-')
        assert len(temp.temporary_mrn) == 13
        assert temp.dob == date(1980, 1, 1)
        assert temp.active

    def test_merge_marks_temporary_inactive(self):
        temp = TemporaryPatientFactory()
        patient = PatientFactory()

        merged = merge_temporary_patient(temp.id, patient.id, merged_by='nurse.jones')

        assert merged.active is False
        assert merged.merged_to_id == patient.id
        assert merged.merged_at is not None
        assert merged.merged_by == 'nurse.jones'

    def test_merge_twice_raises(self):
        temp = TemporaryPatientFactory()
        patient = PatientFactory()
        merge_temporary_patient(temp.id, patient.id)

        with pytest.raises(BlockError) as exc_info:
            merge_temporary_patient(temp.id, patient.id)

        assert exc_info.value.code == 'TEMPORARY_PATIENT_NOT_FOUND'

    def test_merge_into_missing_patient_raises(self):
        temp = TemporaryPatientFactory()

        with pytest.raises(BlockError) as exc_info:
            merge_temporary_patient(temp.id, uuid.uuid4())

        assert exc_info.value.code == 'PATIENT_NOT_FOUND'
        temp.refresh_from_db()
        assert temp.active


@pytest.mark.django_db
class TestBackfillSoundex:

    def test_fills_missing_codes(self):
        pending = PatientFactory(first_name='Robert', last_name='Smith', soundex_first=None, soundex_last=None)
        PatientFactory()

        assert backfill_soundex() == 1

        pending.refresh_from_db()
        assert pending.soundex_first == 'R163'
        assert pending.soundex_last == 'S530'

    def test_inactive_patients_skipped(self):
        PatientFactory(active=False, soundex_first=None, soundex_last=None)

        assert backfill_soundex() == 0
