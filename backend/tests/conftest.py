"""
Shared fixtures for all tests.

factory-boy factories live here so both unit/ and integration/ can import them.
"""
import pytest
from datetime import date
from django.test import Client
from unittest.mock import MagicMock

import factory
from patients.matching import generate_mrn_with_check_digit, soundex
from patients.models import EmergencyContact, InsuranceCoverage, Patient, TemporaryPatient
from registration.types import RegistrationDraft, SimilarPatientCandidate


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

class PatientFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Patient

    mrn = factory.Sequence(lambda n: generate_mrn_with_check_digit(1000 + n))
    first_name = 'John'
    last_name = 'Doe'
    dob = date(1990, 1, 15)
    sex = 'male'
    consent_to_treat = True
    soundex_first = factory.LazyAttribute(lambda p: soundex(p.first_name))
    soundex_last = factory.LazyAttribute(lambda p: soundex(p.last_name))


class EmergencyContactFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = EmergencyContact

    patient = factory.SubFactory(PatientFactory)
    name = 'Mary Doe'
    relationship = 'Spouse'
    phone = '5551234567'


class InsuranceCoverageFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = InsuranceCoverage

    patient = factory.SubFactory(PatientFactory)
    plan_name = 'Blue Cross PPO'
    member_id = 'BC123456'


class TemporaryPatientFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = TemporaryPatient

    temporary_mrn = factory.Sequence(lambda n: f'TEMP-{n:08X}')
    reason = 'Unconscious on arrival'


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def api_client():
    """Django test client for integration tests."""
    return Client()


@pytest.fixture
def sample_patient_payload():
    """Minimal valid payload for POST /api/v1/patients/."""
    return {
        'firstName': 'Alice',
        'lastName': 'Wang',
        'dateOfBirth': '1985-03-20',
        'sex': 'female',
        'gender': 'female',
        'phone': '5559876543',
        'address': {
            'line1': '1 Main St',
            'city': 'Springfield',
            'state': 'IL',
            'postalCode': '62701',
        },
        'emergencyContacts': [
            {'name': 'Bob Wang', 'phone': '5550001111', 'relationship': 'Spouse'},
        ],
        'consent': {'consentToTreat': True},
    }


@pytest.fixture
def complete_draft():
    """A draft that passes validation on every step."""
    return RegistrationDraft(
        first_name='Alice',
        last_name='Wang',
        dob='1985-03-20',
        gender='female',
        sex='female',
        address_line1='1 Main St',
        city='Springfield',
        state='IL',
        postal_code='62701',
        phone='5559876543',
        emergency_contact1_name='Bob Wang',
        emergency_contact1_phone='5550001111',
        emergency_contact1_relationship='Spouse',
        consent_to_treat=True,
    )


@pytest.fixture
def candidate():
    return SimilarPatientCandidate(
        id='7d4b1c9e-0000-4000-8000-000000000001',
        mrn='TRB-000001-0',
        first_name='Alice',
        last_name='Wang',
        date_of_birth='1985-03-20',
        sex='female',
        confidence=0.9,
        match_reasons=('exact date of birth', 'exact last name'),
    )


@pytest.fixture
def mock_gate():
    """DuplicateCheckGate stand-in; defaults to a clear result."""
    from registration.gate import CLEAR, GateResult

    gate = MagicMock()
    gate.check.return_value = GateResult(CLEAR)
    return gate


@pytest.fixture
def mock_client():
    """PatientApiClient stand-in; create_patient returns a fresh patient."""
    client = MagicMock()
    client.create_patient.return_value = {'id': 'new-patient-id', 'mrn': 'TRB-000002-9'}
    return client
