import uuid
from django.db import models


class Patient(models.Model):
    SEX_CHOICES = [
        ('male', 'Male'),
        ('female', 'Female'),
        ('other', 'Other'),
        ('unknown', 'Unknown'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    mrn = models.CharField(max_length=20, unique=True)
    first_name = models.CharField(max_length=100)
    middle_name = models.CharField(max_length=100, blank=True, default='')
    last_name = models.CharField(max_length=100)
    dob = models.DateField()
    sex = models.CharField(max_length=10, choices=SEX_CHOICES)
    gender = models.CharField(max_length=50, blank=True, default='')

    # USCDI 编码字段，存 {coding: [...], text} 结构
    gender_identity = models.JSONField(blank=True, null=True)
    sexual_orientation = models.JSONField(blank=True, null=True)
    race = models.JSONField(default=list, blank=True)
    ethnicity = models.JSONField(blank=True, null=True)
    preferred_language = models.CharField(max_length=50, blank=True, default='')
    marital_status = models.CharField(max_length=10, blank=True, default='')

    phone = models.CharField(max_length=20, blank=True, default='')
    email = models.CharField(max_length=254, blank=True, default='')
    address = models.JSONField(blank=True, null=True)

    consent_to_treat = models.BooleanField(default=False)
    consent_to_share_info = models.BooleanField(default=False)
    advance_directive = models.BooleanField(default=False)
    notes = models.TextField(blank=True, default='')

    soundex_first = models.CharField(max_length=4, blank=True, null=True)
    soundex_last = models.CharField(max_length=4, blank=True, null=True)
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'patients'


class EmergencyContact(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='emergency_contacts')
    name = models.CharField(max_length=200)
    relationship = models.CharField(max_length=100)
    phone = models.CharField(max_length=20)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'patient_emergency_contacts'


class InsuranceCoverage(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='insurance_coverage')
    plan_name = models.CharField(max_length=200)
    member_id = models.CharField(max_length=50, blank=True, default='')
    group_number = models.CharField(max_length=50, blank=True, default='')
    subscriber_name = models.CharField(max_length=200, blank=True, default='')
    subscriber_dob = models.DateField(blank=True, null=True)
    subscriber_relation = models.CharField(max_length=20, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'patient_insurance_coverage'


class TemporaryPatient(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    temporary_mrn = models.CharField(max_length=20, unique=True)
    reason = models.TextField()
    first_name = models.CharField(max_length=100, blank=True, null=True)
    last_name = models.CharField(max_length=100, blank=True, null=True)
    dob = models.DateField(blank=True, null=True)
    sex = models.CharField(max_length=10, blank=True, null=True)
    active = models.BooleanField(default=True)
    created_by = models.CharField(max_length=100, blank=True, default='')
    merged_to = models.ForeignKey(
        Patient, on_delete=models.SET_NULL, blank=True, null=True, related_name='merged_temporaries',
    )
    merged_at = models.DateTimeField(blank=True, null=True)
    merged_by = models.CharField(max_length=100, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'temporary_patients'
