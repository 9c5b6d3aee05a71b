import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Patient',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('mrn', models.CharField(max_length=20, unique=True)),
                ('first_name', models.CharField(max_length=100)),
                ('middle_name', models.CharField(blank=True, default='', max_length=100)),
                ('last_name', models.CharField(max_length=100)),
                ('dob', models.DateField()),
                ('sex', models.CharField(choices=[('male', 'Male'), ('female', 'Female'), ('other', 'Other'), ('unknown', 'Unknown')], max_length=10)),
                ('gender', models.CharField(blank=True, default='', max_length=50)),
                ('gender_identity', models.JSONField(blank=True, null=True)),
                ('sexual_orientation', models.JSONField(blank=True, null=True)),
                ('race', models.JSONField(blank=True, default=list)),
                ('ethnicity', models.JSONField(blank=True, null=True)),
                ('preferred_language', models.CharField(blank=True, default='', max_length=50)),
                ('marital_status', models.CharField(blank=True, default='', max_length=10)),
                ('phone', models.CharField(blank=True, default='', max_length=20)),
                ('email', models.CharField(blank=True, default='', max_length=254)),
                ('address', models.JSONField(blank=True, null=True)),
                ('consent_to_treat', models.BooleanField(default=False)),
                ('consent_to_share_info', models.BooleanField(default=False)),
                ('advance_directive', models.BooleanField(default=False)),
                ('notes', models.TextField(blank=True, default='')),
                ('soundex_first', models.CharField(blank=True, max_length=4, null=True)),
                ('soundex_last', models.CharField(blank=True, max_length=4, null=True)),
                ('active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'patients',
            },
        ),
        migrations.CreateModel(
            name='EmergencyContact',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('relationship', models.CharField(max_length=100)),
                ('phone', models.CharField(max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('patient', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='emergency_contacts', to='patients.patient')),
            ],
            options={
                'db_table': 'patient_emergency_contacts',
            },
        ),
        migrations.CreateModel(
            name='InsuranceCoverage',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('plan_name', models.CharField(max_length=200)),
                ('member_id', models.CharField(blank=True, default='', max_length=50)),
                ('group_number', models.CharField(blank=True, default='', max_length=50)),
                ('subscriber_name', models.CharField(blank=True, default='', max_length=200)),
                ('subscriber_dob', models.DateField(blank=True, null=True)),
                ('subscriber_relation', models.CharField(blank=True, default='', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('patient', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='insurance_coverage', to='patients.patient')),
            ],
            options={
                'db_table': 'patient_insurance_coverage',
            },
        ),
        migrations.CreateModel(
            name='TemporaryPatient',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('temporary_mrn', models.CharField(max_length=20, unique=True)),
                ('reason', models.TextField()),
                ('first_name', models.CharField(blank=True, max_length=100, null=True)),
                ('last_name', models.CharField(blank=True, max_length=100, null=True)),
                ('dob', models.DateField(blank=True, null=True)),
                ('sex', models.CharField(blank=True, max_length=10, null=True)),
                ('active', models.BooleanField(default=True)),
                ('created_by', models.CharField(blank=True, default='', max_length=100)),
                ('merged_at', models.DateTimeField(blank=True, null=True)),
                ('merged_by', models.CharField(blank=True, max_length=100, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('merged_to', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='merged_temporaries', to='patients.patient')),
            ],
            options={
                'db_table': 'temporary_patients',
            },
        ),
    ]
