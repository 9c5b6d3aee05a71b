import logging
import uuid
from datetime import date

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.db.models import Max, Q
from django.utils import timezone

from .exceptions import BlockError, DuplicatePatientError, ValidationError
from .intake import PatientCreateData
from .matching import MRN_PREFIX, generate_mrn_with_check_digit, mrn_sequence, soundex
from .models import EmergencyContact, InsuranceCoverage, Patient, TemporaryPatient

logger = logging.getLogger(__name__)

# 打分权重：合计上限 105，confidence 按 100 封顶
SCORE_EXACT_DOB = 30
SCORE_SOUNDEX_LAST = 25
SCORE_SOUNDEX_FIRST = 20
SCORE_EXACT_LAST = 15
SCORE_EXACT_FIRST = 10
SCORE_SEX = 5

REASON_EXACT_DOB = 'exact date of birth'
REASON_SOUNDEX_LAST = 'phonetic last name match'
REASON_SOUNDEX_FIRST = 'phonetic first name match'
REASON_EXACT_LAST = 'exact last name'
REASON_EXACT_FIRST = 'exact first name'
REASON_SEX = 'sex match'

MRN_RETRIES = 3


def _get_config() -> dict:
    """Get patient matching configuration from Django settings."""
    return getattr(settings, 'PATIENT_MATCHING', {})


def _coerce_dob(value):
    if value in (None, ''):
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(
            message='Date of birth must be in YYYY-MM-DD format',
            code='INVALID_DATE_OF_BIRTH',
            detail={'dateOfBirth': value},
        )


def score_patient(patient, first_name=None, last_name=None, dob=None, sex=None):
    """
    给单个患者打分。返回 (points, match_reasons)。

    - DOB 完全一致            +30
    - 姓 Soundex 一致         +25
    - 名 Soundex 一致         +20
    - 姓完全一致（忽略大小写） +15
    - 名完全一致（忽略大小写） +10
    - 性别一致                 +5
    Soundex 列还没回填时现场计算。
    """
    points = 0
    reasons = []

    if dob and patient.dob == dob:
        points += SCORE_EXACT_DOB
        reasons.append(REASON_EXACT_DOB)

    if last_name and patient.last_name:
        stored = patient.soundex_last or soundex(patient.last_name)
        if soundex(last_name) == stored:
            points += SCORE_SOUNDEX_LAST
            reasons.append(REASON_SOUNDEX_LAST)

    if first_name and patient.first_name:
        stored = patient.soundex_first or soundex(patient.first_name)
        if soundex(first_name) == stored:
            points += SCORE_SOUNDEX_FIRST
            reasons.append(REASON_SOUNDEX_FIRST)

    if last_name and patient.last_name and last_name.lower() == patient.last_name.lower():
        points += SCORE_EXACT_LAST
        reasons.append(REASON_EXACT_LAST)

    if first_name and patient.first_name and first_name.lower() == patient.first_name.lower():
        points += SCORE_EXACT_FIRST
        reasons.append(REASON_EXACT_FIRST)

    if sex and patient.sex and sex.lower() == patient.sex.lower():
        points += SCORE_SEX
        reasons.append(REASON_SEX)

    return points, reasons


def find_similar_patients(first_name=None, last_name=None, date_of_birth=None, sex=None):
    """
    疑似重复患者查询。返回按 confidence 降序的候选列表（最多 MAX_RESULTS 条）。

    每个候选是 dict：{'patient', 'points', 'confidence', 'match_reasons'}，
    confidence 在 [0, 1]。低于 MIN_SCORE 分的患者不返回。

    Raises:
        ValidationError: 四个参数一个都没给
    """
    first_name = (first_name or '').strip() or None
    last_name = (last_name or '').strip() or None
    sex = (sex or '').strip() or None
    dob = _coerce_dob(date_of_birth)

    if not any([first_name, last_name, dob, sex]):
        raise ValidationError(
            message='At least one search parameter is required',
            code='MISSING_SEARCH_PARAMETERS',
        )

    config = _get_config()
    min_score = config.get('MIN_SCORE', 30)
    max_results = config.get('MAX_RESULTS', 20)

    # 粗筛：至少命中一个打分维度的才拿出来打分；没回填 Soundex 的一律带上
    prefilter = Q()
    if dob:
        prefilter |= Q(dob=dob)
    if last_name:
        prefilter |= Q(soundex_last=soundex(last_name)) | Q(soundex_last__isnull=True)
        prefilter |= Q(last_name__iexact=last_name)
    if first_name:
        prefilter |= Q(soundex_first=soundex(first_name)) | Q(soundex_first__isnull=True)
        prefilter |= Q(first_name__iexact=first_name)
    if sex:
        prefilter |= Q(sex__iexact=sex)

    matches = []
    for patient in Patient.objects.filter(prefilter, active=True):
        points, reasons = score_patient(patient, first_name, last_name, dob, sex)
        if points >= min_score:
            matches.append({
                'patient': patient,
                'points': points,
                'confidence': round(min(points, 100) / 100, 2),
                'match_reasons': reasons,
            })

    matches.sort(key=lambda m: m['points'], reverse=True)
    logger.info(
        "Similar patient search: last_name=%s dob=%s → %d candidate(s)",
        last_name, dob, len(matches),
    )
    return matches[:max_results]


def check_patient_duplicate(data: PatientCreateData):
    """
    建档前的服务端重复检测。返回 confidence >= CONFLICT_THRESHOLD 的候选列表。

    客户端的预检可能漏掉（比如并发注册），这里以服务端为准。
    """
    threshold = _get_config().get('CONFLICT_THRESHOLD', 0.5)
    matches = find_similar_patients(
        first_name=data.first_name,
        last_name=data.last_name,
        date_of_birth=data.dob,
        sex=data.sex,
    )
    return [m for m in matches if m['confidence'] >= threshold]


def generate_mrn():
    """Next MRN in TRB-XXXXXX-C format."""
    current_max = Patient.objects.filter(
        mrn__startswith=f'{MRN_PREFIX}-',
    ).aggregate(max_mrn=Max('mrn'))['max_mrn']
    return generate_mrn_with_check_digit((mrn_sequence(current_max) or 0) + 1)


def _insert_patient(data: PatientCreateData, mrn):
    patient = Patient.objects.create(
        mrn=mrn,
        first_name=data.first_name,
        middle_name=data.middle_name,
        last_name=data.last_name,
        dob=data.dob,
        sex=data.sex,
        gender=data.gender,
        gender_identity=data.gender_identity,
        sexual_orientation=data.sexual_orientation,
        race=data.race,
        ethnicity=data.ethnicity,
        preferred_language=data.preferred_language,
        marital_status=data.marital_status,
        phone=data.phone,
        email=data.email,
        address=data.address.as_json() if data.address else None,
        consent_to_treat=data.consent_to_treat,
        consent_to_share_info=data.consent_to_share_info,
        advance_directive=data.advance_directive,
        notes=data.notes,
        soundex_first=soundex(data.first_name),
        soundex_last=soundex(data.last_name),
    )

    for contact in data.emergency_contacts:
        EmergencyContact.objects.create(
            patient=patient,
            name=contact.name,
            phone=contact.phone,
            relationship=contact.relationship,
        )

    if data.insurance:
        InsuranceCoverage.objects.create(
            patient=patient,
            plan_name=data.insurance.plan,
            member_id=data.insurance.member_id,
            group_number=data.insurance.group_number,
            subscriber_name=data.insurance.subscriber_name,
            subscriber_dob=data.insurance.subscriber_dob,
            subscriber_relation=data.insurance.subscriber_relation,
        )

    return patient


def create_patient(data: PatientCreateData):
    """
    创建患者。

    - 未带 bypass：先跑重复检测，有候选 → DuplicatePatientError (409, detail.matches)
    - 带 bypass：跳过检测，记一条 WARNING 方便事后审计
    MRN 撞 unique 约束时（并发建档）重新生成，最多 MRN_RETRIES 次。
    """
    from .serializers import serialize_similar_patient

    if data.bypass_duplicate_check:
        logger.warning(
            "Duplicate check bypassed for new patient %s %s (dob=%s)",
            data.first_name, data.last_name, data.dob,
        )
    else:
        matches = check_patient_duplicate(data)
        if matches:
            raise DuplicatePatientError(
                matches=[serialize_similar_patient(m) for m in matches],
            )

    for attempt in range(1, MRN_RETRIES + 1):
        try:
            with transaction.atomic():
                patient = _insert_patient(data, generate_mrn())
            break
        except IntegrityError:
            if attempt == MRN_RETRIES:
                raise
            logger.warning("MRN collision on attempt %d, regenerating", attempt)

    logger.info("Patient created: id=%s mrn=%s", patient.id, patient.mrn)
    return patient


def get_patient(patient_id):
    """Get patient by ID. Raises BlockError if not found."""
    try:
        return Patient.objects.prefetch_related('emergency_contacts', 'insurance_coverage').get(id=patient_id)
    except (Patient.DoesNotExist, DjangoValidationError):
        raise BlockError(
            message='Patient not found',
            code='PATIENT_NOT_FOUND',
            detail={'patient_id': str(patient_id)},
            http_status=404,
        )


def create_temporary_patient(reason, first_name=None, last_name=None, date_of_birth=None, sex=None,
                             created_by=''):
    """Create an unidentified-patient placeholder with a TEMP-XXXXXXXX MRN."""
    if not (reason or '').strip():
        raise ValidationError(
            message='Reason is required for temporary patient',
            code='TEMPORARY_REASON_REQUIRED',
        )

    temp = TemporaryPatient.objects.create(
        temporary_mrn=f"TEMP-{uuid.uuid4().hex[:8].upper()}",
        reason=reason.strip(),
        first_name=first_name or None,
        last_name=last_name or None,
        dob=_coerce_dob(date_of_birth),
        sex=sex or None,
        created_by=created_by or '',
    )
    logger.info("Created temporary patient: id=%s temporary_mrn=%s", temp.id, temp.temporary_mrn)
    return temp


def merge_temporary_patient(temp_id, patient_id, merged_by=''):
    """
    把临时患者合并到真实患者。

    临时患者必须存在且 active；真实患者必须存在。合并后临时患者置为 inactive。
    """
    try:
        temp = TemporaryPatient.objects.get(id=temp_id, active=True)
    except TemporaryPatient.DoesNotExist:
        raise BlockError(
            message='Temporary patient not found',
            code='TEMPORARY_PATIENT_NOT_FOUND',
            detail={'temporary_patient_id': str(temp_id)},
            http_status=404,
        )

    patient = get_patient(patient_id)

    temp.active = False
    temp.merged_to = patient
    temp.merged_at = timezone.now()
    temp.merged_by = merged_by or ''
    temp.save(update_fields=['active', 'merged_to', 'merged_at', 'merged_by'])

    logger.info("Merged temporary patient %s into patient %s", temp.id, patient.id)
    return temp


def backfill_soundex():
    """为还没有 Soundex 编码的 active 患者补齐 soundex_first / soundex_last。返回更新数量。"""
    pending = Patient.objects.filter(
        Q(soundex_first__isnull=True) | Q(soundex_last__isnull=True),
        active=True,
    )

    count = 0
    for patient in pending.iterator():
        patient.soundex_first = soundex(patient.first_name)
        patient.soundex_last = soundex(patient.last_name)
        patient.save(update_fields=['soundex_first', 'soundex_last', 'updated_at'])
        count += 1

    logger.info("Backfilled Soundex codes for %d patient(s)", count)
    return count
