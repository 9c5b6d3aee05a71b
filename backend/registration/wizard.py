"""
RegistrationWizard — 五步建档向导的状态机。

    1 Demographics → 2 Contact Info → 3 Emergency Contacts → 4 Insurance → 5 Consent & Review

核心约束：只要有未处理的疑似重复候选，向导就不会建档；预检候选未处理时也不会前进。
服务端 409 的候选不挡导航：用户可以退回去改草稿，再回到第 5 步 bypass 或选已有患者。
候选只能通过三种方式处理：
- select_existing()     选已有患者，跳转到该患者，草稿丢弃
- dismiss_alert()       确认不是同一个人（仅限预检提示），继续下一步
- submit_with_bypass()  第 5 步"仍然创建"，请求体带 bypassDuplicateCheck: true

会话过期（SessionExpiredError）不在这里处理：advance() / submit() 原样抛出，
草稿和当前步骤保持不变，由调用方重新登录后继续。
"""

import logging
from enum import Enum

import requests

from . import validation
from .alert import PRECHECK, SERVER_CONFLICT, SimilarPatientsAlert
from .client import PatientApiClient
from .config import RECHECK_ON_CHANGE, RegistrationConfig
from .exceptions import ActionNotAvailable, DuplicatePatientConflict, PatientApiError
from .gate import DuplicateCheckGate
from .payload import build_create_payload
from .types import FIRST_STEP, LAST_STEP, RegistrationDraft, Step

logger = logging.getLogger(__name__)

PATIENT_LIST_PATH = '/patients'
GENERIC_SUBMIT_ERROR = 'Failed to register patient. Please try again.'
CONFLICT_SUBMIT_ERROR = 'Potential duplicate patients detected. Review matches below or click "Create Anyway".'


class Outcome(Enum):
    ADVANCED = 'advanced'
    RETREATED = 'retreated'
    CANCELLED = 'cancelled'
    INVALID = 'invalid'
    NEEDS_REVIEW = 'needs_review'
    BUSY = 'busy'
    DISMISSED = 'dismissed'
    SELECTED = 'selected'
    CREATED = 'created'
    CONFLICT = 'conflict'
    FAILED = 'failed'


def patient_path(patient_id):
    return f"{PATIENT_LIST_PATH}/{patient_id}"


class RegistrationWizard:
    """
    Args:
        gate:     DuplicateCheckGate
        client:   PatientApiClient（建档）
        config:   RegistrationConfig；默认全部取默认值
        navigate: 可选回调 navigate(path)，向导结束时调用
        draft:    可选的初始草稿
    """

    def __init__(self, gate, client, config=None, navigate=None, draft=None):
        self.gate = gate
        self.client = client
        self.config = config or RegistrationConfig()
        self.navigate = navigate

        self.draft = draft if draft is not None else RegistrationDraft()
        self.current_step = FIRST_STEP
        self.errors = {}
        self.submit_error = None
        self.alert = SimilarPatientsAlert()
        self.is_checking = False
        self.is_submitting = False
        self.redirect_to = None
        self.created_patient = None

        self._alert_shown = False
        self._checked_fingerprint = None

    @classmethod
    def from_config(cls, config=None, session=None, navigate=None, draft=None):
        config = config or RegistrationConfig.from_settings()
        client = PatientApiClient(config.api_base_url, session=session)
        gate = DuplicateCheckGate(client, timeout=config.similar_check_timeout)
        return cls(gate, client, config=config, navigate=navigate, draft=draft)

    # ── 状态 ────────────────────────────────────────────────

    @property
    def closed(self):
        return self.redirect_to is not None

    @property
    def step_label(self):
        return Step(self.current_step).label

    @property
    def can_bypass(self):
        return not self.closed and self.current_step == LAST_STEP and self.alert.is_active

    # ── 字段编辑 ─────────────────────────────────────────────

    def update(self, field, value):
        self._ensure_open()
        self.draft.set_field(field, value)
        self.errors.pop(field, None)

    def validate_step(self, step=None):
        step = self.current_step if step is None else step
        step_errors = validation.validate_step(self.draft, step)
        for name in validation.STEP_FIELDS[Step(step)]:
            self.errors.pop(name, None)
        self.errors.update(step_errors)
        return not step_errors

    # ── 导航 ────────────────────────────────────────────────

    def advance(self):
        self._ensure_open()
        if self.is_checking or self.is_submitting:
            return Outcome.BUSY
        if self.alert.is_active and self.alert.origin == PRECHECK:
            return Outcome.NEEDS_REVIEW
        if not self.validate_step():
            return Outcome.INVALID

        if self.current_step == FIRST_STEP and self._should_check():
            self.is_checking = True
            try:
                result = self.gate.check(self.draft)
            finally:
                self.is_checking = False
            self._checked_fingerprint = self.draft.demographic_fingerprint()

            if result.needs_review:
                self.alert.show(result.candidates, PRECHECK)
                self._alert_shown = True
                return Outcome.NEEDS_REVIEW

        self._step_forward()
        return Outcome.ADVANCED

    def retreat(self):
        self._ensure_open()
        if self.current_step == FIRST_STEP:
            self._finish(PATIENT_LIST_PATH)
            return Outcome.CANCELLED
        self.current_step = Step(self.current_step - 1)
        return Outcome.RETREATED

    def cancel(self):
        self._ensure_open()
        self._finish(PATIENT_LIST_PATH)
        return Outcome.CANCELLED

    # ── 疑似重复的三种处理 ───────────────────────────────────

    def select_existing(self, patient_id):
        self._ensure_open()
        candidate = self.alert.select(patient_id)
        logger.info("Registration abandoned in favour of existing patient %s (%s)", candidate.id, candidate.mrn)
        self._finish(patient_path(candidate.id))
        return Outcome.SELECTED

    def dismiss_alert(self):
        self._ensure_open()
        self.alert.dismiss()
        self._step_forward()
        return Outcome.DISMISSED

    def submit_with_bypass(self):
        if not self.can_bypass:
            raise ActionNotAvailable("Create Anyway is only offered at the last step while duplicates are shown")
        return self._submit(bypass=True)

    # ── 提交 ────────────────────────────────────────────────

    def submit(self):
        return self._submit(bypass=False)

    def _submit(self, bypass):
        self._ensure_open()
        if self.current_step != LAST_STEP:
            raise ActionNotAvailable(f"Submit is only available at step {int(LAST_STEP)}")
        if self.is_checking or self.is_submitting:
            return Outcome.BUSY
        if self.alert.is_active and not bypass:
            return Outcome.NEEDS_REVIEW

        # 同意书先查，不满足就不发请求
        if self.draft.consent_to_treat is not True:
            self.errors['consent_to_treat'] = validation.CONSENT_REQUIRED_MESSAGE
            return Outcome.INVALID

        all_errors = validation.validate_all(self.draft)
        if all_errors:
            self.errors = all_errors
            return Outcome.INVALID

        self.submit_error = None
        payload = build_create_payload(self.draft, bypass=bypass)
        if bypass:
            logger.warning(
                "Creating patient despite %d similar candidate(s) (bypassDuplicateCheck)",
                len(self.alert.candidates),
            )
            self.alert.clear()

        self.is_submitting = True
        try:
            created = self.client.create_patient(payload, timeout=self.config.create_timeout)
        except DuplicatePatientConflict as conflict:
            # 服务端的候选列表覆盖预检结果
            self.alert.show(conflict.candidates, SERVER_CONFLICT)
            self.submit_error = CONFLICT_SUBMIT_ERROR
            return Outcome.CONFLICT
        except (PatientApiError, requests.RequestException) as e:
            logger.warning("Patient create failed: %s", e)
            self.submit_error = GENERIC_SUBMIT_ERROR
            return Outcome.FAILED
        finally:
            self.is_submitting = False

        self.created_patient = created
        logger.info("Registered patient %s (%s)", created.get('id'), created.get('mrn'))
        self._finish(patient_path(created.get('id')))
        return Outcome.CREATED

    # ── 内部 ────────────────────────────────────────────────

    def _should_check(self):
        if self.config.recheck_policy == RECHECK_ON_CHANGE:
            return self._checked_fingerprint != self.draft.demographic_fingerprint()
        return not self._alert_shown

    def _step_forward(self):
        self.current_step = Step(min(self.current_step + 1, LAST_STEP))

    def _finish(self, path):
        self.redirect_to = path
        self.draft = None
        self.alert.clear()
        if self.navigate is not None:
            self.navigate(path)

    def _ensure_open(self):
        if self.closed:
            raise ActionNotAvailable(f"Registration already finished (redirected to {self.redirect_to})")
