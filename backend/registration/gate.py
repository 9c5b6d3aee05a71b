"""
Duplicate-check gate：step 1 → step 2 之前的疑似重复预检。

结果只有三种：
- clear         没有候选（或者检测失败，fail-open）
- needs_review  有候选，向导必须停下来等用户决定
- skipped       名字/生日不全，不查
"""

import logging
from dataclasses import dataclass, field

import requests

from .exceptions import PatientApiError
from .types import RegistrationDraft, SimilarPatientCandidate

logger = logging.getLogger(__name__)

CLEAR = 'clear'
NEEDS_REVIEW = 'needs_review'
SKIPPED = 'skipped'


@dataclass(frozen=True)
class GateResult:
    status: str
    candidates: tuple[SimilarPatientCandidate, ...] = field(default_factory=tuple)

    @property
    def needs_review(self) -> bool:
        return self.status == NEEDS_REVIEW


class DuplicateCheckGate:

    def __init__(self, client, timeout=None):
        self.client = client
        self.timeout = timeout

    def check(self, draft: RegistrationDraft) -> GateResult:
        first_name = draft.first_name.strip()
        last_name = draft.last_name.strip()
        dob = draft.dob.strip()
        if not (first_name and last_name and dob):
            return GateResult(SKIPPED)

        try:
            candidates = self.client.find_similar(
                first_name, last_name, dob,
                sex=draft.sex.strip() or None,
                timeout=self.timeout,
            )
        except (requests.RequestException, PatientApiError) as e:
            # 预检失败不阻塞建档，服务端建档时还会再查一次
            logger.warning("Similar-patient check failed, continuing without it: %s", e)
            return GateResult(CLEAR)

        if not candidates:
            return GateResult(CLEAR)

        logger.info("Similar-patient check found %d candidate(s)", len(candidates))
        return GateResult(NEEDS_REVIEW, tuple(candidates))
