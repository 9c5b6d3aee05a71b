"""
RegistrationDraft / SimilarPatientCandidate — 向导唯一认识的两个数据结构。

RegistrationDraft         向导存活期间的全部表单字段，只存在内存里，不跨会话持久化。
SimilarPatientCandidate   一条疑似重复候选，只读；新一轮检测时整体替换，不做局部修改。
"""

from dataclasses import dataclass, field, fields
from enum import IntEnum

from .exceptions import UnknownFieldError


class Step(IntEnum):
    DEMOGRAPHICS = 1
    CONTACT_INFO = 2
    EMERGENCY_CONTACTS = 3
    INSURANCE = 4
    CONSENT_REVIEW = 5

    @property
    def label(self) -> str:
        return _STEP_LABELS[self]


_STEP_LABELS = {
    Step.DEMOGRAPHICS: "Demographics",
    Step.CONTACT_INFO: "Contact Info",
    Step.EMERGENCY_CONTACTS: "Emergency Contacts",
    Step.INSURANCE: "Insurance",
    Step.CONSENT_REVIEW: "Consent & Review",
}

FIRST_STEP = Step.DEMOGRAPHICS
LAST_STEP = Step.CONSENT_REVIEW


@dataclass
class RegistrationDraft:
    # Step 1: Demographics
    first_name: str = ""
    last_name: str = ""
    middle_name: str = ""
    dob: str = ""                      # ISO 8601: "YYYY-MM-DD"
    gender: str = ""
    sex: str = ""
    gender_identity: str = ""          # GENDER_IDENTITY_MAP 的 key
    sexual_orientation: str = ""       # SEXUAL_ORIENTATION_MAP 的 key
    ssn: str = ""
    race: str = ""                     # RACE_CODE_MAP 的 key
    ethnicity: str = ""                # ETHNICITY_CODE_MAP 的 key
    preferred_language: str = "en"
    marital_status: str = ""

    # Step 2: Contact Info
    address_line1: str = ""
    address_line2: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    phone: str = ""
    email: str = ""

    # Step 3: Emergency Contacts
    emergency_contact1_name: str = ""
    emergency_contact1_phone: str = ""
    emergency_contact1_relationship: str = ""
    emergency_contact2_name: str = ""
    emergency_contact2_phone: str = ""
    emergency_contact2_relationship: str = ""

    # Step 4: Insurance
    insurance_plan: str = ""
    member_id: str = ""
    group_number: str = ""
    subscriber_name: str = ""
    subscriber_dob: str = ""
    subscriber_relation: str = ""

    # Step 5: Consent & Review
    consent_to_treat: bool = False
    consent_to_share_info: bool = False
    advance_directive: bool = False
    notes: str = ""

    @classmethod
    def field_names(cls) -> frozenset[str]:
        return frozenset(f.name for f in fields(cls))

    @classmethod
    def from_dict(cls, data: dict) -> "RegistrationDraft":
        unknown = set(data) - cls.field_names()
        if unknown:
            raise UnknownFieldError(f"Unknown registration field(s): {', '.join(sorted(unknown))}")
        return cls(**data)

    def set_field(self, name: str, value) -> None:
        if name not in self.field_names():
            raise UnknownFieldError(f"Unknown registration field: {name!r}")
        setattr(self, name, value)

    def demographic_fingerprint(self) -> tuple:
        """重复检测依赖的四个字段；用来判断 step 1 之后它们有没有被改过。"""
        return (
            self.first_name.strip().lower(),
            self.last_name.strip().lower(),
            self.dob.strip(),
            self.sex.strip().lower(),
        )


@dataclass(frozen=True)
class SimilarPatientCandidate:
    id: str
    mrn: str
    first_name: str
    last_name: str
    date_of_birth: str
    sex: str
    confidence: float                  # [0, 1]，越高越可能是同一个人
    match_reasons: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_api(cls, data: dict) -> "SimilarPatientCandidate":
        """
        API 响应 → candidate。

        confidence 超过 1 时按 0-100 的百分制处理，最终夹到 [0, 1]。
        matchReasons 必须是非空的字符串列表，否则 ValueError。
        """
        reasons = data.get("matchReasons")
        if not isinstance(reasons, list) or not reasons or not all(isinstance(r, str) for r in reasons):
            raise ValueError(f"candidate {data.get('id')!r} has no match reasons")

        confidence = float(data.get("confidence") or 0)
        if confidence > 1:
            confidence = confidence / 100
        confidence = min(max(confidence, 0.0), 1.0)

        return cls(
            id=str(data.get("id") or ""),
            mrn=data.get("mrn") or "",
            first_name=data.get("firstName") or "",
            last_name=data.get("lastName") or "",
            date_of_birth=data.get("dateOfBirth") or "",
            sex=data.get("sex") or "",
            confidence=confidence,
            match_reasons=tuple(reasons),
        )
