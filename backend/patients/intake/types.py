"""
PatientCreateData dataclass — 业务逻辑唯一认识的标准格式。

parse_create_payload() 把 camelCase 的请求体转成这个结构。
业务层（services.py）只消费这个结构，永远不碰原始 JSON。
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any


@dataclass
class AddressData:
    line1: str
    city: str
    state: str
    postal_code: str
    line2: str = ""

    def as_json(self) -> dict:
        return {
            "line1": self.line1,
            "line2": self.line2,
            "city": self.city,
            "state": self.state,
            "postalCode": self.postal_code,
        }


@dataclass
class EmergencyContactData:
    name: str
    phone: str
    relationship: str


@dataclass
class InsuranceData:
    plan: str
    member_id: str = ""
    group_number: str = ""
    subscriber_name: str = ""
    subscriber_dob: date | None = None
    subscriber_relation: str = ""


@dataclass
class PatientCreateData:
    """
    标准内部建档格式。

    bypass_duplicate_check  用户在看过候选人后选择"仍然创建"时为 True。
    raw_payload             保存原始请求体，用于排查问题，不参与业务逻辑。
    """

    first_name: str
    last_name: str
    dob: date
    sex: str
    middle_name: str = ""
    gender: str = ""
    gender_identity: dict | None = None
    sexual_orientation: dict | None = None
    race: list[dict] = field(default_factory=list)
    ethnicity: dict | None = None
    preferred_language: str = ""
    marital_status: str = ""
    phone: str = ""
    email: str = ""
    address: AddressData | None = None
    emergency_contacts: list[EmergencyContactData] = field(default_factory=list)
    insurance: InsuranceData | None = None
    consent_to_treat: bool = False
    consent_to_share_info: bool = False
    advance_directive: bool = False
    notes: str = ""
    bypass_duplicate_check: bool = False
    raw_payload: Any = field(default=None, repr=False)
