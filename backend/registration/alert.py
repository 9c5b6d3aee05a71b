"""
疑似重复患者提示。

同一时间只展示一组候选，来源二选一：
- precheck         step 1 预检发现的；可以 dismiss
- server_conflict  建档时服务端 409 返回的；不能 dismiss，只能 select 或 bypass
"""

from .exceptions import ActionNotAvailable

PRECHECK = 'precheck'
SERVER_CONFLICT = 'server_conflict'

HIGH = 'high'
MEDIUM = 'medium'
LOW = 'low'


def confidence_band(confidence):
    if confidence > 0.8:
        return HIGH
    if confidence >= 0.5:
        return MEDIUM
    return LOW


def describe(candidate):
    """Last, First — MRN — NN% match — reasons"""
    reasons = ', '.join(candidate.match_reasons)
    percent = round(candidate.confidence * 100)
    return f"{candidate.last_name}, {candidate.first_name} — {candidate.mrn} — {percent}% match — {reasons}"


class SimilarPatientsAlert:

    def __init__(self):
        self.candidates = ()
        self.origin = None

    @property
    def is_active(self):
        return bool(self.candidates)

    @property
    def can_dismiss(self):
        return self.is_active and self.origin == PRECHECK

    def show(self, candidates, origin):
        # 整组替换，不合并上一轮的结果
        self.candidates = tuple(candidates)
        self.origin = origin if self.candidates else None

    def clear(self):
        self.candidates = ()
        self.origin = None

    def select(self, patient_id):
        """返回被选中的候选；id 不在当前列表里时抛 ActionNotAvailable。"""
        patient_id = str(patient_id)
        for candidate in self.candidates:
            if candidate.id == patient_id:
                self.clear()
                return candidate
        raise ActionNotAvailable(f"Patient {patient_id} is not among the displayed candidates")

    def dismiss(self):
        if not self.is_active:
            raise ActionNotAvailable("No similar-patient alert to dismiss")
        if self.origin != PRECHECK:
            raise ActionNotAvailable(
                "Server-detected duplicates cannot be dismissed; select a patient or create anyway"
            )
        self.clear()

    def render_lines(self):
        return [f"[{confidence_band(c.confidence)}] {describe(c)}" for c in self.candidates]
