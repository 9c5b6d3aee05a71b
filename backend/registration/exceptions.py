"""
注册向导（客户端）的异常。

与服务端 patients.exceptions 分开：这里描述的是"调用 API 的一方"看到的错误。
"""


class RegistrationError(Exception):
    """所有客户端注册异常的基类。"""


class UnknownFieldError(RegistrationError):
    """向 RegistrationDraft 写入了不存在的字段。"""


class ActionNotAvailable(RegistrationError):
    """向导当前状态下不提供该操作（比如还没到第 5 步就 bypass）。"""


class SessionExpiredError(RegistrationError):
    """会话空闲超时，需要重新登录。"""


class PatientApiError(RegistrationError):
    """
    API 返回了非 2xx。

    status  HTTP 状态码
    body    解析后的响应体（统一错误格式 {type, code, message, detail}），解析失败时为 None
    """

    def __init__(self, message, status=None, body=None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.body = body

    @property
    def code(self):
        return (self.body or {}).get('code')


class DuplicatePatientConflict(PatientApiError):
    """
    建档时服务端返回 409 疑似重复。

    candidates 是服务端自己的候选列表，必须替换客户端预检的结果。
    """

    def __init__(self, message, candidates, status=409, body=None):
        super().__init__(message, status=status, body=body)
        self.candidates = tuple(candidates)
