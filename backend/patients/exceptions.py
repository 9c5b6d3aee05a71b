"""
患者登记 API 的错误类型。

三类错误对应响应里的 type 字段：
- validation_error  请求体或查询参数不合法（逐字段错误放在 detail['errors']），400
- block             操作做不了：患者或 active 的临时患者不存在，404
- warning           疑似重复患者：建档被挡下，detail['matches'] 带候选，409

code / message / detail / http_status 由 exception_handler 原样写进响应体。
view 和 service 只管 raise。
"""


class BaseAppException(Exception):
    """所有业务异常的基类。"""

    type = 'error'
    code = 'UNKNOWN_ERROR'
    http_status = 500

    def __init__(self, message, code=None, detail=None, http_status=None):
        self.message = message
        if code is not None:
            self.code = code
        if http_status is not None:
            self.http_status = http_status
        self.detail = detail
        super().__init__(message)


class ValidationError(BaseAppException):
    """输入验证失败。intake 层抛出，400。"""

    type = 'validation_error'
    code = 'VALIDATION_ERROR'
    http_status = 400


class BlockError(BaseAppException):
    """业务规则阻止操作。service 层抛出，409（找不到资源时用 404）。"""

    type = 'block'
    code = 'BUSINESS_BLOCK'
    http_status = 409


class WarningError(BaseAppException):
    """
    需要登记员确认的冲突，409。

    不是"失败"：请求本身合法，只是服务端不敢替用户做决定。
    客户端展示 detail 后，由用户选择放弃或带 bypass 标志重新提交。
    """

    type = 'warning'
    code = 'CONFIRMATION_REQUIRED'
    http_status = 409


class DuplicatePatientError(WarningError):
    """
    创建患者时服务端检测到疑似重复患者。

    detail['matches'] 携带服务端自己的候选列表，客户端必须用它替换预检结果，
    再带 bypassDuplicateCheck=true 重新提交才能强制创建。
    """

    code = 'POSSIBLE_DUPLICATE_PATIENT'

    def __init__(self, matches, message=None):
        super().__init__(
            message=message or (
                f"Found {len(matches)} existing patient(s) that may be the same person. "
                f"Review the matches or resubmit with bypassDuplicateCheck=true."
            ),
            detail={'matches': matches},
        )
        self.matches = matches
