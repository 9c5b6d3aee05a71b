"""
注册向导配置。

默认从 settings.REGISTRATION 读取（值都是环境变量里的字符串），
也可以直接构造 RegistrationConfig 传给向导。
"""

from dataclasses import dataclass

RECHECK_ONCE = 'once'
RECHECK_ON_CHANGE = 'on_change'
RECHECK_POLICIES = (RECHECK_ONCE, RECHECK_ON_CHANGE)


def _optional_seconds(value):
    """'' / None → None（不单独设超时）；其它转成 float 秒数。"""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    seconds = float(value)
    if seconds <= 0:
        raise ValueError(f"Timeout must be positive, got {value!r}")
    return seconds


@dataclass
class RegistrationConfig:
    api_base_url: str = 'http://localhost:8000/api/v1'
    # 预检请求的超时；None 表示沿用 requests 的默认行为（不超时）
    similar_check_timeout: float | None = None
    create_timeout: float | None = 30.0
    # once:      每份草稿只弹一次提示
    # on_change: step 1 的姓名/生日/性别改过之后再查一次
    recheck_policy: str = RECHECK_ONCE
    session_idle_timeout: float | None = 900.0

    def __post_init__(self):
        if self.recheck_policy not in RECHECK_POLICIES:
            raise ValueError(
                f"recheck_policy must be one of {', '.join(RECHECK_POLICIES)}, got {self.recheck_policy!r}"
            )
        self.api_base_url = self.api_base_url.rstrip('/')

    @classmethod
    def from_settings(cls, **overrides) -> 'RegistrationConfig':
        from django.conf import settings

        raw = getattr(settings, 'REGISTRATION', {})
        values = {
            'api_base_url': raw.get('API_BASE_URL', cls.api_base_url),
            'similar_check_timeout': _optional_seconds(raw.get('SIMILAR_CHECK_TIMEOUT')),
            'create_timeout': _optional_seconds(raw.get('CREATE_TIMEOUT', '30')),
            'recheck_policy': (raw.get('RECHECK_POLICY') or RECHECK_ONCE).strip(),
            'session_idle_timeout': _optional_seconds(raw.get('SESSION_IDLE_TIMEOUT', '900')),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
