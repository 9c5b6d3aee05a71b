"""
SessionContext — 调用方的认证会话。

token 由外部登录流程提供；这里只负责：
- 每次 API 调用前 touch()，刷新空闲计时
- 空闲超过 idle_timeout 秒后标记过期，并回调 on_expire（比如跳回登录页）
"""

import logging
import threading

from .exceptions import SessionExpiredError

logger = logging.getLogger(__name__)


class SessionContext:

    def __init__(self, token, idle_timeout=None, on_expire=None):
        self.token = token
        self.idle_timeout = idle_timeout
        self.on_expire = on_expire
        self._expired = False
        self._timer = None
        self._lock = threading.Lock()

    @property
    def expired(self):
        return self._expired

    def start(self):
        with self._lock:
            self._restart_timer()
        return self

    def touch(self):
        """记录一次活动。会话已过期时抛 SessionExpiredError。"""
        with self._lock:
            if self._expired:
                raise SessionExpiredError("Session has expired, please sign in again")
            self._restart_timer()

    def end(self):
        with self._lock:
            self._cancel_timer()
            self._expired = True

    def auth_headers(self):
        if not self.token:
            return {}
        return {'Authorization': f'Bearer {self.token}'}

    def _restart_timer(self):
        self._cancel_timer()
        if self.idle_timeout is None:
            return
        self._timer = threading.Timer(self.idle_timeout, self._expire)
        self._timer.daemon = True
        self._timer.start()

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _expire(self):
        with self._lock:
            if self._expired:
                return
            self._expired = True
            self._timer = None
        logger.info("Session idle for %ss, expired", self.idle_timeout)
        if self.on_expire is not None:
            self.on_expire()
