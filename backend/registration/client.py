"""
Patient API 客户端（requests.Session）。

只封装向导需要的两个调用：
- GET  patients/similar/   疑似重复预检
- POST patients/           建档（409 → DuplicatePatientConflict）

传输层异常（连接失败、超时）按 requests.RequestException 原样抛出，
响应体格式不对（非 JSON、候选列表结构错误）统一抛 PatientApiError，
由调用方决定是 fail-open 还是提示重试。
"""

import logging

import requests

from .exceptions import DuplicatePatientConflict, PatientApiError
from .types import SimilarPatientCandidate

logger = logging.getLogger(__name__)

DUPLICATE_CODE = 'POSSIBLE_DUPLICATE_PATIENT'


class PatientApiClient:
    """
    Args:
        base_url: API 根地址，比如 http://localhost:8000/api/v1
        session:  SessionContext；每次调用前 touch() 并带上 Authorization 头
        http:     可注入的 requests.Session（测试用）
    """

    def __init__(self, base_url, session=None, http=None):
        self.base_url = base_url.rstrip('/')
        self.session = session
        self.http = http or requests.Session()
        self.http.headers.update({
            'Accept': 'application/json',
            'Content-Type': 'application/json',
        })

    def find_similar(self, first_name, last_name, date_of_birth, sex=None, timeout=None):
        params = {
            'firstName': first_name,
            'lastName': last_name,
            'dateOfBirth': date_of_birth,
        }
        if sex:
            params['sex'] = sex

        body = self._request('GET', 'patients/similar/', params=params, timeout=timeout)
        return self._candidates(body.get('data') or [], status=200)

    def create_patient(self, payload, timeout=None):
        """返回创建成功的患者（响应里的 data）。"""
        body = self._request('POST', 'patients/', json=payload, timeout=timeout)
        return body.get('data') or {}

    def _request(self, method, path, timeout=None, **kwargs):
        headers = {}
        if self.session is not None:
            self.session.touch()
            headers.update(self.session.auth_headers())

        response = self.http.request(
            method,
            f"{self.base_url}/{path}",
            headers=headers,
            timeout=timeout,
            **kwargs,
        )

        body = self._json(response)
        if response.ok:
            if body is None:
                raise PatientApiError("Response body is not valid JSON", status=response.status_code)
            return body

        if response.status_code == 409 and body and body.get('code') == DUPLICATE_CODE:
            detail = body.get('detail')
            matches = detail.get('matches') if isinstance(detail, dict) else None
            if matches:
                candidates = self._candidates(matches, status=409)
                raise DuplicatePatientConflict(body.get('message', ''), candidates, body=body)

        message = (body or {}).get('message') or f"HTTP {response.status_code}"
        logger.info("%s %s failed: status=%s message=%s", method, path, response.status_code, message)
        raise PatientApiError(message, status=response.status_code, body=body)

    @staticmethod
    def _candidates(items, status):
        """候选列表格式不对时抛 PatientApiError，由调用方按普通 API 错误处理。"""
        if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
            raise PatientApiError("Malformed candidate list in response", status=status)
        try:
            return [SimilarPatientCandidate.from_api(item) for item in items]
        except (ValueError, TypeError, AttributeError) as e:
            raise PatientApiError(f"Malformed candidate in response: {e}", status=status) from e

    @staticmethod
    def _json(response):
        try:
            body = response.json()
        except ValueError:
            return None
        return body if isinstance(body, dict) else None
