"""
Unit tests for exception classes and unified_exception_handler.

不需要数据库，纯 Python 测试：
1. BaseAppException 默认值
2. 各子类的默认 type / code / http_status
3. DuplicatePatientError 携带 matches
4. unified_exception_handler 把异常转成统一格式的 JsonResponse
5. DRF 自带异常（ValidationError / ParseError）也转成统一格式
"""
import json
import logging

from rest_framework.exceptions import NotFound, ParseError
from rest_framework.exceptions import ValidationError as DRFValidationError

from patients.exception_handler import unified_exception_handler
from patients.exceptions import (
    BaseAppException,
    BlockError,
    DuplicatePatientError,
    ValidationError,
    WarningError,
)


# -------------------------------------------------------------------
# Exception classes
# -------------------------------------------------------------------

class TestBaseAppException:

    def test_defaults(self):
        exc = BaseAppException('something broke')
        assert exc.message == 'something broke'
        assert exc.type == 'error'
        assert exc.code == 'UNKNOWN_ERROR'
        assert exc.http_status == 500
        assert exc.detail is None

    def test_override_code_and_status(self):
        exc = BaseAppException('bad', code='CUSTOM_CODE', http_status=418)
        assert exc.code == 'CUSTOM_CODE'
        assert exc.http_status == 418


class TestSubclassDefaults:

    def test_validation_error(self):
        exc = ValidationError('bad input', code='INVALID_DATE_OF_BIRTH')
        assert exc.type == 'validation_error'
        assert exc.code == 'INVALID_DATE_OF_BIRTH'
        assert exc.http_status == 400

    def test_block_error_not_found(self):
        exc = BlockError('not found', code='PATIENT_NOT_FOUND', http_status=404)
        assert exc.type == 'block'
        assert exc.http_status == 404

    def test_warning_error(self):
        exc = WarningError('needs confirm')
        assert exc.type == 'warning'
        assert exc.code == 'CONFIRMATION_REQUIRED'
        assert exc.http_status == 409


class TestDuplicatePatientError:

    def test_carries_matches(self):
        matches = [{'id': 'p1', 'confidence': 0.9}, {'id': 'p2', 'confidence': 0.6}]
        exc = DuplicatePatientError(matches)

        assert isinstance(exc, WarningError)
        assert exc.code == 'POSSIBLE_DUPLICATE_PATIENT'
        assert exc.http_status == 409
        assert exc.matches == matches
        assert exc.detail == {'matches': matches}
        assert '2 existing patient' in exc.message

    def test_custom_message(self):
        exc = DuplicatePatientError([], message='custom')
        assert exc.message == 'custom'


# -------------------------------------------------------------------
# unified_exception_handler
# -------------------------------------------------------------------

class TestUnifiedExceptionHandler:

    def _handle(self, exc):
        response = unified_exception_handler(exc, {})
        return response.status_code, json.loads(response.content)

    def test_block_error(self):
        status, body = self._handle(BlockError('gone', code='PATIENT_NOT_FOUND', http_status=404,
                                               detail={'patient_id': 'x'}))
        assert status == 404
        assert body == {
            'type': 'block',
            'code': 'PATIENT_NOT_FOUND',
            'message': 'gone',
            'detail': {'patient_id': 'x'},
        }

    def test_duplicate_patient_error(self):
        status, body = self._handle(DuplicatePatientError([{'id': 'p1'}]))
        assert status == 409
        assert body['type'] == 'warning'
        assert body['detail']['matches'] == [{'id': 'p1'}]

    def test_no_detail_field_when_none(self):
        _, body = self._handle(ValidationError('bad'))
        assert 'detail' not in body

    def test_app_exception_logged_at_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger='patients.exception_handler'):
            self._handle(ValidationError('bad', code='X'))
        assert any(r.levelno == logging.WARNING and 'code=X' in r.getMessage() for r in caplog.records)

    def test_drf_validation_error(self):
        status, body = self._handle(DRFValidationError({'firstName': ['required']}))
        assert status == 400
        assert body['type'] == 'validation_error'
        assert body['detail'] == {'firstName': ['required']}

    def test_parse_error(self):
        status, body = self._handle(ParseError('JSON parse error'))
        assert status == 400
        assert body['message'] == 'Invalid JSON in request body'

    def test_other_drf_errors_use_default_handler(self):
        response = unified_exception_handler(NotFound(), {})
        assert response.status_code == 404

    def test_unexpected_error_returns_none(self):
        """非业务异常交还给 DRF，最终以 500 冒泡。"""
        assert unified_exception_handler(RuntimeError('unexpected'), {}) is None
