"""
errors.py — 코어 예외 계층

HTTP 계층(api/app.py)이 각 예외를 상태 코드로 매핑한다.
"""


class QcmError(Exception):
    """모든 코어 예외의 기반 클래스."""


class ValidationError(QcmError, ValueError):
    """가져오기 페이로드가 올바르지 않음. 아무것도 저장되지 않는다."""


class NotFoundError(QcmError, LookupError):
    """카탈로그에 없는 시험 ID."""


class InvalidInput(QcmError, ValueError):
    """프레젠테이션 계층에서 온 계약 위반 입력. 상태는 변경되지 않는다."""


class StorageError(QcmError, RuntimeError):
    """저장소(DB/파일) 실패. 원인 예외는 __cause__ 로 연결된다."""
