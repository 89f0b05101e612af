"""
에러 분류 시스템

설정 동기화 실패를 종료/무시 여부에 따라 분류하여 로그와 종료 처리에 활용.
"""

from enum import Enum


class ErrorCategory(str, Enum):
    """에러 카테고리"""

    FATAL = "fatal"  # 시작 시 설정 파일 없음/파싱 실패, 잘못된 로그 레벨
    RECOVERABLE = "recoverable"  # 리로드 실패 (이전 설정 유지)
    STORE_UNAVAILABLE = "store_unavailable"  # Redis 연결 불가 / 쓰기 실패
    UNKNOWN = "unknown"


class ConfigSyncError(Exception):
    """설정 동기화 기본 에러"""

    def __init__(
        self, message: str, category: ErrorCategory = ErrorCategory.UNKNOWN
    ):
        super().__init__(message)
        self.category = category


class ConfigLoadError(ConfigSyncError):
    """설정 파일 로드 실패

    시작 시에는 치명적, 리로드 시에는 복구 가능.
    """

    def __init__(
        self, message: str, category: ErrorCategory = ErrorCategory.FATAL
    ):
        super().__init__(message, category)


class StoreUnavailableError(ConfigSyncError):
    """키-값 저장소 연결 불가"""

    def __init__(self, message: str = "Redis ping failed"):
        super().__init__(message, ErrorCategory.STORE_UNAVAILABLE)


class PublishError(ConfigSyncError):
    """일부 키 기록 실패

    나머지 키는 기록된 상태로 발생합니다.
    """

    def __init__(self, failed_keys: list[str], written: int):
        super().__init__(
            f"Failed to write {len(failed_keys)} key(s): {', '.join(failed_keys)}",
            ErrorCategory.STORE_UNAVAILABLE,
        )
        self.failed_keys = failed_keys
        self.written = written


class ErrorClassifier:
    """에러 분류기"""

    @classmethod
    def classify(cls, error: Exception) -> ErrorCategory:
        """에러를 분류하여 카테고리 반환

        ConfigSyncError 계열만 카테고리를 가지며 나머지는 UNKNOWN.
        """
        if isinstance(error, ConfigSyncError):
            return error.category
        return ErrorCategory.UNKNOWN

    @classmethod
    def format_message(
        cls, error: Exception, include_traceback: bool = False
    ) -> str:
        """에러 메시지 포맷팅

        Args:
            error: 포맷팅할 예외 객체
            include_traceback: 상세 스택 트레이스 포함 여부

        Returns:
            str: 카테고리 라벨이 포함된 에러 메시지
        """
        category = cls.classify(error)
        label = {
            ErrorCategory.FATAL: "[치명적]",
            ErrorCategory.RECOVERABLE: "[복구 가능]",
            ErrorCategory.STORE_UNAVAILABLE: "[저장소 연결 불가]",
            ErrorCategory.UNKNOWN: "[분류되지 않음]",
        }

        message = f"{label[category]} {type(error).__name__}: {str(error)}"

        if include_traceback:
            import traceback

            message += f"\n\n상세 정보:\n{traceback.format_exc()}"

        return message
