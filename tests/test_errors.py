"""
에러 분류 시스템 테스트

설정 동기화 실패 분류 테스트.
"""

from redis.exceptions import ConnectionError as RedisConnectionError

from lib.errors import (
    ConfigLoadError,
    ConfigSyncError,
    ErrorCategory,
    ErrorClassifier,
    PublishError,
    StoreUnavailableError,
)


class TestErrorClassifier:
    """에러 분류기 테스트"""

    def test_classify_config_load_error(self):
        """ConfigLoadError는 기본 치명적"""
        error = ConfigLoadError("Config file not found")
        assert ErrorClassifier.classify(error) == ErrorCategory.FATAL

    def test_classify_config_load_error_recoverable(self):
        error = ConfigLoadError("Malformed config", ErrorCategory.RECOVERABLE)
        assert ErrorClassifier.classify(error) == ErrorCategory.RECOVERABLE

    def test_classify_store_unavailable(self):
        error = StoreUnavailableError()
        assert ErrorClassifier.classify(error) == ErrorCategory.STORE_UNAVAILABLE

    def test_classify_publish_error(self):
        error = PublishError(["jaeger.uri"], written=25)
        assert ErrorClassifier.classify(error) == ErrorCategory.STORE_UNAVAILABLE

    def test_classify_retagged_reload_error(self):
        """리로드 중 실패는 복구 가능으로 재분류"""
        error = ConfigLoadError("Malformed config file")
        error.category = ErrorCategory.RECOVERABLE
        assert ErrorClassifier.classify(error) == ErrorCategory.RECOVERABLE

    def test_classify_foreign_exceptions_unknown(self):
        """카테고리가 없는 예외는 메시지와 무관하게 UNKNOWN"""
        assert ErrorClassifier.classify(
            RedisConnectionError("Connection refused")
        ) == ErrorCategory.UNKNOWN
        assert ErrorClassifier.classify(
            FileNotFoundError("twitch-bot.yaml not found")
        ) == ErrorCategory.UNKNOWN
        assert ErrorClassifier.classify(Exception("odd")) == ErrorCategory.UNKNOWN


class TestErrorFormatting:
    """에러 메시지 포맷 테스트"""

    def test_format_fatal(self):
        message = ErrorClassifier.format_message(ConfigLoadError("Config file not found"))

        assert message.startswith("[치명적] ConfigLoadError:")
        assert "Config file not found" in message

    def test_format_store_unavailable(self):
        message = ErrorClassifier.format_message(StoreUnavailableError())
        assert message == "[저장소 연결 불가] StoreUnavailableError: Redis ping failed"

    def test_format_unknown(self):
        message = ErrorClassifier.format_message(Exception("odd"))
        assert message.startswith("[분류되지 않음]")

    def test_format_with_traceback(self):
        try:
            raise ConfigLoadError("broken")
        except ConfigLoadError as e:
            message = ErrorClassifier.format_message(e, include_traceback=True)

        assert "상세 정보" in message
        assert "Traceback" in message


class TestConfigSyncError:
    """예외 클래스 테스트"""

    def test_default_category(self):
        assert ConfigSyncError("x").category == ErrorCategory.UNKNOWN

    def test_subclasses(self):
        assert issubclass(ConfigLoadError, ConfigSyncError)
        assert issubclass(StoreUnavailableError, ConfigSyncError)
        assert issubclass(PublishError, ConfigSyncError)

    def test_publish_error_lists_failed_keys(self):
        error = PublishError(["jaeger.uri", "irc.ssl"], written=24)

        assert error.failed_keys == ["jaeger.uri", "irc.ssl"]
        assert error.written == 24
        assert "jaeger.uri, irc.ssl" in str(error)
