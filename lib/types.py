"""
공용 타입 정의

설정 키 타입 Enum과 문서 값 → 타입 값 변환 규칙.
"""

import math
import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any

# strconv.ParseBool 호환 문자열
TRUE_STRINGS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
FALSE_STRINGS = frozenset({"0", "f", "F", "FALSE", "false", "False"})

# "3.0" → "3", "010" → 8진수 (strconv.ParseInt base 0 호환)
_ZERO_DECIMAL_PATTERN = re.compile(r"^([+-]?\d+)\.0+$")
_OCTAL_PATTERN = re.compile(r"^[+-]?0[0-7]+$")


class KeyType(str, Enum):
    """설정 키 타입"""

    STRING = "string"
    INT = "int"
    BOOL = "bool"
    STRING_LIST = "string_list"

    @property
    def zero_value(self) -> Any:
        """타입별 기본값 (키 없음 / 변환 실패 시)"""
        if self is KeyType.STRING_LIST:
            return []
        return {KeyType.STRING: "", KeyType.INT: 0, KeyType.BOOL: False}[self]


class StoreState(str, Enum):
    """키-값 저장소 연결 상태"""

    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


@dataclass(frozen=True)
class KeySpec:
    """발행 대상 키 정의"""

    path: str
    key_type: KeyType
    default: Any = None

    @property
    def default_value(self) -> Any:
        """문서에 키가 없을 때 사용할 값"""
        if self.default is None:
            return self.key_type.zero_value
        return coerce(self.key_type, self.default)


def to_string(value: Any) -> str:
    """문서 값 → 문자열"""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    # YAML 타임스탬프 → ISO 8601
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return ""


def to_int(value: Any) -> int:
    """문서 값 → 정수 (실패 시 0)"""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        # .inf / .nan
        return int(value) if math.isfinite(value) else 0
    if isinstance(value, str):
        return _parse_int(value)
    return 0


def _parse_int(text: str) -> int:
    """정수 문자열 파싱 (0x / 0o / 0b 접두사, 앞자리 0은 8진수)"""
    text = _ZERO_DECIMAL_PATTERN.sub(r"\1", text.strip())
    if _OCTAL_PATTERN.match(text):
        return int(text, 8)
    try:
        return int(text, 0)
    except ValueError:
        return 0


def to_bool(value: Any) -> bool:
    """문서 값 → 불리언 (실패 시 False)"""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return value.strip() in TRUE_STRINGS
    return False


def to_string_list(value: Any) -> list[str]:
    """문서 값 → 문자열 리스트

    리스트는 항목별 문자열 변환, 문자열은 공백 기준 분리.
    """
    if isinstance(value, (list, tuple)):
        return [to_string(item) for item in value if item is not None]
    if isinstance(value, str):
        return value.split()
    return []


_COERCERS = {
    KeyType.STRING: to_string,
    KeyType.INT: to_int,
    KeyType.BOOL: to_bool,
    KeyType.STRING_LIST: to_string_list,
}


def coerce(key_type: KeyType, value: Any) -> Any:
    """키 타입에 맞게 값 변환"""
    return _COERCERS[key_type](value)


def encode_scalar(key_type: KeyType, value: Any) -> str:
    """스칼라 값 → 저장소 문자열

    bool은 별도 타입 없이 "1" / "0"으로 저장.
    """
    if key_type is KeyType.BOOL:
        return "1" if to_bool(value) else "0"
    if key_type is KeyType.INT:
        return str(to_int(value))
    if key_type is KeyType.STRING:
        return to_string(value)
    raise ValueError(f"스칼라 타입이 아님: {key_type.value}")
