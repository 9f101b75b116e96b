"""
캐시 값 직렬화 모듈

저장소는 값을 불투명한 바이트로만 다루며, 인코딩/디코딩은
이 모듈의 Serializer 구현체에 위임합니다.

기본 구현(JSONSerializer) 규칙:
    - bytes/bytearray/memoryview: 원본 바이트 그대로 저장
    - 그 외: pydantic-core로 JSON 인코딩 (한글 등 유니코드 그대로 유지)
    - 정수는 10진수 텍스트가 되므로 increment/decrement와 호환됨
    - 디코딩 시 out_type이 주어지면 pydantic TypeAdapter로 검증
"""

from functools import lru_cache
from typing import Any, Optional, Protocol

from pydantic import TypeAdapter
from pydantic_core import PydanticSerializationError, from_json, to_json

from kvcache.exceptions import DeserializationError, SerializationError


class Serializer(Protocol):
    """값 <-> 바이트 변환 인터페이스"""

    def serialize(self, value: Any) -> bytes: ...

    def deserialize(self, data: bytes, out_type: Optional[Any] = None) -> Any: ...


@lru_cache(maxsize=128)
def _adapter(out_type: Any) -> TypeAdapter:
    return TypeAdapter(out_type)


def _type_name(tp: Any) -> str:
    return getattr(tp, "__name__", None) or repr(tp)


class JSONSerializer:
    """
    JSON 기반 기본 직렬화기

    사용 예시:
        ```python
        serializer = JSONSerializer()
        data = serializer.serialize({"name": "홍길동"})
        user = serializer.deserialize(data, UserModel)
        ```
    """

    def serialize(self, value: Any) -> bytes:
        if isinstance(value, (bytes, bytearray, memoryview)):
            return bytes(value)

        try:
            return to_json(value)
        except (PydanticSerializationError, ValueError, TypeError) as e:
            raise SerializationError(
                f"값을 직렬화할 수 없습니다: {e}",
                value_type=type(value).__name__,
            ) from e

    def deserialize(self, data: bytes, out_type: Optional[Any] = None) -> Any:
        """
        바이트를 값으로 복원

        Args:
            data: 저장소에서 읽은 원본 바이트
            out_type: 기대하는 파이썬 타입 (None이면 JSON 값 그대로 반환)
                bytes를 지정하면 디코딩 없이 원본 반환

        Raises:
            DeserializationError: JSON 파싱 또는 타입 검증 실패
        """
        if out_type is bytes:
            return bytes(data)

        try:
            if out_type is None:
                return from_json(data)
            return _adapter(out_type).validate_json(data)
        except ValueError as e:
            # pydantic.ValidationError도 ValueError의 하위 클래스
            raise DeserializationError(
                f"저장된 값을 역직렬화할 수 없습니다: {e}",
                out_type=_type_name(out_type) if out_type is not None else None,
            ) from e
