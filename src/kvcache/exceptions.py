"""
캐시 예외 및 에러 컨텍스트 모듈

캐시 계층에서 발생하는 모든 에러를 정의합니다.
호출자는 예외 타입으로 캐시 미스, 저장 거부, 전송 실패를 구분할 수 있습니다.

주요 구성요소:
    - ErrorCode: 에러 코드 열거형
    - CacheError: 모든 캐시 예외의 기본 클래스
    - 구체적인 예외 클래스들: 캐시 미스, 저장 거부, 직렬화, 파싱, 저장소 에러
    - ErrorHandler: 구조화된 로깅용 에러 컨텍스트 생성기

에러 전파 정책:
    - 모든 에러는 타입이 있는 예외로 호출자에게 전달됨
    - 내부 재시도나 조용한 무시 없음
    - 예외: exists()와 set_expire()는 실패 시 False 반환
"""

from typing import Any, Dict, Optional
from enum import Enum


class ErrorCode(Enum):
    """
    캐시 에러 코드 열거형

    로그와 to_dict() 결과에서 에러 종류를 식별하는 데 사용됩니다.
    """

    CACHE_MISS = "cache_miss"  # 키 없음
    NOT_STORED = "not_stored"  # 존재 조건 위반으로 저장 거부
    NOT_SUPPORTED = "not_supported"  # 백엔드가 지원하지 않는 작업
    SERIALIZATION_ERROR = "serialization_error"  # 값 인코딩 실패
    DESERIALIZATION_ERROR = "deserialization_error"  # 값 디코딩 실패
    PARSE_ERROR = "parse_error"  # 정수 형식이 아닌 저장값
    STORE_ERROR = "store_error"  # 전송/백엔드 실패


class CacheError(Exception):
    """
    모든 캐시 에러의 기본 예외 클래스

    Attributes:
        message (str): 에러 메시지
        code (ErrorCode): 에러 코드
        data (dict): 추가 에러 정보 (선택사항)
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.STORE_ERROR,
        data: Optional[Dict[str, Any]] = None,
    ):
        """
        Args:
            message: 에러 메시지
            code: 에러 코드 (기본값: STORE_ERROR)
            data: 디버깅에 유용한 추가 정보 (선택사항)
        """
        self.message = message
        self.code = code
        self.data = data or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        에러를 딕셔너리 형식으로 변환

        data 필드는 값이 있을 때만 포함됩니다.
        """
        error_dict = {"code": self.code.value, "message": self.message}
        if self.data:
            error_dict["data"] = self.data
        return error_dict


def _with_key(data: Optional[Dict[str, Any]], key: Optional[str]) -> Dict[str, Any]:
    if data is None:
        data = {}
    if key is not None:
        data["key"] = key
    return data


class CacheMissError(CacheError):
    """
    캐시 미스 에러

    요청한 키가 저장소에 존재하지 않을 때 발생합니다.
    get, delete, increment, decrement에서 사용됩니다.
    """

    def __init__(
        self,
        message: str = "cache: key not found",
        key: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message, code=ErrorCode.CACHE_MISS, data=_with_key(data, key)
        )


class NotStoredError(CacheError):
    """
    저장 거부 에러

    존재 조건을 만족하지 않아 쓰기가 거부되었을 때 발생합니다.
    (add 시 이미 존재, replace 시 없음, replace에 None 전달)
    """

    def __init__(
        self,
        message: str = "cache: not stored",
        key: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message, code=ErrorCode.NOT_STORED, data=_with_key(data, key)
        )


class UnsupportedError(CacheError):
    """백엔드가 수행할 수 없는 작업"""

    def __init__(
        self,
        message: str = "cache: not support",
        operation: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        if data is None:
            data = {}
        if operation:
            data["operation"] = operation

        super().__init__(message=message, code=ErrorCode.NOT_SUPPORTED, data=data)


class SerializationError(CacheError):
    """
    값 직렬화 실패 에러

    저장하려는 값을 바이트로 인코딩할 수 없을 때 발생합니다.
    """

    def __init__(
        self,
        message: str,
        value_type: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        if data is None:
            data = {}
        if value_type:
            data["value_type"] = value_type

        super().__init__(
            message=message, code=ErrorCode.SERIALIZATION_ERROR, data=data
        )


class DeserializationError(CacheError):
    """
    값 역직렬화 실패 에러

    저장된 바이트를 요청한 타입으로 디코딩할 수 없을 때 발생합니다.
    """

    def __init__(
        self,
        message: str,
        out_type: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        if data is None:
            data = {}
        if out_type:
            data["out_type"] = out_type

        super().__init__(
            message=message, code=ErrorCode.DESERIALIZATION_ERROR, data=data
        )


class ParseError(CacheError):
    """
    숫자 파싱 실패 에러

    increment 대상 값이 부호 있는 64비트 정수 형식이 아닐 때 발생합니다.
    """

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        value: Optional[Any] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        data = _with_key(data, key)
        if value is not None:
            # 긴 값은 100자로 잘라서 로그에 과도한 데이터 방지
            data["value"] = str(value)[:100]

        super().__init__(message=message, code=ErrorCode.PARSE_ERROR, data=data)


class StoreError(CacheError):
    """
    저장소 에러

    연결 실패, 프로토콜 에러 등 그 밖의 모든 전송/백엔드 실패를 나타냅니다.
    원본 redis 예외는 __cause__로 연결됩니다.
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        key: Optional[str] = None,
        data: Optional[Dict[str, Any]] = None,
    ):
        data = _with_key(data, key)
        if operation:
            data["operation"] = operation

        super().__init__(message=message, code=ErrorCode.STORE_ERROR, data=data)


class ErrorHandler:
    """구조화된 로깅을 위한 에러 컨텍스트 생성기"""

    @staticmethod
    def create_error_context(
        error: Exception,
        operation: Optional[str] = None,
        key: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        로깅을 위한 에러 컨텍스트 생성

        Args:
            error: 발생한 예외
            operation: 실패한 캐시 작업 (예: "get", "set")
            key: 작업 대상 키

        Returns:
            Dict[str, Any]: 에러 컨텍스트 딕셔너리
                - error_type: 예외 클래스 이름
                - error_message: 에러 메시지
                - operation, key: 제공된 경우
                - error_code, error_data: CacheError인 경우
        """
        context = {
            "error_type": type(error).__name__,
            "error_message": str(error),
        }

        if operation:
            context["operation"] = operation
        if key is not None:
            context["key"] = key

        if isinstance(error, CacheError):
            context["error_code"] = error.code.value
            context["error_data"] = error.data

        return context
