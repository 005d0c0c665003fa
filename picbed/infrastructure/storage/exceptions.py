"""
Storage Exceptions
저장소 계층 전용 커스텀 예외
"""

from typing import Optional

from ...core.exceptions import (
    ConfigurationException,
    ExternalServiceException,
    ErrorCode,
)


class StorageConfigurationException(ConfigurationException):
    """저장소 설정 오류"""

    def __init__(self, message: str, storage_type: Optional[str] = None):
        super().__init__(
            error_code=ErrorCode.CFG_INVALID_CONFIG,
            message=message,
            details={"storage_type": storage_type} if storage_type else None,
        )


class UnsupportedStorageTypeException(ConfigurationException):
    """지원하지 않는 저장소 유형"""

    def __init__(self, storage_type: str):
        super().__init__(
            error_code=ErrorCode.CFG_UNSUPPORTED_STORAGE,
            message="지원하지 않는 저장소 유형입니다",
            details={"storage_type": storage_type},
        )


class StorageOperationException(ExternalServiceException):
    """저장소 작업 실패 (전송/프로토콜 오류를 하나의 메시지로 정규화)"""

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(
            error_code=ErrorCode.STG_OPERATION_FAILED,
            message=message,
            details={"operation": operation} if operation else None,
        )


class StorageResponseException(ExternalServiceException):
    """저장소 응답에 기대한 필드가 없음"""

    def __init__(self, reason: str):
        super().__init__(
            error_code=ErrorCode.STG_INVALID_RESPONSE,
            message=reason,
        )
