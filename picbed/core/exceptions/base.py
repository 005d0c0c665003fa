"""
Base Exception Classes
기본 예외 클래스
"""

from typing import Optional, Dict, Any


class AppException(Exception):
    """
    애플리케이션 기본 예외

    모든 커스텀 예외의 베이스 클래스
    """

    def __init__(
        self,
        error_code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Args:
            error_code: 에러 코드 (예: STG_001)
            message: 사용자 친화적 에러 메시지
            details: 추가 에러 정보 (선택사항)
        """
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"error_code={self.error_code!r}, "
            f"message={self.message!r})"
        )


class ConfigurationException(AppException):
    """
    설정 오류 예외

    저장소 설정이 누락되었거나 잘못된 경우 발생 (어댑터 생성 시점)
    """

    def __init__(
        self, error_code: str, message: str, details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(error_code=error_code, message=message, details=details)


class ExternalServiceException(AppException):
    """
    외부 서비스 예외

    원격 저장소 호출이 실패한 경우 발생
    """

    def __init__(
        self, error_code: str, message: str, details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(error_code=error_code, message=message, details=details)
