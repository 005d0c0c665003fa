"""
Error Code Definitions
에러 코드 정의
"""

from enum import Enum


class ErrorCode(str, Enum):
    """
    애플리케이션 에러 코드

    규칙:
    - CFG_xxx: 저장소 설정 에러
    - STG_xxx: 저장소 연동 에러
    """

    # ==================== Configuration (CFG_xxx) ====================
    CFG_INVALID_CONFIG = "CFG_001"
    """저장소 설정이 유효하지 않습니다"""

    CFG_UNSUPPORTED_STORAGE = "CFG_002"
    """지원하지 않는 저장소 유형입니다"""

    # ==================== Storage (STG_xxx) ====================
    STG_OPERATION_FAILED = "STG_001"
    """저장소 작업에 실패했습니다"""

    STG_INVALID_RESPONSE = "STG_002"
    """저장소 응답을 해석할 수 없습니다"""
