"""
Storage Service Interface
파일 저장소 추상화 계층
"""

import asyncio
from abc import ABC, abstractmethod
from functools import partial
from typing import TYPE_CHECKING, Any, Callable, Iterable, List, NoReturn, Optional

from ...core.logging import get_logger
from ...features.upload.schemas import (
    ConnectionTestResult,
    ObjectInfo,
    UploadableFile,
    UploadResult,
)
from .exceptions import StorageOperationException

if TYPE_CHECKING:
    from ...features.upload.file_manager import FileManager

logger = get_logger(__name__)

MSG_UNKNOWN_ERROR = "알 수 없는 오류"
MSG_CONNECTION_OK = "연결 성공"
MSG_CONNECTION_FAILED = "연결 실패"


class AbstractStorageService(ABC):
    """
    스토리지 서비스 추상 클래스

    S3, OSS, COS, Telegram 등 다양한 스토리지 백엔드를 지원하기 위한 인터페이스.
    모든 구현체는 전송 계층 예외를 그대로 흘려보내지 않고
    `_handle_error` 를 통해 하나의 사용자 메시지로 정규화해야 한다.
    """

    def __init__(self, file_manager: "FileManager"):
        """
        Args:
            file_manager: 업로드 경로(key)를 생성하는 파일 관리자
        """
        self.file_manager = file_manager

    @abstractmethod
    async def upload(self, file: UploadableFile) -> UploadResult:
        """
        파일 업로드

        Args:
            file: 업로드할 파일

        Returns:
            UploadResult: 접근 URL과 객체 키

        Raises:
            StorageOperationException: 전송 또는 백엔드 오류
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """
        파일 삭제 (존재하지 않는 키도 실패하지 않음)

        Args:
            key: 객체 키
        """
        pass

    @abstractmethod
    async def list_objects(self, prefix: str = "") -> List[ObjectInfo]:
        """
        파일 목록 조회

        Args:
            prefix: 키 접두사 (빈 문자열이면 전체)

        Returns:
            List[ObjectInfo]: 최종 수정 시각 내림차순
        """
        pass

    @abstractmethod
    async def test_connection(self) -> ConnectionTestResult:
        """
        연결 테스트 (데이터 업로드 없이 자격 증명/접근 가능 여부 확인)

        Returns:
            ConnectionTestResult: 성공 여부와 메시지
        """
        pass

    # ==================== Shared Helpers ====================

    def _parse_error(self, error: BaseException) -> str:
        """오류를 사용자 메시지로 변환 (백엔드별로 재정의)"""
        return str(error) or MSG_UNKNOWN_ERROR

    def _handle_error(self, error: BaseException, operation: str) -> NoReturn:
        """
        오류를 정규화하여 다시 발생

        Args:
            error: 원본 예외
            operation: 작업 이름 (예: "업로드")

        Raises:
            StorageOperationException: 항상
        """
        if isinstance(error, StorageOperationException):
            raise error

        message = f"{operation} 실패: {self._parse_error(error)}"
        logger.error(
            "storage.operation.failed",
            storage=self.__class__.__name__,
            operation=operation,
            reason=message,
        )
        raise StorageOperationException(message, operation=operation) from error

    def _format_test_result(
        self, ok: bool, message: Optional[str] = None
    ) -> ConnectionTestResult:
        """연결 테스트 결과 형식 통일"""
        return ConnectionTestResult(
            ok=ok,
            message=message or (MSG_CONNECTION_OK if ok else MSG_CONNECTION_FAILED),
        )

    @staticmethod
    async def _run_blocking(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """동기 SDK 호출을 기본 executor 에서 실행"""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, *args, **kwargs))

    @staticmethod
    def _sort_and_filter(objects: Iterable[ObjectInfo], prefix: str = "") -> List[ObjectInfo]:
        """접두사로 필터링하고 최종 수정 시각 내림차순 정렬"""
        filtered = [o for o in objects if not prefix or o.key.startswith(prefix)]
        return sorted(filtered, key=lambda o: o.last_modified, reverse=True)
