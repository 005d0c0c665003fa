"""
OSS Storage Service
알리바바 클라우드 OSS를 사용하는 스토리지 서비스 구현체
"""

from datetime import datetime, timezone
from typing import List

import oss2

from .base import AbstractStorageService
from ...core.logging import get_logger
from ...features.upload.schemas import (
    ConnectionTestResult,
    ObjectInfo,
    UploadableFile,
    UploadResult,
)

logger = get_logger(__name__)

ERROR_MESSAGES = {
    "InvalidAccessKeyId": "AccessKey가 올바르지 않습니다",
    "SignatureDoesNotMatch": "SecretKey가 올바르지 않습니다",
    "NoSuchBucket": "버킷이 존재하지 않습니다",
    "AccessDenied": "접근 권한이 없습니다",
}
MSG_NETWORK_ERROR = "OSS에 연결할 수 없습니다. Endpoint 또는 네트워크를 확인하세요"


def _host(endpoint: str) -> str:
    endpoint = endpoint.strip().rstrip("/")
    for scheme in ("https://", "http://"):
        if endpoint.startswith(scheme):
            endpoint = endpoint[len(scheme):]
    return endpoint


class OSSStorageService(AbstractStorageService):
    """알리바바 클라우드 OSS 스토리지 서비스"""

    def __init__(
        self,
        file_manager,
        endpoint: str,
        bucket: str,
        access_key: str,
        secret_key: str,
    ):
        """
        Args:
            file_manager: 업로드 경로 생성용 파일 관리자
            endpoint: OSS Endpoint (예: oss-cn-beijing.aliyuncs.com)
            bucket: 버킷 이름
            access_key: AccessKey ID
            secret_key: AccessKey Secret
        """
        super().__init__(file_manager)
        self.endpoint = _host(endpoint)
        self.bucket_name = bucket

        auth = oss2.Auth(access_key, secret_key)
        self.bucket = oss2.Bucket(auth, f"https://{self.endpoint}", self.bucket_name)
        self.base_url = f"https://{self.bucket_name}.{self.endpoint}"

    def get_url(self, key: str) -> str:
        """객체 공개 URL (버킷이 공개일 때 접근 가능)"""
        return f"{self.base_url}/{key.lstrip('/')}"

    async def upload(self, file: UploadableFile) -> UploadResult:
        """OSS 업로드"""
        key = self.file_manager.generate_path(file.name)

        try:
            result = await self._run_blocking(
                self.bucket.put_object,
                key,
                file.content,
                headers={"Content-Type": file.mime_type or "application/octet-stream"},
            )
        except oss2.exceptions.OssError as e:
            self._handle_error(e, "업로드")

        logger.info("storage.upload.succeeded", storage="oss", key=key)
        return UploadResult(url=self.get_url(key), key=key, etag=getattr(result, "etag", None))

    async def delete(self, key: str) -> None:
        """OSS 객체 삭제 (없는 키도 성공으로 응답됨)"""
        try:
            await self._run_blocking(self.bucket.delete_object, key)
        except oss2.exceptions.NoSuchKey:
            logger.debug("storage.delete.missing_key", storage="oss", key=key)
        except oss2.exceptions.OssError as e:
            self._handle_error(e, "삭제")

    async def list_objects(self, prefix: str = "") -> List[ObjectInfo]:
        """파일 목록 조회"""

        def _collect() -> List[ObjectInfo]:
            return [
                ObjectInfo(
                    key=obj.key,
                    url=self.get_url(obj.key),
                    last_modified=datetime.fromtimestamp(obj.last_modified, tz=timezone.utc),
                    size=obj.size or 0,
                )
                for obj in oss2.ObjectIterator(self.bucket, prefix=prefix)
                if not obj.is_prefix()
            ]

        try:
            objects = await self._run_blocking(_collect)
        except oss2.exceptions.OssError as e:
            self._handle_error(e, "목록 조회")

        return self._sort_and_filter(objects, prefix)

    async def test_connection(self) -> ConnectionTestResult:
        """버킷 정보 조회로 연결 확인"""
        try:
            await self._run_blocking(self.bucket.get_bucket_info)
            return self._format_test_result(True)
        except oss2.exceptions.OssError as e:
            logger.warning("storage.connection_test.failed", storage="oss", error=str(e))
            return self._format_test_result(False, self._parse_error(e))

    def _parse_error(self, error: BaseException) -> str:
        if isinstance(error, oss2.exceptions.RequestError):
            return MSG_NETWORK_ERROR
        if isinstance(error, oss2.exceptions.OssError):
            if error.code in ERROR_MESSAGES:
                return ERROR_MESSAGES[error.code]
            if error.message:
                return f"{error.code}: {error.message}"
        return super()._parse_error(error)
