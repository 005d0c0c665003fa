"""
COS Storage Service
텐센트 클라우드 COS를 사용하는 스토리지 서비스 구현체
"""

from typing import List

from qcloud_cos import CosConfig, CosS3Client
from qcloud_cos.cos_exception import CosClientError, CosServiceError

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
    "InvalidAccessKeyId": "SecretId가 올바르지 않습니다",
    "SignatureDoesNotMatch": "SecretKey가 올바르지 않습니다",
    "NoSuchBucket": "버킷이 존재하지 않습니다",
    "AccessDenied": "접근 권한이 없습니다",
}
MSG_NETWORK_ERROR = "COS에 연결할 수 없습니다. Region 또는 네트워크를 확인하세요"


class COSStorageService(AbstractStorageService):
    """텐센트 클라우드 COS 스토리지 서비스"""

    def __init__(
        self,
        file_manager,
        region: str,
        bucket: str,
        secret_id: str,
        secret_key: str,
    ):
        """
        Args:
            file_manager: 업로드 경로 생성용 파일 관리자
            region: 리전 (예: ap-guangzhou)
            bucket: 버킷 이름 (BucketName-APPID)
            secret_id: SecretId
            secret_key: SecretKey
        """
        super().__init__(file_manager)
        self.region_name = region
        self.bucket_name = bucket

        config = CosConfig(
            Region=self.region_name,
            SecretId=secret_id,
            SecretKey=secret_key,
            Scheme="https",
        )
        self.cos_client = CosS3Client(config)
        self.base_url = f"https://{self.bucket_name}.cos.{self.region_name}.myqcloud.com"

    def get_url(self, key: str) -> str:
        """객체 공개 URL"""
        return f"{self.base_url}/{key.lstrip('/')}"

    async def upload(self, file: UploadableFile) -> UploadResult:
        """COS 업로드"""
        key = self.file_manager.generate_path(file.name)

        try:
            response = await self._run_blocking(
                self.cos_client.put_object,
                Bucket=self.bucket_name,
                Body=file.content,
                Key=key,
                ContentType=file.mime_type or "application/octet-stream",
            )
        except (CosServiceError, CosClientError) as e:
            self._handle_error(e, "업로드")

        logger.info("storage.upload.succeeded", storage="cos", key=key)
        return UploadResult(url=self.get_url(key), key=key, etag=(response or {}).get("ETag"))

    async def delete(self, key: str) -> None:
        """COS 객체 삭제 (없는 키도 성공으로 응답됨)"""
        try:
            await self._run_blocking(
                self.cos_client.delete_object, Bucket=self.bucket_name, Key=key
            )
        except CosServiceError as e:
            if e.get_error_code() == "NoSuchKey":
                logger.debug("storage.delete.missing_key", storage="cos", key=key)
                return
            self._handle_error(e, "삭제")
        except CosClientError as e:
            self._handle_error(e, "삭제")

    async def list_objects(self, prefix: str = "") -> List[ObjectInfo]:
        """파일 목록 조회 (Marker 기반 페이지네이션)"""

        def _collect() -> List[ObjectInfo]:
            objects = []
            marker = ""
            while True:
                response = self.cos_client.list_objects(
                    Bucket=self.bucket_name, Prefix=prefix, Marker=marker, MaxKeys=1000
                )
                for item in response.get("Contents", []):
                    objects.append(
                        ObjectInfo(
                            key=item["Key"],
                            url=self.get_url(item["Key"]),
                            last_modified=item["LastModified"],
                            size=int(item.get("Size", 0)),
                        )
                    )
                if response.get("IsTruncated") != "true":
                    break
                marker = response.get("NextMarker") or (objects[-1].key if objects else "")
                if not marker:
                    break
            return objects

        try:
            objects = await self._run_blocking(_collect)
        except (CosServiceError, CosClientError) as e:
            self._handle_error(e, "목록 조회")

        return self._sort_and_filter(objects, prefix)

    async def test_connection(self) -> ConnectionTestResult:
        """버킷 접근 가능 여부 확인"""
        try:
            await self._run_blocking(self.cos_client.head_bucket, Bucket=self.bucket_name)
            return self._format_test_result(True)
        except (CosServiceError, CosClientError) as e:
            logger.warning("storage.connection_test.failed", storage="cos", error=str(e))
            return self._format_test_result(False, self._parse_error(e))

    def _parse_error(self, error: BaseException) -> str:
        if isinstance(error, CosClientError):
            return MSG_NETWORK_ERROR
        if isinstance(error, CosServiceError):
            code = error.get_error_code()
            if code in ERROR_MESSAGES:
                return ERROR_MESSAGES[code]
            if error.get_error_msg():
                return f"{code}: {error.get_error_msg()}"
        return super()._parse_error(error)
