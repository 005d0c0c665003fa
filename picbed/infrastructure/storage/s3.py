"""
S3 Storage Service
AWS S3 및 S3 호환 스토리지를 사용하는 스토리지 서비스 구현체
"""

from typing import List, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError, EndpointConnectionError

from .base import AbstractStorageService
from ...core.logging import get_logger
from ...features.upload.schemas import (
    ConnectionTestResult,
    ObjectInfo,
    UploadableFile,
    UploadResult,
)

logger = get_logger(__name__)

# S3 오류 코드 -> 사용자 메시지
ERROR_MESSAGES = {
    "InvalidAccessKeyId": "AccessKey가 올바르지 않습니다",
    "SignatureDoesNotMatch": "SecretKey가 올바르지 않습니다",
    "NoSuchBucket": "버킷이 존재하지 않습니다",
    "AccessDenied": "접근 권한이 없습니다",
    # HeadBucket 은 본문 없이 상태 코드만 반환
    "404": "버킷이 존재하지 않습니다",
    "403": "접근 권한이 없습니다",
}
MSG_NETWORK_ERROR = "엔드포인트에 연결할 수 없습니다. Endpoint 또는 네트워크를 확인하세요"


def _with_scheme(endpoint: str) -> str:
    endpoint = endpoint.strip().rstrip("/")
    if not endpoint.startswith(("http://", "https://")):
        endpoint = f"https://{endpoint}"
    return endpoint


class S3StorageService(AbstractStorageService):
    """
    S3 호환 스토리지 서비스
    """

    def __init__(
        self,
        file_manager,
        region: str,
        bucket: str,
        access_key: str,
        secret_key: str,
        endpoint: Optional[str] = None,
    ):
        """
        Args:
            file_manager: 업로드 경로 생성용 파일 관리자
            region: 리전 (예: us-east-1)
            bucket: 버킷 이름
            access_key: Access Key ID
            secret_key: Secret Access Key
            endpoint: 선택, S3 호환 서비스 엔드포인트
        """
        super().__init__(file_manager)
        self.region_name = region
        self.bucket_name = bucket
        self.endpoint_url = _with_scheme(endpoint) if endpoint else None

        self.s3_client = boto3.client(
            "s3",
            region_name=self.region_name,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            endpoint_url=self.endpoint_url,
            config=Config(signature_version="s3v4"),
        )

        if self.endpoint_url:
            # S3 호환 서비스는 path-style 주소 사용
            self.base_url = f"{self.endpoint_url}/{self.bucket_name}"
        else:
            self.base_url = f"https://{self.bucket_name}.s3.{self.region_name}.amazonaws.com"

    def get_url(self, key: str) -> str:
        """객체 공개 URL"""
        return f"{self.base_url}/{key.lstrip('/')}"

    async def upload(self, file: UploadableFile) -> UploadResult:
        """파일 S3 업로드"""
        key = self.file_manager.generate_path(file.name)

        try:
            response = await self._run_blocking(
                self.s3_client.put_object,
                Bucket=self.bucket_name,
                Key=key,
                Body=file.content,
                ContentType=file.mime_type or "application/octet-stream",
            )
        except (ClientError, BotoCoreError) as e:
            self._handle_error(e, "업로드")

        logger.info("storage.upload.succeeded", storage="s3", key=key)
        return UploadResult(url=self.get_url(key), key=key, etag=response.get("ETag"))

    async def delete(self, key: str) -> None:
        """파일 S3 삭제 (없는 키는 무시)"""
        try:
            await self._run_blocking(
                self.s3_client.delete_object, Bucket=self.bucket_name, Key=key
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                logger.debug("storage.delete.missing_key", storage="s3", key=key)
                return
            self._handle_error(e, "삭제")
        except BotoCoreError as e:
            self._handle_error(e, "삭제")

    async def list_objects(self, prefix: str = "") -> List[ObjectInfo]:
        """파일 목록 조회"""

        def _collect() -> List[ObjectInfo]:
            paginator = self.s3_client.get_paginator("list_objects_v2")
            objects = []
            for page in paginator.paginate(Bucket=self.bucket_name, Prefix=prefix):
                for item in page.get("Contents", []):
                    objects.append(
                        ObjectInfo(
                            key=item["Key"],
                            url=self.get_url(item["Key"]),
                            last_modified=item["LastModified"],
                            size=item.get("Size", 0),
                        )
                    )
            return objects

        try:
            objects = await self._run_blocking(_collect)
        except (ClientError, BotoCoreError) as e:
            self._handle_error(e, "목록 조회")

        return self._sort_and_filter(objects, prefix)

    async def test_connection(self) -> ConnectionTestResult:
        """버킷 접근 가능 여부 확인"""
        try:
            await self._run_blocking(self.s3_client.head_bucket, Bucket=self.bucket_name)
            return self._format_test_result(True)
        except (ClientError, BotoCoreError) as e:
            logger.warning("storage.connection_test.failed", storage="s3", error=str(e))
            return self._format_test_result(False, self._parse_error(e))

    def _parse_error(self, error: BaseException) -> str:
        if isinstance(error, EndpointConnectionError):
            return MSG_NETWORK_ERROR
        if isinstance(error, ClientError):
            code = error.response.get("Error", {}).get("Code", "")
            if code in ERROR_MESSAGES:
                return ERROR_MESSAGES[code]
            message = error.response.get("Error", {}).get("Message")
            if message:
                return f"{code}: {message}"
        return super()._parse_error(error)
