"""
Upload Domain Schemas
업로드 파일, 결과, 인덱스 레코드 등 도메인 모델
"""

from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, FrozenSet, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class NameRule(str, Enum):
    """파일명 생성 규칙"""

    ORIGINAL = "original"
    TIMESTAMP = "timestamp"
    RANDOM = "random"


class StorageType(str, Enum):
    """저장소 유형"""

    S3 = "s3"
    OSS = "oss"
    COS = "cos"
    TELEGRAM = "telegram"


class UploadableFile(BaseModel):
    """업로드 대상 파일 (검증 통과 후 불변)"""

    model_config = ConfigDict(frozen=True)

    content: bytes = Field(..., description="파일 바이너리", repr=False)
    name: str = Field(..., description="원본 파일명 (확장자 포함)")
    mime_type: str = Field(..., description="MIME 타입")
    size_bytes: int = Field(default=0, ge=0, description="파일 크기 (바이트)")

    @model_validator(mode="before")
    @classmethod
    def _default_size(cls, data: Any) -> Any:
        # size가 주어지지 않으면 content 길이로 채운다
        if isinstance(data, dict) and data.get("size_bytes") is None:
            data = {**data, "size_bytes": len(data.get("content") or b"")}
        return data


class ManagerConfig(BaseModel):
    """파일 관리자 설정"""

    model_config = ConfigDict(frozen=True)

    upload_path: str = Field(..., description="업로드 경로 템플릿 ({year}/{month}/{day})")
    name_rule: NameRule = Field(default=NameRule.ORIGINAL, description="파일명 규칙")
    allowed_types: FrozenSet[str] = Field(..., description="허용 MIME 타입")
    max_file_size: float = Field(..., gt=0, description="최대 파일 크기 (MB)")
    image: Mapping[str, Any] = Field(
        default_factory=dict, validate_default=True, description="이미지 압축 옵션 (읽기 전용)"
    )

    @field_validator("image", mode="after")
    @classmethod
    def _freeze_image(cls, v: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(dict(v))


class ProcessResult(BaseModel):
    """파일 처리 결과 (file 또는 error 중 하나)"""

    model_config = ConfigDict(frozen=True)

    file: Optional[UploadableFile] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class UploadResult(BaseModel):
    """업로드 결과"""

    url: str = Field(..., description="공개 접근 URL")
    key: str = Field(..., description="저장소 내 객체 키 (삭제/조회 기준)")
    file_id: Optional[str] = Field(None, description="원격 파일 ID (Telegram)")
    file_path: Optional[str] = Field(None, description="원격 파일 경로 (Telegram)")
    etag: Optional[str] = Field(None, description="객체 ETag")


class ObjectInfo(BaseModel):
    """목록 조회 항목"""

    key: str
    url: str
    last_modified: datetime
    size: int = 0


class IndexRecord(BaseModel):
    """
    로컬 인덱스 레코드 (Telegram 전용)

    저장 형식은 {key, url, fileId, filePath, lastModified, size} 이다.
    """

    model_config = ConfigDict(populate_by_name=True)

    key: str
    url: str
    file_id: str = Field(..., alias="fileId")
    file_path: str = Field(..., alias="filePath")
    last_modified: datetime = Field(..., alias="lastModified")
    size: int = 0

    def to_object_info(self) -> ObjectInfo:
        return ObjectInfo(
            key=self.key,
            url=self.url,
            last_modified=self.last_modified,
            size=self.size,
        )


class ConnectionTestResult(BaseModel):
    """연결 테스트 결과"""

    ok: bool
    message: str


class ValidationResult(BaseModel):
    """저장소 설정 검증 결과"""

    is_valid: bool
    message: str
