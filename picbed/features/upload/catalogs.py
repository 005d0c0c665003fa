"""
Upload Catalogs
저장소 서비스, 파일명 규칙, 출력 형식 등 정적 카탈로그와 저장소 설정 검증
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

from ...core.config import settings
from .schemas import NameRule, StorageType, ValidationResult


@dataclass(frozen=True)
class StorageField:
    """저장소 설정 입력 항목"""

    key: str
    label: str
    required: bool = False
    secret: bool = False
    placeholder: str = ""


@dataclass(frozen=True)
class StorageService:
    """저장소 서비스 정의"""

    type: StorageType
    label: str
    description: str
    fields: Tuple[StorageField, ...]

    @property
    def required_fields(self) -> Tuple[str, ...]:
        return tuple(f.key for f in self.fields if f.required)


# ==================== Storage Services ====================

STORAGE_SERVICES: Mapping[StorageType, StorageService] = MappingProxyType({
    StorageType.S3: StorageService(
        type=StorageType.S3,
        label="S3 호환 스토리지",
        description="AWS S3 및 S3 호환 스토리지 서비스",
        fields=(
            StorageField("endpoint", "Endpoint", placeholder="S3 호환 서비스를 사용할 때 입력"),
            StorageField("region", "Region", required=True, placeholder="예: us-east-1"),
            StorageField("bucket", "Bucket", required=True, placeholder="버킷 이름"),
            StorageField("access_key", "AccessKey", required=True, placeholder="Access Key ID"),
            StorageField("secret_key", "SecretKey", required=True, secret=True, placeholder="Secret Access Key"),
        ),
    ),
    StorageType.OSS: StorageService(
        type=StorageType.OSS,
        label="Aliyun OSS",
        description="알리바바 클라우드 OSS 객체 스토리지",
        fields=(
            StorageField("endpoint", "Endpoint", required=True, placeholder="예: oss-cn-beijing.aliyuncs.com"),
            StorageField("bucket", "Bucket", required=True, placeholder="버킷 이름"),
            StorageField("access_key", "AccessKey", required=True, placeholder="AccessKey ID"),
            StorageField("secret_key", "SecretKey", required=True, secret=True, placeholder="AccessKey Secret"),
        ),
    ),
    StorageType.COS: StorageService(
        type=StorageType.COS,
        label="Tencent COS",
        description="텐센트 클라우드 COS 객체 스토리지",
        fields=(
            StorageField("region", "Region", required=True, placeholder="예: ap-guangzhou"),
            StorageField("bucket", "Bucket", required=True, placeholder="버킷 이름 (appid 포함)"),
            StorageField("secret_id", "Secret ID", required=True, placeholder="SecretId"),
            StorageField("secret_key", "SecretKey", required=True, secret=True, placeholder="SecretKey"),
        ),
    ),
    StorageType.TELEGRAM: StorageService(
        type=StorageType.TELEGRAM,
        label="Telegram",
        description="Telegram Bot을 저장소 백엔드로 사용",
        fields=(
            StorageField("bot_token", "Bot Token", required=True, secret=True, placeholder="@BotFather에서 발급받은 토큰"),
            StorageField("chat_id", "Chat ID", required=True, placeholder="채널 또는 그룹 ID, 예: -1001234567890"),
            StorageField("proxy_url", "API 프록시 도메인", placeholder="선택: api.telegram.org 리버스 프록시"),
            StorageField("custom_domain", "사용자 지정 접근 도메인", placeholder="선택: 이미지 표시용 도메인"),
        ),
    ),
})

# ==================== Name Rules / Formats ====================

NAME_RULES: Mapping[NameRule, str] = MappingProxyType({
    NameRule.ORIGINAL: "원본 파일명",
    NameRule.TIMESTAMP: "타임스탬프",
    NameRule.RANDOM: "랜덤 문자열",
})

OUTPUT_FORMATS: Mapping[str, str] = MappingProxyType({
    "original": "원본 형식 유지",
    "jpeg": "JPEG",
    "png": "PNG",
    "webp": "WEBP",
})

COMPRESSION_LEVELS: Mapping[str, float] = MappingProxyType({
    "high": 0.6,
    "medium": 0.8,
    "low": 0.9,
    "none": 1.0,
})

DEFAULT_IMAGE_SETTINGS: Mapping[str, Any] = MappingProxyType({
    "enabled": True,
    "quality": COMPRESSION_LEVELS["medium"],
    "max_width": 1920,
    "max_height": 1920,
    "format": "original",
})

DEFAULT_SETTINGS: Mapping[str, Any] = MappingProxyType({
    "upload_path": settings.upload_path,
    "name_rule": NameRule(settings.name_rule),
    "allowed_types": settings.allowed_types,
    "max_file_size": settings.max_file_size,
    "image": DEFAULT_IMAGE_SETTINGS,
})

# ==================== Config Validation ====================

MSG_INVALID_TYPE = "유효하지 않은 저장소 유형입니다"
MSG_EMPTY_CONFIG = "설정이 비어 있습니다"
MSG_INCOMPLETE_CONFIG = "필수 항목을 모두 입력하거나 모든 설정을 비워 주세요"
MSG_VALID_CONFIG = "검증 통과"


def _resolve_type(storage_type: Any) -> Optional[StorageType]:
    try:
        return StorageType(storage_type)
    except ValueError:
        return None


def get_required_fields(storage_type: Any) -> Tuple[str, ...]:
    """저장소 유형의 필수 항목 키 목록 (알 수 없는 유형이면 빈 튜플)"""
    resolved = _resolve_type(storage_type)
    if resolved is None:
        return ()
    return STORAGE_SERVICES[resolved].required_fields


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    return not str(value).strip()


def validate_storage_config(
    storage_type: Any, config: Optional[Mapping[str, Any]]
) -> ValidationResult:
    """
    저장소 설정 검증

    - 알 수 없는 유형: 무효
    - 설정이 비어 있거나 필수 항목이 모두 비어 있음: 유효 (아직 설정하지 않음)
    - 필수 항목 일부만 입력: 무효
    - 필수 항목 모두 입력: 유효

    Args:
        storage_type: 저장소 유형 태그
        config: 저장소 설정 (키-값)

    Returns:
        ValidationResult: 검증 결과
    """
    if _resolve_type(storage_type) is None:
        return ValidationResult(is_valid=False, message=MSG_INVALID_TYPE)

    if not config:
        return ValidationResult(is_valid=True, message=MSG_EMPTY_CONFIG)

    required = get_required_fields(storage_type)
    missing = [key for key in required if is_blank(config.get(key))]

    if len(missing) == len(required):
        return ValidationResult(is_valid=True, message=MSG_EMPTY_CONFIG)

    if missing:
        return ValidationResult(is_valid=False, message=MSG_INCOMPLETE_CONFIG)

    return ValidationResult(is_valid=True, message=MSG_VALID_CONFIG)
