"""
File Manager
업로드 파일 검증, 경로 생성, 저장소 인스턴스 생성
"""

import re
import secrets
import string
from datetime import datetime
from types import MappingProxyType
from typing import Any, Mapping, Optional, Type, Union

from ...core.logging import get_logger
from ...infrastructure.storage.base import AbstractStorageService
from ...infrastructure.storage.cos import COSStorageService
from ...infrastructure.storage.exceptions import (
    StorageConfigurationException,
    UnsupportedStorageTypeException,
)
from ...infrastructure.storage.oss import OSSStorageService
from ...infrastructure.storage.s3 import S3StorageService
from ...infrastructure.storage.telegram import TelegramStorageService
from .catalogs import (
    DEFAULT_SETTINGS,
    NAME_RULES,
    OUTPUT_FORMATS,
    STORAGE_SERVICES,
    get_required_fields,
    is_blank,
    validate_storage_config,
)
from .image_compressor import ImageCompressor
from .schemas import (
    ManagerConfig,
    NameRule,
    ProcessResult,
    StorageType,
    UploadableFile,
    ValidationResult,
)

logger = get_logger(__name__)

# 저장소 유형 -> 어댑터 클래스
STORAGE_CLASSES: Mapping[StorageType, Type[AbstractStorageService]] = MappingProxyType({
    StorageType.S3: S3StorageService,
    StorageType.OSS: OSSStorageService,
    StorageType.COS: COSStorageService,
    StorageType.TELEGRAM: TelegramStorageService,
})

MSG_UNSUPPORTED_FORMAT = "지원하지 않는 파일 형식입니다"
MSG_NOT_CONFIGURED = "저장소가 아직 설정되지 않았습니다"
MSG_COMPRESSION_FAILED = "이미지 압축에 실패했습니다"

RANDOM_NAME_ALPHABET = string.ascii_lowercase + string.digits
RANDOM_NAME_LENGTH = 8


class FileManager:
    """
    파일 관리자

    업로드 전 파일 검증/압축, 업로드 경로 생성, 설정된 저장소 어댑터 생성을 담당한다.
    """

    def __init__(
        self,
        config: Optional[Union[ManagerConfig, Mapping[str, Any]]] = None,
        compressor: Optional[ImageCompressor] = None,
    ):
        """
        Args:
            config: 파일 관리자 설정 (비어 있는 항목은 기본값 사용)
            compressor: 이미지 압축기 (None이면 config.image 옵션으로 생성)
        """
        self.config = self._build_config(config)
        self.compressor = compressor or ImageCompressor(self.config.image)

    @staticmethod
    def _build_config(
        config: Optional[Union[ManagerConfig, Mapping[str, Any]]]
    ) -> ManagerConfig:
        if isinstance(config, ManagerConfig):
            return config

        merged = dict(DEFAULT_SETTINGS)
        merged.update({k: v for k, v in (config or {}).items() if v})
        merged["image"] = {**DEFAULT_SETTINGS["image"], **(merged.get("image") or {})}
        return ManagerConfig(**merged)

    # ==================== Processing ====================

    async def process_file(self, file: UploadableFile) -> ProcessResult:
        """
        파일 검증 및 처리

        이미지 파일은 압축기를 거치고, 그 외 파일은 그대로 반환한다.
        검증/압축 실패는 예외가 아닌 error 메시지로 반환한다.

        Args:
            file: 업로드 대상 파일

        Returns:
            ProcessResult: 처리된 파일 또는 에러 메시지
        """
        validation = self.validate_file(file)
        if validation is not True:
            return ProcessResult(error=validation)

        if not file.mime_type.startswith("image/"):
            return ProcessResult(file=file)

        try:
            compressed = await self.compressor.compress(file)
        except Exception as e:
            logger.error("image.compress.failed", filename=file.name, error=str(e))
            return ProcessResult(error=str(e) or MSG_COMPRESSION_FAILED)

        return ProcessResult(file=compressed)

    def validate_file(self, file: UploadableFile) -> Union[bool, str]:
        """
        파일 검증 (크기 → 형식 순서)

        Returns:
            True 또는 에러 메시지
        """
        if file.size_bytes / 1e6 > self.config.max_file_size:
            return f"파일 크기가 제한({self.config.max_file_size:g}MB)을 초과했습니다"

        if file.mime_type not in self.config.allowed_types:
            return MSG_UNSUPPORTED_FORMAT

        return True

    # ==================== Path Generation ====================

    def generate_path(self, filename: str, now: Optional[datetime] = None) -> str:
        """
        업로드 경로 생성

        Args:
            filename: 원본 파일명
            now: 기준 시각 (None이면 현재 시각)

        Returns:
            str: 정규화된 객체 키 (예: images/2024/03/05/photo.png)
        """
        now = now or datetime.now()
        path = (
            self.config.upload_path
            .replace("{year}", str(now.year))
            .replace("{month}", f"{now.month:02d}")
            .replace("{day}", f"{now.day:02d}")
        )
        return self._normalize_path(f"{path}/{self._generate_filename(filename, now)}")

    def _generate_filename(self, original_filename: str, now: datetime) -> str:
        ext = original_filename.rsplit(".", 1)[-1].lower() if "." in original_filename else ""
        rule = self.config.name_rule

        if rule == NameRule.TIMESTAMP:
            basename = self._timestamp_name(now)
        elif rule == NameRule.RANDOM:
            basename = "".join(
                secrets.choice(RANDOM_NAME_ALPHABET) for _ in range(RANDOM_NAME_LENGTH)
            )
        else:
            basename = original_filename.split(".")[0]
            basename = re.sub(r"[^a-zA-Z0-9\-_.]", "-", basename)
            basename = re.sub(r"-+", "-", basename).strip("-")
            # 영문/숫자가 하나도 없는 이름은 타임스탬프로 대체
            basename = basename or self._timestamp_name(now)

        return f"{basename}.{ext}" if ext else basename

    @staticmethod
    def _timestamp_name(now: datetime) -> str:
        return str(int(now.timestamp() * 1000))

    @staticmethod
    def _normalize_path(path: str) -> str:
        return re.sub(r"/+", "/", path).strip("/")

    # ==================== Storage Factory ====================

    @classmethod
    def create_storage(
        cls,
        storage_type: Union[StorageType, str],
        config: Mapping[str, Any],
        **adapter_options: Any,
    ) -> AbstractStorageService:
        """
        설정된 저장소 어댑터 생성

        Args:
            storage_type: 저장소 유형 (s3, oss, cos, telegram)
            config: 전체 설정 ({"upload_path", "name_rule", "<type>": {...}})
            **adapter_options: 어댑터 생성자에 그대로 전달할 옵션
                (예: Telegram 의 index_store, transport)

        Returns:
            AbstractStorageService: 저장소 어댑터

        Raises:
            UnsupportedStorageTypeException: 알 수 없는 저장소 유형
            StorageConfigurationException: 설정 누락 또는 불완전
        """
        type_key = getattr(storage_type, "value", storage_type)
        sub_config = dict((config or {}).get(type_key) or {})

        validation = validate_storage_config(storage_type, sub_config)
        if not validation.is_valid:
            if type_key not in STORAGE_CLASSES:
                raise UnsupportedStorageTypeException(str(type_key))
            raise StorageConfigurationException(validation.message, type_key)

        stype = StorageType(storage_type)
        if any(is_blank(sub_config.get(k)) for k in get_required_fields(stype)):
            raise StorageConfigurationException(MSG_NOT_CONFIGURED, stype.value)

        file_manager = cls({
            "upload_path": config.get("upload_path"),
            "name_rule": config.get("name_rule"),
        })

        field_keys = {f.key for f in STORAGE_SERVICES[stype].fields}
        kwargs = {
            k: str(v).strip()
            for k, v in sub_config.items()
            if k in field_keys and not is_blank(v)
        }

        logger.info("storage.created", storage=stype.value)
        return STORAGE_CLASSES[stype](file_manager, **kwargs, **adapter_options)

    @staticmethod
    def validate_config(storage_type: Union[StorageType, str], config: Mapping[str, Any]) -> ValidationResult:
        """저장소 설정 검증"""
        return validate_storage_config(storage_type, config)

    @staticmethod
    def is_storage_configured(storage_type: Union[StorageType, str], config: Optional[Mapping[str, Any]]) -> bool:
        """
        저장소 설정 완료 여부

        검증을 통과하고 유형별 설정에 값이 하나 이상 있어야 한다.
        """
        if not config or not storage_type:
            return False

        type_key = getattr(storage_type, "value", storage_type)
        sub_config = config.get(type_key) or {}
        validation = validate_storage_config(storage_type, sub_config)
        return validation.is_valid and any(not is_blank(v) for v in sub_config.values())

    # ==================== Catalogs ====================

    @staticmethod
    def get_default_settings() -> Mapping[str, Any]:
        """기본 설정 (읽기 전용)"""
        return DEFAULT_SETTINGS

    @staticmethod
    def get_name_rules() -> Mapping[NameRule, str]:
        """파일명 규칙 목록 (읽기 전용)"""
        return NAME_RULES

    @staticmethod
    def get_output_formats() -> Mapping[str, str]:
        """이미지 출력 형식 목록 (읽기 전용)"""
        return OUTPUT_FORMATS

    @staticmethod
    def get_supported_storages() -> Mapping[StorageType, Any]:
        """지원 저장소 목록 (읽기 전용)"""
        return STORAGE_SERVICES
