"""
Core Configuration Module
환경변수 및 애플리케이션 설정 중앙 관리
"""

from typing import FrozenSet
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """애플리케이션 설정 (Pydantic Settings v2)"""

    # ==================== Application ====================
    app_title: str = "picbed"
    app_version: str = "1.0.0"
    app_env: str = Field(default="dev", env="APP_ENV")
    debug: bool = Field(default=False, env="DEBUG")
    log_level: str = Field(default="INFO", env="LOG_LEVEL")
    log_json_format: bool = Field(default=False, env="LOG_JSON_FORMAT")

    # ==================== Upload Defaults ====================
    upload_path: str = Field(default="images/{year}/{month}/{day}", env="UPLOAD_PATH")
    name_rule: str = Field(default="original", env="NAME_RULE")
    max_file_size: float = Field(
        default=10.0,
        env="MAX_FILE_SIZE",
        description="Maximum accepted upload size in MB",
    )
    allowed_types_str: str = Field(
        default=(
            "image/jpeg,image/png,image/gif,image/webp,image/svg+xml,image/x-icon,"
            "image/bmp,video/mp4,video/webm,audio/mpeg,audio/ogg,application/pdf"
        ),
        validation_alias=AliasChoices("ALLOWED_TYPES", "allowed_types_str"),
    )

    @property
    def allowed_types(self) -> FrozenSet[str]:
        """허용 MIME 타입을 쉼표로 분리하여 집합으로 반환"""
        return frozenset(t.strip() for t in self.allowed_types_str.split(",") if t.strip())

    # ==================== Storage ====================
    index_store_path: str = Field(default="data/index", env="INDEX_STORE_PATH")
    telegram_api_domain: str = Field(default="api.telegram.org", env="TELEGRAM_API_DOMAIN")

    # ==================== HTTP Client ====================
    http_timeout: float = Field(default=60.0, env="HTTP_TIMEOUT")
    http_read_timeout: float = Field(default=300.0, env="HTTP_READ_TIMEOUT")

    # ==================== Pydantic Config ====================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==================== Validators ====================
    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        """APP_ENV 값 검증"""
        allowed_envs = ["dev", "prod", "test"]
        if v not in allowed_envs:
            raise ValueError(f"APP_ENV must be one of {allowed_envs}")
        return v

    @field_validator("name_rule")
    @classmethod
    def validate_name_rule(cls, v: str) -> str:
        """NAME_RULE 값 검증"""
        allowed_rules = ["original", "timestamp", "random"]
        if v not in allowed_rules:
            raise ValueError(f"NAME_RULE must be one of {allowed_rules}")
        return v

    @field_validator("max_file_size")
    @classmethod
    def validate_max_file_size(cls, v: float) -> float:
        """MAX_FILE_SIZE 양수 검증"""
        if v <= 0:
            raise ValueError("MAX_FILE_SIZE must be positive")
        return v


# 싱글톤 인스턴스
settings = Settings()
