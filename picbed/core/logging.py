"""
Core Logging Configuration
structlog 기반의 구조화된 로깅 설정

패키지 모듈은 `get_logger(__name__)` 로 로거를 얻고
이벤트 이름 + key=value 필드 형태로 기록한다.
    logger.info("storage.upload.succeeded", storage="s3", key=key)

configure_logging() 을 호출하지 않은 경우 structlog 기본 설정(콘솔 출력)을 따른다.
"""

import logging
import sys
from typing import Any, Optional

import structlog

from picbed.core.config import settings

# 요청 단위 디버그 로그가 많은 HTTP/클라우드 SDK 로거
SDK_LOGGERS = ("httpx", "httpcore", "urllib3", "botocore", "boto3", "oss2", "qcloud_cos")


def configure_logging(log_level: Optional[str] = None, json_format: Optional[bool] = None) -> None:
    """
    structlog 및 표준 로깅 설정

    structlog 이벤트와 SDK 의 표준 logging 레코드를 같은 포맷터로 렌더링한다.

    Args:
        log_level: 로그 레벨 (None이면 settings.log_level)
        json_format: JSON 출력 여부 (None이면 settings.log_json_format)
    """
    level = (log_level or settings.log_level).upper()
    use_json = settings.log_json_format if json_format is None else json_format

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    if use_json:
        renderers = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        renderers = [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *renderers],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(level)

    for name in SDK_LOGGERS:
        sdk_logger = logging.getLogger(name)
        sdk_logger.handlers = []
        sdk_logger.propagate = True
        sdk_logger.setLevel(logging.WARNING)


def get_logger(name: Optional[str] = None) -> Any:
    """구조화된 로거 반환"""
    return structlog.get_logger(name)
