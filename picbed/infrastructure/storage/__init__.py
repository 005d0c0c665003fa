"""
Storage Infrastructure Module
스토리지 추상화 계층
"""

from .base import AbstractStorageService
from .cos import COSStorageService
from .exceptions import (
    StorageConfigurationException,
    StorageOperationException,
    StorageResponseException,
    UnsupportedStorageTypeException,
)
from .index_store import (
    FileKeyValueStore,
    KeyValueStore,
    LocalIndexStore,
    MemoryKeyValueStore,
)
from .oss import OSSStorageService
from .s3 import S3StorageService
from .telegram import TelegramStorageService

__all__ = [
    "AbstractStorageService",
    "S3StorageService",
    "OSSStorageService",
    "COSStorageService",
    "TelegramStorageService",
    "KeyValueStore",
    "FileKeyValueStore",
    "MemoryKeyValueStore",
    "LocalIndexStore",
    "StorageConfigurationException",
    "StorageOperationException",
    "StorageResponseException",
    "UnsupportedStorageTypeException",
]
