"""
Pytest Configuration and Fixtures
테스트용 Fixture 정의
"""

import json
from typing import Callable, Dict, List

import httpx
import pytest

from picbed.features.upload.file_manager import FileManager
from picbed.features.upload.schemas import UploadableFile
from picbed.infrastructure.storage.index_store import LocalIndexStore, MemoryKeyValueStore

TEST_ALLOWED_TYPES = [
    "image/png",
    "image/jpeg",
    "image/gif",
    "image/svg+xml",
    "video/mp4",
    "audio/mpeg",
    "application/zip",
]


@pytest.fixture
def file_manager() -> FileManager:
    """고정 설정 파일 관리자 (원본 파일명 규칙)"""
    return FileManager({
        "upload_path": "{year}/{month}/{day}",
        "name_rule": "original",
        "allowed_types": TEST_ALLOWED_TYPES,
        "max_file_size": 5,
    })


@pytest.fixture
def index_store() -> LocalIndexStore:
    """메모리 기반 인덱스 저장소"""
    return LocalIndexStore(MemoryKeyValueStore(), "telegram_upload_index")


@pytest.fixture
def make_file() -> Callable[..., UploadableFile]:
    """UploadableFile 생성 헬퍼"""

    def _make(name: str = "photo.png", mime_type: str = "image/png", content: bytes = b"data", size_bytes: int = None):
        return UploadableFile(content=content, name=name, mime_type=mime_type, size_bytes=size_bytes)

    return _make


class TelegramAPIStub:
    """
    Telegram Bot API 스텁

    엔드포인트 이름(sendPhoto, getFile, getMe ...) 별로 응답 함수를 등록하고
    받은 요청을 기록한다.
    """

    def __init__(self):
        self.routes: Dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: List[httpx.Request] = []

    def on(
        self,
        endpoint: str,
        payload: dict = None,
        status_code: int = 200,
        exc: Exception = None,
        content: bytes = None,
    ):
        def _respond(request: httpx.Request) -> httpx.Response:
            if exc is not None:
                raise exc
            body = content if content is not None else json.dumps(payload or {}).encode()
            return httpx.Response(status_code, content=body)

        self.routes[endpoint] = _respond
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        endpoint = request.url.path.rsplit("/", 1)[-1]
        if endpoint not in self.routes and request.url.path.startswith("/file/"):
            endpoint = "file"
        return self.routes[endpoint](request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def endpoints(self) -> List[str]:
        return [r.url.path.rsplit("/", 1)[-1] for r in self.requests]


@pytest.fixture
def telegram_api() -> TelegramAPIStub:
    return TelegramAPIStub()
