"""
Telegram Storage Service
Telegram Bot API를 파일 저장 백엔드로 사용하는 스토리지 서비스 구현체

Bot API는 메시지(파일) 목록 조회와 삭제를 지원하지 않으므로
업로드 기록을 로컬 인덱스에 남겨 목록/삭제를 흉내낸다.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from .base import AbstractStorageService
from .exceptions import StorageResponseException
from .index_store import FileKeyValueStore, LocalIndexStore
from ...core.config import settings
from ...core.logging import get_logger
from ...features.upload.schemas import (
    ConnectionTestResult,
    IndexRecord,
    ObjectInfo,
    UploadableFile,
    UploadResult,
)

logger = get_logger(__name__)

INDEX_NAMESPACE = "telegram_upload_index"

DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
}

# 백엔드 오류 문구 -> 사용자 메시지
ERROR_MESSAGES = (
    ("Unauthorized", "Bot Token이 유효하지 않거나 만료되었습니다"),
    ("chat not found", "Chat ID가 유효하지 않거나 Bot이 해당 채널/그룹에 참여하지 않았습니다"),
    ("bot was kicked", "Bot이 해당 채널/그룹에서 추방되었습니다"),
    ("not enough rights", "Bot에 메시지 전송 권한이 없습니다"),
    ("file is too big", "파일 크기가 Telegram 제한(20MB)을 초과했습니다"),
    ("NetworkError", "네트워크 연결에 실패했습니다. 네트워크 또는 프록시 설정을 확인하세요"),
    ("fetch", "네트워크 연결에 실패했습니다. 네트워크 또는 프록시 설정을 확인하세요"),
)
MSG_NETWORK_ERROR = "네트워크 연결에 실패했습니다. 네트워크 또는 프록시 설정을 확인하세요"


@dataclass(frozen=True)
class SendMethod:
    """Bot API 전송 엔드포인트와 multipart 필드명"""

    endpoint: str
    field: str


SEND_ANIMATION = SendMethod("sendAnimation", "animation")
SEND_DOCUMENT = SendMethod("sendDocument", "document")
SEND_PHOTO = SendMethod("sendPhoto", "photo")
SEND_VIDEO = SendMethod("sendVideo", "video")
SEND_AUDIO = SendMethod("sendAudio", "audio")


def select_send_method(mime_type: str, filename: str) -> SendMethod:
    """
    파일 유형에 따라 전송 엔드포인트 선택

    GIF/WEBP 는 변환되지 않도록 animation, SVG/ICO 는 무손실 전달을 위해 document.
    """
    ext = filename.rsplit(".", 1)[-1].lower()
    mime_type = mime_type or ""

    if ext in ("gif", "webp") or mime_type == "image/gif":
        return SEND_ANIMATION
    if mime_type in ("image/svg+xml", "image/x-icon"):
        return SEND_DOCUMENT
    if mime_type.startswith("image/"):
        return SEND_PHOTO
    if mime_type.startswith("video/"):
        return SEND_VIDEO
    if mime_type.startswith("audio/"):
        return SEND_AUDIO
    return SEND_DOCUMENT


def _normalize_domain(domain: Optional[str]) -> str:
    """스킴과 끝 슬래시를 제거한 호스트명"""
    domain = (domain or "").strip()
    for scheme in ("https://", "http://"):
        if domain.startswith(scheme):
            domain = domain[len(scheme):]
    return domain.rstrip("/")


class TelegramStorageService(AbstractStorageService):
    """
    Telegram Bot 스토리지 서비스

    - 업로드: sendPhoto/sendVideo/sendAudio/sendDocument/sendAnimation
    - 주소: getFile 로 얻은 file_path 로 파일 URL 구성
    - 목록/삭제: 로컬 인덱스만 사용 (원격 파일은 삭제할 수 없음)
    """

    def __init__(
        self,
        file_manager,
        bot_token: str,
        chat_id: str,
        proxy_url: Optional[str] = None,
        custom_domain: Optional[str] = None,
        index_store: Optional[LocalIndexStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            file_manager: 업로드 경로 생성용 파일 관리자
            bot_token: @BotFather 에서 발급받은 Bot Token
            chat_id: 채널 또는 그룹 ID
            proxy_url: 선택, 기본 API 호스트 대신 사용할 프록시 도메인
            custom_domain: 선택, 파일 URL 에 사용할 표시용 도메인
            index_store: 업로드 인덱스 저장소 (None이면 파일 저장소 사용)
            transport: httpx 전송 계층 (테스트용)
        """
        super().__init__(file_manager)
        self.bot_token = bot_token
        self.chat_id = chat_id
        self.proxy_url = _normalize_domain(proxy_url)

        api_domain = self.proxy_url or settings.telegram_api_domain
        self.base_url = f"https://{api_domain}/bot{self.bot_token}"
        self.file_domain = f"https://{_normalize_domain(custom_domain) or api_domain}"

        self.index_store = index_store or LocalIndexStore(
            FileKeyValueStore(settings.index_store_path), INDEX_NAMESPACE
        )
        self._transport = transport
        self.timeout = httpx.Timeout(settings.http_timeout, read=settings.http_read_timeout)

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            headers=DEFAULT_HEADERS,
            transport=self._transport,
        )

    def _file_url(self, file_path: str) -> str:
        return f"{self.file_domain}/file/bot{self.bot_token}/{file_path}"

    async def upload(self, file: UploadableFile) -> UploadResult:
        """Telegram 으로 파일 전송 후 인덱스에 기록"""
        try:
            key = self.file_manager.generate_path(file.name)
            method = select_send_method(file.mime_type, file.name)
            logger.info(
                "storage.upload.started",
                storage="telegram",
                filename=file.name,
                endpoint=method.endpoint,
                key=key,
            )

            async with self._client() as client:
                response = await client.post(
                    f"{self.base_url}/{method.endpoint}",
                    data={"chat_id": str(self.chat_id)},
                    files={method.field: (file.name, file.content, file.mime_type)},
                )
                if not response.is_success:
                    raise StorageResponseException(
                        f"Telegram API error: {response.status_code} {response.text}"
                    )

                payload = response.json()
                if not payload.get("ok"):
                    raise StorageResponseException(
                        f"Telegram API error: {payload.get('description')}"
                    )

                file_info = self._extract_file_info(payload)
                if not file_info:
                    raise StorageResponseException(
                        "Failed to get file info from Telegram response"
                    )

                file_path = await self._get_file_path(client, file_info["file_id"])
                if not file_path:
                    raise StorageResponseException("Failed to get file path from Telegram")

            url = self._file_url(file_path)
            await self.index_store.append(
                IndexRecord(
                    key=key,
                    url=url,
                    file_id=file_info["file_id"],
                    file_path=file_path,
                    last_modified=datetime.now(timezone.utc),
                    size=file_info.get("file_size") or 0,
                )
            )

            logger.info("storage.upload.succeeded", storage="telegram", key=key)
            return UploadResult(
                url=url, key=key, file_id=file_info["file_id"], file_path=file_path
            )

        except Exception as e:
            self._handle_error(e, "업로드")

    async def delete(self, key: str) -> None:
        """
        로컬 인덱스에서만 제거

        Bot API 는 전송된 파일/메시지 삭제를 지원하지 않는다.
        """
        removed = await self.index_store.remove_by_key(key)
        logger.warning(
            "storage.delete.index_only",
            storage="telegram",
            key=key,
            removed=removed,
            reason="Bot API does not support deletion",
        )

    async def list_objects(self, prefix: str = "") -> List[ObjectInfo]:
        """로컬 인덱스에서 목록 조회"""
        records = await self.index_store.read_all()
        return self._sort_and_filter((r.to_object_info() for r in records), prefix)

    async def test_connection(self) -> ConnectionTestResult:
        """getMe 호출로 Bot Token 유효성 확인"""
        try:
            async with self._client() as client:
                response = await client.get(f"{self.base_url}/getMe")
            data = response.json()

            if data.get("ok"):
                return self._format_test_result(True)
            return self._format_test_result(False, data.get("description") or "Invalid bot token")

        except Exception as e:
            logger.warning("storage.connection_test.failed", storage="telegram", error=str(e))
            return self._format_test_result(False, self._parse_error(e))

    async def get_file_content(self, file_id: str) -> bytes:
        """
        원격 파일 내용 다운로드

        Args:
            file_id: Telegram 파일 ID

        Returns:
            bytes: 파일 데이터
        """
        try:
            async with self._client() as client:
                file_path = await self._get_file_path(client, file_id)
                if not file_path:
                    raise StorageResponseException(f"File path not found for fileId: {file_id}")

                response = await client.get(self._file_url(file_path))
                response.raise_for_status()
                return response.content

        except Exception as e:
            self._handle_error(e, "다운로드")

    # ==================== Internal ====================

    @staticmethod
    def _extract_file_info(payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        전송 응답에서 파일 정보 추출

        photo 는 여러 해상도가 반환되므로 file_size 가 가장 큰 것을 선택한다.
        """
        result = payload.get("result") or {}

        def details(item: Dict[str, Any]) -> Dict[str, Any]:
            return {
                "file_id": item.get("file_id"),
                "file_name": item.get("file_name") or item.get("file_unique_id"),
                "file_size": item.get("file_size"),
            }

        photos = result.get("photo")
        if photos:
            largest = max(photos, key=lambda p: p.get("file_size") or 0)
            return details(largest)

        for field in ("video", "audio", "document", "animation"):
            if result.get(field):
                return details(result[field])

        return None

    async def _get_file_path(self, client: httpx.AsyncClient, file_id: str) -> Optional[str]:
        """getFile 로 원격 저장 경로 조회 (없으면 None)"""
        response = await client.get(f"{self.base_url}/getFile", params={"file_id": file_id})
        data = response.json()
        if data.get("ok"):
            return (data.get("result") or {}).get("file_path")

        logger.warning(
            "telegram.get_file.failed", file_id=file_id, description=data.get("description")
        )
        return None

    def _parse_error(self, error: BaseException) -> str:
        """Telegram 오류 문구를 사용자 메시지로 분류"""
        if isinstance(error, httpx.TransportError):
            return MSG_NETWORK_ERROR

        message = str(error)
        for needle, friendly in ERROR_MESSAGES:
            if needle in message:
                return friendly
        return super()._parse_error(error)
