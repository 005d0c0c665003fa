"""
Local Index Store
목록/삭제를 지원하지 않는 백엔드(Telegram)를 위한 로컬 업로드 인덱스
"""

import asyncio
import json
import os
from abc import ABC, abstractmethod
from datetime import timezone
from pathlib import Path
from typing import Dict, List, Optional

import aiofiles
from pydantic import ValidationError

from ...core.logging import get_logger
from ...features.upload.schemas import IndexRecord

logger = get_logger(__name__)


class KeyValueStore(ABC):
    """
    네임스페이스 단위 문자열 저장소 인터페이스

    프로세스 재시작 후에도 인덱스가 유지되도록 외부 저장소에 위임한다.
    """

    @abstractmethod
    async def load(self, namespace: str) -> Optional[str]:
        """저장된 데이터 조회 (없으면 None)"""
        pass

    @abstractmethod
    async def save(self, namespace: str, data: str) -> None:
        """데이터 저장 (전체 덮어쓰기)"""
        pass


class MemoryKeyValueStore(KeyValueStore):
    """메모리 저장소 (테스트 및 임시 사용)"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    async def load(self, namespace: str) -> Optional[str]:
        return self._data.get(namespace)

    async def save(self, namespace: str, data: str) -> None:
        self._data[namespace] = data


class FileKeyValueStore(KeyValueStore):
    """
    로컬 파일 저장소

    네임스페이스마다 `<base_path>/<namespace>.json` 파일 하나를 사용하며,
    임시 파일에 기록한 뒤 os.replace 로 교체하여 부분 기록을 방지한다.
    """

    def __init__(self, base_path: str):
        """
        Args:
            base_path: 인덱스 파일이 저장될 디렉토리
        """
        self.base_path = Path(base_path)

    def _path_for(self, namespace: str) -> Path:
        return self.base_path / f"{namespace}.json"

    async def load(self, namespace: str) -> Optional[str]:
        path = self._path_for(namespace)
        if not path.exists():
            return None
        async with aiofiles.open(path, "r", encoding="utf-8") as f:
            return await f.read()

    async def save(self, namespace: str, data: str) -> None:
        path = self._path_for(namespace)
        os.makedirs(path.parent, exist_ok=True)

        tmp_path = path.with_suffix(".json.tmp")
        async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
            await f.write(data)
        os.replace(tmp_path, path)


class LocalIndexStore:
    """
    업로드 인덱스 저장소

    - 업로드 성공 시 레코드 추가 (append)
    - 삭제 요청 시 키로 레코드 제거 (remove_by_key)
    - 변경 작업은 인스턴스 단위 asyncio.Lock 으로 직렬화
    """

    def __init__(self, store: KeyValueStore, namespace: str):
        """
        Args:
            store: 영속화를 담당하는 키-값 저장소
            namespace: 인덱스 이름 (예: telegram_upload_index)
        """
        self.store = store
        self.namespace = namespace
        self._lock = asyncio.Lock()

    async def read_all(self) -> List[IndexRecord]:
        """
        전체 인덱스 조회

        데이터가 없거나 손상된 경우 빈 목록으로 취급한다.
        """
        try:
            raw = await self.store.load(self.namespace)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("index.load.failed", namespace=self.namespace, error=str(e))
            return []

        if not raw:
            return []

        try:
            items = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("index.corrupt", namespace=self.namespace)
            return []

        if not isinstance(items, list):
            logger.warning("index.unexpected_layout", namespace=self.namespace, type=type(items).__name__)
            return []

        records = []
        for item in items:
            try:
                record = IndexRecord.model_validate(item)
            except ValidationError:
                logger.warning("index.entry.skipped", namespace=self.namespace)
                continue
            if record.last_modified.tzinfo is None:
                record.last_modified = record.last_modified.replace(tzinfo=timezone.utc)
            records.append(record)
        return records

    async def append(self, record: IndexRecord) -> None:
        """레코드 추가"""
        async with self._lock:
            records = await self.read_all()
            records.append(record)
            await self._write(records)

    async def remove_by_key(self, key: str) -> int:
        """
        키가 일치하는 레코드 제거

        Returns:
            int: 제거된 레코드 수 (없으면 0)
        """
        async with self._lock:
            records = await self.read_all()
            remaining = [r for r in records if r.key != key]
            removed = len(records) - len(remaining)
            if removed:
                await self._write(remaining)
            return removed

    async def _write(self, records: List[IndexRecord]) -> None:
        data = json.dumps(
            [r.model_dump(mode="json", by_alias=True) for r in records],
            ensure_ascii=False,
        )
        try:
            await self.store.save(self.namespace, data)
        except OSError as e:
            # 저장 실패는 업로드 자체를 실패시키지 않는다
            logger.error("index.save.failed", namespace=self.namespace, error=str(e))
