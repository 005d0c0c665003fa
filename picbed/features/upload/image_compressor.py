"""
Image Compressor
업로드 전 이미지 리사이즈/재인코딩 (Pillow)
"""

import asyncio
from io import BytesIO
from typing import Any, Mapping, Optional, Tuple

from PIL import Image

from ...core.logging import get_logger
from .catalogs import DEFAULT_IMAGE_SETTINGS
from .schemas import UploadableFile

logger = get_logger(__name__)

# 애니메이션/벡터/아이콘은 재인코딩하지 않는다
PASSTHROUGH_MIME_TYPES = frozenset({
    "image/gif",
    "image/svg+xml",
    "image/x-icon",
    "image/vnd.microsoft.icon",
})

# 출력 형식 -> (Pillow format, MIME, 확장자)
FORMAT_TARGETS = {
    "jpeg": ("JPEG", "image/jpeg", "jpg"),
    "png": ("PNG", "image/png", "png"),
    "webp": ("WEBP", "image/webp", "webp"),
}

# Pillow format -> 출력 형식 키
PILLOW_FORMATS = {"JPEG": "jpeg", "PNG": "png", "WEBP": "webp"}


class ImageCompressor:
    """
    이미지 압축기

    옵션:
        enabled: 압축 사용 여부
        quality: 0~1 (JPEG/WEBP 품질)
        max_width / max_height: 최대 크기 (비율 유지)
        format: original | jpeg | png | webp
    """

    def __init__(self, options: Optional[Mapping[str, Any]] = None):
        self.options = {**DEFAULT_IMAGE_SETTINGS, **(options or {})}

    async def compress(self, file: UploadableFile) -> UploadableFile:
        """이미지 압축 (결과가 더 크거나 처리 대상이 아니면 원본 반환)"""
        if not self.options.get("enabled", True) or file.mime_type in PASSTHROUGH_MIME_TYPES:
            return file

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._compress_sync, file)

    def _compress_sync(self, file: UploadableFile) -> UploadableFile:
        with Image.open(BytesIO(file.content)) as img:
            target = self._resolve_target(img.format)
            if target is None:
                logger.info(
                    "image.compress.skipped",
                    filename=file.name,
                    reason="unsupported_format",
                    format=img.format,
                )
                return file

            pil_format, mime_type, ext = target
            img.thumbnail(self._max_size(img.size))

            if pil_format == "JPEG" and img.mode not in ("RGB", "L"):
                img = img.convert("RGB")

            output = BytesIO()
            save_kwargs = {"optimize": True}
            if pil_format in ("JPEG", "WEBP"):
                save_kwargs["quality"] = int(round(float(self.options["quality"]) * 100))
            img.save(output, format=pil_format, **save_kwargs)
            data = output.getvalue()

        if len(data) >= file.size_bytes and mime_type == file.mime_type:
            logger.info("image.compress.skipped", filename=file.name, reason="no_size_gain")
            return file

        logger.info(
            "image.compress.succeeded",
            filename=file.name,
            original_bytes=file.size_bytes,
            compressed_bytes=len(data),
        )
        return UploadableFile(
            content=data,
            name=self._rename(file.name, ext) if mime_type != file.mime_type else file.name,
            mime_type=mime_type,
        )

    def _resolve_target(self, pil_format: Optional[str]) -> Optional[Tuple[str, str, str]]:
        output_format = self.options.get("format") or "original"
        if output_format == "original":
            output_format = PILLOW_FORMATS.get(pil_format or "")
        return FORMAT_TARGETS.get(output_format) if output_format else None

    def _max_size(self, size: Tuple[int, int]) -> Tuple[int, int]:
        width = int(self.options.get("max_width") or size[0])
        height = int(self.options.get("max_height") or size[1])
        return width, height

    @staticmethod
    def _rename(name: str, ext: str) -> str:
        base = name.rsplit(".", 1)[0] if "." in name else name
        return f"{base}.{ext}"
