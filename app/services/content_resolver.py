"""Decide what, if anything, gets sent to the model for one document.

The file kind is decided once from the file name by :func:`classify_file`;
:class:`ContentResolver` then produces exactly one of :class:`TextContent`,
:class:`BinaryContent` or :class:`NoContent`. Storage failures never escape
the resolver: they turn into ``NoContent`` and the pipeline takes its
zero-result path.
"""

import base64
import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from app.core.exceptions import StorageError
from app.services.storage_service import StorageService
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)


class FileKind(str, Enum):
    PDF = "pdf"
    IMAGE = "image"
    TEXT = "text"
    AUDIO = "audio"
    VIDEO = "video"
    UNKNOWN = "unknown"


PDF_EXTENSIONS = frozenset({"pdf"})
IMAGE_EXTENSIONS = frozenset({"png", "jpg", "jpeg", "gif", "webp"})
TEXT_EXTENSIONS = frozenset({"txt", "md", "csv", "json", "log"})
VIDEO_EXTENSIONS = frozenset({"mp4", "mov", "avi", "mkv", "webm"})

AUDIO_MIME_TYPES = {
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "m4a": "audio/mp4",
    "ogg": "audio/ogg",
    "flac": "audio/flac",
    "aac": "audio/aac",
    "opus": "audio/ogg",
}
DEFAULT_AUDIO_MIME = "audio/mpeg"

PDF_MIME = "application/pdf"
# Every image is sent as PNG whatever its real subtype
IMAGE_MIME = "image/png"

# Kinds whose inline text is never trusted over the stored bytes
BINARY_KINDS = frozenset({FileKind.PDF, FileKind.IMAGE, FileKind.AUDIO, FileKind.VIDEO})

# Clients send "[Video file: x.mp4]" style placeholders for unreadable files
_PLACEHOLDER = re.compile(r"^\[.*\]$", re.DOTALL)


@dataclass(frozen=True)
class TextContent:
    text: str


@dataclass(frozen=True)
class BinaryContent:
    """Base64 payload for the multimodal path."""

    data: str
    mime_type: str

    @property
    def data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


@dataclass(frozen=True)
class NoContent:
    reason: str


ResolvedContent = Union[TextContent, BinaryContent, NoContent]


def file_extension(file_name: Optional[str]) -> str:
    if not file_name or "." not in file_name:
        return ""
    return file_name.rsplit(".", 1)[-1].strip().lower()


def classify_file(file_name: Optional[str]) -> FileKind:
    """Classify a file by its extension (case-insensitive)."""
    ext = file_extension(file_name)
    if ext in PDF_EXTENSIONS:
        return FileKind.PDF
    if ext in IMAGE_EXTENSIONS:
        return FileKind.IMAGE
    if ext in TEXT_EXTENSIONS:
        return FileKind.TEXT
    if ext in AUDIO_MIME_TYPES:
        return FileKind.AUDIO
    if ext in VIDEO_EXTENSIONS:
        return FileKind.VIDEO
    return FileKind.UNKNOWN


def audio_mime_type(file_name: Optional[str]) -> str:
    return AUDIO_MIME_TYPES.get(file_extension(file_name), DEFAULT_AUDIO_MIME)


def usable_inline_text(document_content: Optional[str]) -> Optional[str]:
    """Inline text worth sending, or None for blanks and placeholders."""
    if not document_content or not document_content.strip():
        return None
    if _PLACEHOLDER.match(document_content.strip()):
        return None
    return document_content


class ContentResolver:
    """Turns a stored file reference into a model-ready payload.

    Performs at most one storage read per call.
    """

    def __init__(self, storage: StorageService, bucket: str = "evidence"):
        self.storage = storage
        self.bucket = bucket

    async def resolve(
        self,
        file_name: Optional[str],
        document_content: Optional[str] = None,
        storage_path: Optional[str] = None,
    ) -> ResolvedContent:
        kind = classify_file(file_name)
        inline_text = usable_inline_text(document_content)

        if inline_text is not None and kind not in BINARY_KINDS:
            return TextContent(inline_text)

        if kind in (FileKind.PDF, FileKind.IMAGE) and storage_path:
            mime_type = PDF_MIME if kind is FileKind.PDF else IMAGE_MIME
            return await self._fetch_binary(storage_path, mime_type)

        if kind is FileKind.TEXT and storage_path:
            return await self._fetch_text(storage_path)

        if kind is FileKind.AUDIO and storage_path:
            return await self._fetch_binary(storage_path, audio_mime_type(file_name))

        reason = f"No extractable content for {file_name or 'document'} ({kind.value})"
        LOGGER.info(reason, extra={"storage_path": storage_path})
        return NoContent(reason)

    async def _download(self, storage_path: str) -> Optional[bytes]:
        try:
            return await self.storage.download_file(self.bucket, storage_path)
        except StorageError as e:
            LOGGER.error(
                f"Failed to fetch evidence from storage: {e.message}",
                extra={"bucket": self.bucket, "storage_path": storage_path},
            )
            return None

    async def _fetch_binary(self, storage_path: str, mime_type: str) -> ResolvedContent:
        raw = await self._download(storage_path)
        if not raw:
            return NoContent(f"Could not read {storage_path} from storage")
        LOGGER.info(
            "Fetched binary evidence",
            extra={"storage_path": storage_path, "mime_type": mime_type, "size": len(raw)},
        )
        return BinaryContent(base64.b64encode(raw).decode("ascii"), mime_type)

    async def _fetch_text(self, storage_path: str) -> ResolvedContent:
        raw = await self._download(storage_path)
        if raw is None:
            return NoContent(f"Could not read {storage_path} from storage")
        text = raw.decode("utf-8", errors="replace")
        if not text.strip():
            return NoContent(f"{storage_path} is empty")
        return TextContent(text)
