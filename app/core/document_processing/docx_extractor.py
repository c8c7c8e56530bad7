"""DOCX text extractor using python-docx, with a raw ZIP scan fallback."""

import html
import re
import struct
import zlib
from io import BytesIO
from typing import Any

from app.core.document_processing.base import (
    BaseExtractor,
    ExtractionResult,
    ExtractorRegistry,
    FileFormat,
    InvalidContainerError,
)
from app.core.logging import get_logger

logger = get_logger(__name__)

ZIP_SIGNATURE = b"PK"
LOCAL_HEADER = b"PK\x03\x04"
LOCAL_HEADER_SIZE = 30
DOCUMENT_PART = "word/document.xml"

STORED = 0
DEFLATED = 8

TEXT_NODE_PATTERN = re.compile(r"<w:t(?:\s[^>]*)?>([^<]*)</w:t>")


def _read_document_part(file_bytes: bytes) -> bytes | None:
    """Walk ZIP local file headers and return the inflated document part."""
    offset = file_bytes.find(LOCAL_HEADER)
    while offset != -1 and offset + LOCAL_HEADER_SIZE <= len(file_bytes):
        method = struct.unpack_from("<H", file_bytes, offset + 8)[0]
        compressed_size = struct.unpack_from("<I", file_bytes, offset + 18)[0]
        name_length = struct.unpack_from("<H", file_bytes, offset + 26)[0]
        extra_length = struct.unpack_from("<H", file_bytes, offset + 28)[0]

        name_start = offset + LOCAL_HEADER_SIZE
        name = file_bytes[name_start:name_start + name_length].decode("utf-8", errors="replace")
        data_start = name_start + name_length + extra_length
        data = file_bytes[data_start:data_start + compressed_size]

        if name == DOCUMENT_PART:
            if method == STORED:
                return data
            if method == DEFLATED:
                for wbits in (-zlib.MAX_WBITS, zlib.MAX_WBITS):
                    try:
                        return zlib.decompressobj(wbits).decompress(data)
                    except zlib.error:
                        continue
            logger.warning(f"Unsupported compression method {method} for {DOCUMENT_PART}")
            return None

        # Sizes may be deferred to a data descriptor; resync on the next header
        next_offset = data_start + compressed_size if compressed_size else name_start
        offset = file_bytes.find(LOCAL_HEADER, next_offset)
    return None


def _text_nodes(xml: str) -> str:
    return " ".join(html.unescape(t) for t in TEXT_NODE_PATTERN.findall(xml) if t.strip())


def scan_docx_text(file_bytes: bytes) -> str:
    """
    Recover text from a DOCX by reading its ZIP entries directly.

    Args:
        file_bytes: Raw DOCX bytes

    Returns:
        Space-joined text of all <w:t> nodes (may be empty)

    Raises:
        InvalidContainerError: If the bytes are not a ZIP container
    """
    if not file_bytes.startswith(ZIP_SIGNATURE):
        raise InvalidContainerError("Invalid DOCX file format", extractor="docx")

    document = _read_document_part(file_bytes)
    text = _text_nodes(document.decode("utf-8", errors="replace")) if document else ""
    if not text:
        # Last resort: uncompressed XML somewhere in the archive
        text = _text_nodes(file_bytes.decode("latin-1"))
    return re.sub(r"\s+", " ", text).strip()


class DOCXExtractor(BaseExtractor):
    """DOCX text extractor."""

    file_format = FileFormat.DOCX

    def _extract_native(self, file_bytes: bytes) -> str:
        from docx import Document

        doc = Document(BytesIO(file_bytes))
        parts = [p.text for p in doc.paragraphs if p.text.strip()]
        for table in doc.tables:
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
                if cells:
                    parts.append(" | ".join(cells))
        return re.sub(r"\s+", " ", " ".join(parts)).strip()

    async def extract(
        self,
        file_bytes: bytes,
        filename: str = "",
        **kwargs: Any,
    ) -> ExtractionResult:
        """Extract text from a DOCX.

        Raises:
            InvalidContainerError: If the file is not a ZIP container
            NoMeaningfulTextError: If fewer than 20 characters are recovered
        """
        if not file_bytes.startswith(ZIP_SIGNATURE):
            raise InvalidContainerError("Invalid DOCX file format", extractor="docx")

        warnings: list[str] = []
        method = "native"
        try:
            text = self._extract_native(file_bytes)
        except Exception as e:
            logger.warning(f"python-docx could not open {filename or 'DOCX'}: {e}")
            warnings.append(f"native parse failed: {e}")
            text = ""

        if not text:
            text = scan_docx_text(file_bytes)
            method = "heuristic"

        self.require_meaningful(text)
        logger.info(f"Extracted {len(text)} chars from DOCX {filename} ({method})")

        return ExtractionResult(
            text=text,
            file_format=FileFormat.DOCX,
            extraction_method=method,
            warnings=warnings,
        )


# Register extractor
ExtractorRegistry.register(DOCXExtractor())
