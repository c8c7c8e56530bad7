"""PDF text extractor.

Uses PyMuPDF when the document parses. Malformed or truncated PDFs fall back
to scanning content streams for text-showing operators.
"""

import io
import re
import zlib
from typing import Any

from app.core.document_processing.base import (
    BaseExtractor,
    ExtractionResult,
    ExtractorRegistry,
    FileFormat,
)
from app.core.logging import get_logger

logger = get_logger(__name__)

# Lazy import to avoid loading heavy libraries at module load
fitz = None

STREAM_PATTERN = re.compile(r"stream\r?\n(.*?)endstream", re.DOTALL)
TEXT_BLOCK_PATTERN = re.compile(r"BT\b(.*?)\bET", re.DOTALL)
TJ_STRING_PATTERN = re.compile(r"\(((?:\\.|[^\\)])*)\)\s*Tj")
TJ_ARRAY_PATTERN = re.compile(r"\[([^\[\]]*)\]\s*TJ")
ARRAY_STRING_PATTERN = re.compile(r"\(((?:\\.|[^\\)])*)\)")
ESCAPE_PATTERN = re.compile(r"\\([nrt()\\])")

# Bytes of object dictionary inspected ahead of a stream for its filter
FILTER_LOOKBEHIND = 200

_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "(": "(", ")": ")", "\\": "\\"}


def _get_fitz():
    """Lazy load PyMuPDF."""
    global fitz
    if fitz is None:
        try:
            import fitz as _fitz
            fitz = _fitz
        except ImportError:
            raise ImportError(
                "PyMuPDF (fitz) is required for PDF extraction. "
                "Install with: pip install pymupdf"
            )
    return fitz


def _unescape(value: str) -> str:
    return ESCAPE_PATTERN.sub(lambda m: _ESCAPES[m.group(1)], value)


def _inflate(data: bytes) -> bytes | None:
    """Inflate a Flate stream, trying zlib-wrapped then raw deflate."""
    for wbits in (zlib.MAX_WBITS, -zlib.MAX_WBITS):
        try:
            return zlib.decompressobj(wbits).decompress(data)
        except zlib.error:
            continue
    return None


def _is_flate(raw: str, stream_start: int) -> bool:
    header = raw[max(0, stream_start - FILTER_LOOKBEHIND):stream_start]
    obj_at = header.rfind("obj")
    if obj_at != -1:
        header = header[obj_at:]
    return "FlateDecode" in header


def _text_from_blocks(content: str) -> list[str]:
    fragments: list[str] = []
    for block in TEXT_BLOCK_PATTERN.findall(content):
        for operand in TJ_STRING_PATTERN.findall(block):
            fragments.append(_unescape(operand))
        for array in TJ_ARRAY_PATTERN.findall(block):
            fragments.extend(_unescape(s) for s in ARRAY_STRING_PATTERN.findall(array))
    return [f for f in fragments if f.strip()]


def scan_pdf_text(file_bytes: bytes) -> str:
    """
    Recover text from a PDF by scanning its content streams.

    Flate-compressed streams are inflated first. The undecoded file is also
    scanned so uncompressed PDFs yield text; fragments already found in a
    decoded stream are not repeated.

    Args:
        file_bytes: Raw PDF bytes

    Returns:
        Space-joined text with whitespace collapsed (may be empty)
    """
    raw = file_bytes.decode("latin-1")
    fragments: list[str] = []

    for match in STREAM_PATTERN.finditer(raw):
        data = match.group(1)
        if _is_flate(raw, match.start()):
            inflated = _inflate(data.encode("latin-1"))
            if inflated is None:
                continue
            data = inflated.decode("latin-1")
        fragments.extend(_text_from_blocks(data))

    found = set(fragments)
    for fragment in _text_from_blocks(raw):
        if fragment not in found:
            found.add(fragment)
            fragments.append(fragment)

    return re.sub(r"\s+", " ", " ".join(fragments)).strip()


class PDFExtractor(BaseExtractor):
    """PDF text extractor."""

    file_format = FileFormat.PDF

    def _extract_native(self, file_bytes: bytes) -> str:
        fitz_lib = _get_fitz()
        with fitz_lib.open(stream=io.BytesIO(file_bytes), filetype="pdf") as doc:
            text = " ".join(page.get_text("text") for page in doc)
        return re.sub(r"\s+", " ", text).strip()

    async def extract(
        self,
        file_bytes: bytes,
        filename: str = "",
        **kwargs: Any,
    ) -> ExtractionResult:
        """Extract text from a PDF.

        Raises:
            NoMeaningfulTextError: If fewer than 50 characters are recovered
        """
        warnings: list[str] = []
        try:
            text = self._extract_native(file_bytes)
            method = "native"
        except ImportError:
            raise
        except Exception as e:
            logger.warning(f"PyMuPDF could not parse {filename or 'PDF'}: {e}")
            warnings.append(f"native parse failed: {e}")
            text = ""

        if len(text) < 50:
            text = scan_pdf_text(file_bytes)
            method = "heuristic"

        self.require_meaningful(text)
        logger.info(f"Extracted {len(text)} chars from PDF {filename} ({method})")

        return ExtractionResult(
            text=text,
            file_format=FileFormat.PDF,
            extraction_method=method,
            warnings=warnings,
        )


# Register extractor
ExtractorRegistry.register(PDFExtractor())
