"""Plain-text and unknown-type extractors."""

from typing import Any

from app.core.document_processing.base import (
    BaseExtractor,
    ExtractionError,
    ExtractionResult,
    ExtractorRegistry,
    FileFormat,
    UnsupportedFileTypeError,
)

# Characters of decoded content sampled when sniffing an unknown type
SNIFF_CHARS = 1000
# Printable characters required per non-printable one
PRINTABLE_RATIO = 10


def decode_bytes(raw_bytes: bytes) -> tuple[str, str]:
    """
    Attempt to decode bytes using fallback chain.

    Returns:
        Tuple of (decoded_text, encoding_name)

    Raises:
        ExtractionError: If no encoding works
    """
    if raw_bytes.startswith(b"\xef\xbb\xbf"):
        try:
            return raw_bytes.decode("utf-8-sig"), "utf-8-sig"
        except UnicodeDecodeError:
            pass

    for encoding in ("utf-8", "latin-1"):
        try:
            return raw_bytes.decode(encoding), encoding
        except UnicodeDecodeError:
            continue

    raise ExtractionError(
        "Unable to decode file content. Supported encodings: UTF-8, UTF-8-BOM, Latin-1.",
        extractor="text",
    )


def looks_like_text(text: str) -> bool:
    """True if printable ASCII outnumbers control characters tenfold.

    Only ASCII 0x20-0x7E plus tab/newline/CR count as printable and only C0
    controls count against, so decode replacement characters never make a
    binary blob pass.
    """
    sample = text[:SNIFF_CHARS]
    printable = sum(1 for ch in sample if " " <= ch <= "~" or ch in "\t\n\r")
    control = sum(1 for ch in sample if ch < " " and ch not in "\t\n\r")
    return printable > PRINTABLE_RATIO * control


class TextExtractor(BaseExtractor):
    file_format = FileFormat.TEXT

    async def extract(
        self,
        file_bytes: bytes,
        filename: str = "",
        **kwargs: Any,
    ) -> ExtractionResult:
        text, encoding = decode_bytes(file_bytes)
        return ExtractionResult(
            text=text,
            file_format=FileFormat.TEXT,
            extraction_method="decode",
            warnings=[] if encoding == "utf-8" else [f"decoded as {encoding}"],
        )


class UnknownExtractor(BaseExtractor):
    """Accepts files of unknown type only when they decode to mostly printable text."""

    file_format = FileFormat.UNKNOWN

    async def extract(
        self,
        file_bytes: bytes,
        filename: str = "",
        **kwargs: Any,
    ) -> ExtractionResult:
        text = file_bytes.decode("utf-8", errors="replace")
        if not text.strip() or not looks_like_text(text):
            raise UnsupportedFileTypeError(
                f"Unsupported file type: {filename or 'unknown'}", extractor="unknown"
            )
        return ExtractionResult(text=text, file_format=FileFormat.UNKNOWN, extraction_method="decode")


# Register extractors
ExtractorRegistry.register(TextExtractor())
ExtractorRegistry.register(UnknownExtractor())
