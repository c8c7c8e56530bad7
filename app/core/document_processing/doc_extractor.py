"""Legacy Word (.doc) extractor: printable-run scan over the binary file."""

import re
from typing import Any

from app.core.document_processing.base import (
    BaseExtractor,
    ExtractionResult,
    ExtractorRegistry,
    FileFormat,
)
from app.core.logging import get_logger

logger = get_logger(__name__)

PRINTABLE_RUN_PATTERN = re.compile(r"[\x20-\x7E\n\r\t]{30,}")


def scan_printable_runs(file_bytes: bytes) -> str:
    """Concatenate runs of 30+ printable characters, skipping runs containing NUL."""
    raw = file_bytes.decode("latin-1")
    runs = [run for run in PRINTABLE_RUN_PATTERN.findall(raw) if "\x00" not in run]
    return re.sub(r"\s+", " ", " ".join(runs)).strip()


class DOCExtractor(BaseExtractor):
    file_format = FileFormat.DOC

    async def extract(
        self,
        file_bytes: bytes,
        filename: str = "",
        **kwargs: Any,
    ) -> ExtractionResult:
        text = self.require_meaningful(scan_printable_runs(file_bytes))
        logger.info(f"Extracted {len(text)} chars from DOC {filename}")
        return ExtractionResult(text=text, file_format=FileFormat.DOC, extraction_method="heuristic")


# Register extractor
ExtractorRegistry.register(DOCExtractor())
