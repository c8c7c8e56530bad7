"""Document processing package for acquiring text from uploaded files.

This package provides one extractor per ``FileFormat`` (plain text, PDF,
DOCX, legacy DOC and unknown binary) behind a common registry.

Usage:
    from app.core.document_processing import (
        FileFormat,
        detect_file_format,
        extract_file_text,
    )
"""

from app.core.document_processing.base import (
    FileFormat,
    ExtractionResult,
    ExtractionError,
    UnsupportedFileTypeError,
    NoMeaningfulTextError,
    InvalidContainerError,
    BaseExtractor,
    ExtractorRegistry,
    detect_file_format,
    extract_file_text,
)

# Import extractors to register them
from app.core.document_processing import text_extractor  # noqa: F401
from app.core.document_processing import pdf_extractor  # noqa: F401
from app.core.document_processing import docx_extractor  # noqa: F401
from app.core.document_processing import doc_extractor  # noqa: F401

__all__ = [
    "FileFormat",
    "ExtractionResult",
    "ExtractionError",
    "UnsupportedFileTypeError",
    "NoMeaningfulTextError",
    "InvalidContainerError",
    "BaseExtractor",
    "ExtractorRegistry",
    "detect_file_format",
    "extract_file_text",
]
