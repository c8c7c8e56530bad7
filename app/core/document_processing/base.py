"""Base extractor interface and registry for uploaded documents.

Each ``FileFormat`` variant has exactly one registered extractor. Callers
resolve the format from a declared type hint or file name, then dispatch
through ``ExtractorRegistry``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class FileFormat(Enum):
    """File formats text can be acquired from."""
    TEXT = "text"
    PDF = "pdf"
    DOCX = "docx"
    DOC = "doc"
    UNKNOWN = "unknown"


# MIME type to FileFormat mapping
MIME_TYPE_MAP: dict[str, FileFormat] = {
    "text/plain": FileFormat.TEXT,
    "text/markdown": FileFormat.TEXT,
    "application/pdf": FileFormat.PDF,
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": FileFormat.DOCX,
    "application/msword": FileFormat.DOC,
}

# Bare type hint / extension to FileFormat mapping
EXTENSION_MAP: dict[str, FileFormat] = {
    "txt": FileFormat.TEXT,
    "text": FileFormat.TEXT,
    "md": FileFormat.TEXT,
    "markdown": FileFormat.TEXT,
    "pdf": FileFormat.PDF,
    "docx": FileFormat.DOCX,
    "doc": FileFormat.DOC,
}

# Minimum characters an extractor must recover before text counts as meaningful
MIN_TEXT_CHARS: dict[FileFormat, int] = {
    FileFormat.PDF: 50,
    FileFormat.DOCX: 20,
    FileFormat.DOC: 50,
}


@dataclass
class ExtractionResult:
    """Text recovered from one file."""

    text: str
    """Plain text with whitespace collapsed where the format requires it."""

    file_format: FileFormat

    extraction_method: str = "native"
    """'native' (parsing library), 'heuristic' (byte scanning) or 'decode'."""

    warnings: list[str] = field(default_factory=list)

    @property
    def char_count(self) -> int:
        return len(self.text)


class ExtractionError(Exception):
    """Raised when text cannot be acquired from a file."""

    def __init__(self, message: str, extractor: str = None, recoverable: bool = False):
        super().__init__(message)
        self.extractor = extractor
        self.recoverable = recoverable


class UnsupportedFileTypeError(ExtractionError):
    """File content is binary in a format no extractor understands."""


class NoMeaningfulTextError(ExtractionError):
    """Extraction ran but recovered too little text to be useful."""


class InvalidContainerError(ExtractionError):
    """The file does not have the container signature its type requires."""


class BaseExtractor(ABC):
    """Base class for file extractors."""

    file_format: FileFormat

    def can_handle(self, file_format: FileFormat) -> bool:
        return file_format == self.file_format

    @abstractmethod
    async def extract(
        self,
        file_bytes: bytes,
        filename: str = "",
        **kwargs: Any,
    ) -> ExtractionResult:
        """Extract text from file bytes.

        Args:
            file_bytes: Raw file content
            filename: Original filename, used in log lines only

        Returns:
            ExtractionResult with the recovered text

        Raises:
            ExtractionError: If no meaningful text can be recovered
        """
        pass

    def require_meaningful(self, text: str) -> str:
        """Return text if it meets this format's minimum length, else raise."""
        minimum = MIN_TEXT_CHARS.get(self.file_format, 1)
        if len(text.strip()) < minimum:
            raise NoMeaningfulTextError(
                f"Could not extract meaningful text from {self.file_format.value.upper()} file",
                extractor=self.file_format.value,
            )
        return text


class ExtractorRegistry:
    """Registry mapping each FileFormat to its extractor."""

    _extractors: dict[FileFormat, BaseExtractor] = {}

    @classmethod
    def register(cls, extractor: BaseExtractor) -> None:
        """Register an extractor, replacing any previous one for its format."""
        cls._extractors[extractor.file_format] = extractor

    @classmethod
    def get_extractor(cls, file_format: FileFormat) -> Optional[BaseExtractor]:
        return cls._extractors.get(file_format)

    @classmethod
    def registered_formats(cls) -> list[FileFormat]:
        return list(cls._extractors)

    @classmethod
    def clear(cls) -> None:
        """Clear all registered extractors (for testing)."""
        cls._extractors = {}


def detect_file_format(file_type: str | None = None, filename: str | None = None) -> FileFormat:
    """Resolve a FileFormat from a declared type hint, falling back to the file name.

    Args:
        file_type: Declared type, either a MIME type or a bare extension
        filename: Original filename

    Returns:
        Matching FileFormat, TEXT when nothing is declared, UNKNOWN otherwise
    """
    if file_type:
        hint = file_type.strip().lower()
        if hint in MIME_TYPE_MAP:
            return MIME_TYPE_MAP[hint]
        hint = hint.lstrip(".")
        if hint in EXTENSION_MAP:
            return EXTENSION_MAP[hint]
        return FileFormat.UNKNOWN

    if filename and "." in filename:
        extension = filename.rsplit(".", 1)[-1].lower()
        return EXTENSION_MAP.get(extension, FileFormat.UNKNOWN)

    return FileFormat.TEXT


async def extract_file_text(
    file_bytes: bytes,
    file_format: FileFormat,
    filename: str = "",
) -> ExtractionResult:
    """Dispatch to the registered extractor for file_format.

    Raises:
        UnsupportedFileTypeError: If no extractor is registered for the format
        ExtractionError: If the extractor fails
    """
    extractor = ExtractorRegistry.get_extractor(file_format)
    if extractor is None:
        raise UnsupportedFileTypeError(
            f"Unsupported file type: {file_format.value}", extractor=file_format.value
        )
    return await extractor.extract(file_bytes, filename)
