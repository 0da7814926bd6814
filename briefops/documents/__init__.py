"""Document processing: Slack attachments, object storage and transcripts."""

from briefops.documents.extractor import (
    ExtractionError,
    extract_csv,
    extract_docx,
    extract_from_file,
    extract_pdf,
    extract_text,
    normalize_for_llm,
)
from briefops.documents.slack import (
    SUPPORTED_TYPES,
    DownloadError,
    download_and_extract,
    download_file,
    extract_file_id,
    fetch_file_info,
    is_supported,
)
from briefops.documents.storage import ObjectStorage, StorageError
from briefops.documents.youtube import (
    InvalidVideoUrlError,
    NoTranscriptAvailableError,
    TranscriptSegment,
    TranscriptSource,
    transcript_object_key,
)

__all__ = [
    "extract_from_file",
    "extract_pdf",
    "extract_docx",
    "extract_csv",
    "extract_text",
    "normalize_for_llm",
    "ExtractionError",
    "download_and_extract",
    "download_file",
    "extract_file_id",
    "fetch_file_info",
    "is_supported",
    "DownloadError",
    "SUPPORTED_TYPES",
    "ObjectStorage",
    "StorageError",
    "InvalidVideoUrlError",
    "NoTranscriptAvailableError",
    "TranscriptSegment",
    "TranscriptSource",
    "transcript_object_key",
]
