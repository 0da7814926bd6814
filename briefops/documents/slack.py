"""Slack file download utilities."""

import asyncio
import logging
import re
from typing import Optional

import aiohttp
import httpx
from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

from briefops.documents.extractor import extract_from_file, normalize_for_llm
from briefops.slack.models import SlackFile

logger = logging.getLogger(__name__)

# Attachment types summarized directly from a thread
SUPPORTED_TYPES = {
    "application/pdf": ".pdf",
    "text/csv": ".csv",
}

DEFAULT_DOWNLOAD_TIMEOUT = 15.0

_FILE_ID = re.compile(r"(?:^|[/-])(F[A-Z0-9]{6,})(?=[/?#]|$)")


class DownloadError(Exception):
    """Slack file could not be located or downloaded."""

    pass


def extract_file_id(url: str) -> Optional[str]:
    """Pull the Slack file id (``F...``) out of a permalink or private URL.

    Example:
        >>> extract_file_id("https://acme.slack.com/files/U01/F0123ABCD/report.pdf")
        'F0123ABCD'
    """
    match = _FILE_ID.search((url or "").strip().strip("<>").split("|")[0])
    return match.group(1) if match else None


def is_supported(file: SlackFile) -> bool:
    return file.mimetype in SUPPORTED_TYPES


async def fetch_file_info(client: AsyncWebClient, file_id: str) -> SlackFile:
    """Look up file metadata through ``files.info``.

    Raises:
        DownloadError: If Slack does not return the file or cannot be reached
    """
    try:
        result = await client.files_info(file=file_id)
    except SlackApiError as e:
        error_code = e.response.get("error", "unknown")
        logger.warning(
            f"files.info failed: {error_code}",
            extra={"file_id": file_id, "error": error_code},
        )
        raise DownloadError(f"Could not find Slack file {file_id} ({error_code})") from e
    except (asyncio.TimeoutError, aiohttp.ClientError) as e:
        logger.warning(
            f"files.info request failed: {e!r}",
            extra={"file_id": file_id},
        )
        raise DownloadError("Could not reach Slack to look up the file.") from e
    return SlackFile.model_validate(result.get("file") or {})


async def download_file(
    file: SlackFile,
    token: str,
    timeout: float = DEFAULT_DOWNLOAD_TIMEOUT,
) -> bytes:
    """Download a Slack-hosted file with the bot token.

    Raises:
        DownloadError: If the file has no URL or the request fails
    """
    url = file.download_url
    if not url:
        raise DownloadError(f"No download URL for file: {file.name}")

    headers = {"Authorization": f"Bearer {token}"}
    try:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as http:
            response = await http.get(url, headers=headers)
            response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error(
            f"Download failed for {file.name}: {e}",
            extra={"file_id": file.id, "mimetype": file.mimetype},
        )
        raise DownloadError("Failed to download the file from Slack.") from e

    logger.debug(
        "Downloaded Slack file",
        extra={"file_id": file.id, "bytes": len(response.content)},
    )
    return response.content


async def download_and_extract(
    file: SlackFile,
    token: str,
    max_length: Optional[int] = None,
    timeout: float = DEFAULT_DOWNLOAD_TIMEOUT,
) -> str:
    """Download Slack file and extract normalized text content.

    Args:
        file: File attached to a Slack message
        token: Bot token used for the private URL
        max_length: Max characters for extracted text
        timeout: Download timeout in seconds

    Returns:
        Extracted and normalized text

    Raises:
        DownloadError: Download failed
        ExtractionError: File could not be parsed
    """
    content = await download_file(file, token, timeout)
    # pypdf and python-docx parse synchronously
    text = await asyncio.to_thread(extract_from_file, content, file.name, file.mimetype)
    normalized = normalize_for_llm(text, max_length)

    logger.info(
        "Extracted document",
        extra={
            "filename": file.name,
            "mimetype": file.mimetype,
            "chars": len(normalized),
        },
    )
    return normalized
