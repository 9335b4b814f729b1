"""Download the tab-delimited DAVID report behind a UserDownload link."""

import structlog

from david_pipeline.api_clients.base import DavidClient

logger = structlog.get_logger()


def download_url(base_url: str, path: str) -> str:
    """Join service root and the relative report path without normalization."""
    return f"{base_url}/{path}"


def fetch_report_lines(client: DavidClient, path: str) -> list[str]:
    """Fetch a report as an ordered list of newline-stripped lines.

    Args:
        client: Transport for the same session that produced the link
        path: Relative path returned by SessionRelay

    Returns:
        Report lines

    Raises:
        TransportError: On download failure
    """
    url = download_url(client.base_url, path)
    logger.info("david_report_fetch_start", url=url)

    lines = client.get_text_lines(url)

    logger.info("david_report_fetch_complete", url=url, line_count=len(lines))
    return lines
