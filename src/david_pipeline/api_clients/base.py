"""HTTP/HTML transport for the DAVID web service."""

import logging
from dataclasses import dataclass
from typing import Any

import requests
from bs4 import BeautifulSoup
from requests.exceptions import ConnectionError, HTTPError, Timeout
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from david_pipeline.config.schema import DavidConfig
from david_pipeline.errors import TransportError

logger = logging.getLogger(__name__)


@dataclass
class HtmlPage:
    """A fetched HTML page: final URL, raw body and parsed document."""

    url: str
    text: str
    soup: BeautifulSoup

    @classmethod
    def from_response(cls, response: requests.Response) -> "HtmlPage":
        return cls(
            url=response.url,
            text=response.text,
            soup=BeautifulSoup(response.text, "lxml"),
        )


class DavidClient:
    """
    HTTP client holding one cookie-carrying session against DAVID.

    A client is meant to serve a single query: the service binds its session
    tokens to the cookies set on the first request, so independent queries
    should use independent clients.

    Features:
    - GET/POST returning parsed HTML pages
    - Plain-text report download as a list of lines
    - Optional retry with exponential backoff for the download only
    - All requests-level failures surfaced as TransportError
    """

    def __init__(
        self,
        base_url: str = "https://davidbioinformatics.nih.gov",
        timeout: int = 30,
        user_agent: str | None = None,
        download_retries: int = 1,
        session: requests.Session | None = None,
    ):
        """
        Initialize DAVID client.

        Args:
            base_url: Service root URL
            timeout: Request timeout in seconds
            user_agent: User-Agent header (None keeps the requests default)
            download_retries: Attempts for report downloads (1 = no retry)
            session: Pre-built session (mainly for tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.download_retries = download_retries

        self.session = session if session is not None else requests.Session()
        if user_agent:
            self.session.headers["User-Agent"] = user_agent

    def __enter__(self) -> "DavidClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """Issue a request and map requests failures to TransportError."""
        logger.debug(f"{method} {url}")
        try:
            response = self.session.request(
                method,
                url,
                timeout=self.timeout,
                **kwargs,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise TransportError(f"{method} request failed: {e}", url=url) from e
        return response

    def get_page(self, url: str) -> HtmlPage:
        """
        GET a URL and parse the body as HTML.

        Raises:
            TransportError: On network, timeout or HTTP status failure
        """
        return HtmlPage.from_response(self._request("GET", url))

    def post_form(self, url: str, data: dict[str, str]) -> HtmlPage:
        """
        POST form-encoded data and parse the response as HTML.

        Raises:
            TransportError: On network, timeout or HTTP status failure
        """
        return HtmlPage.from_response(self._request("POST", url, data=data))

    def _create_retry_decorator(self):
        """Create retry decorator with exponential backoff."""
        return retry(
            stop=stop_after_attempt(self.download_retries),
            wait=wait_exponential(multiplier=1, min=2, max=30),
            retry=retry_if_exception_type((HTTPError, Timeout, ConnectionError)),
            reraise=True,
        )

    def get_text_lines(self, url: str) -> list[str]:
        """
        GET a plain-text resource and return its lines without newlines.

        Retries only when download_retries > 1; the report file is a static
        resource so re-fetching it is safe.

        Raises:
            TransportError: On failure after all attempts
        """
        @self._create_retry_decorator()
        def _get_with_retry() -> requests.Response:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            return response

        try:
            response = _get_with_retry()
        except requests.RequestException as e:
            raise TransportError(f"Report download failed: {e}", url=url) from e

        return response.text.splitlines()

    @classmethod
    def from_config(cls, config: DavidConfig) -> "DavidClient":
        """
        Create client from configuration.

        Args:
            config: DavidConfig instance

        Returns:
            Configured DavidClient with a fresh session
        """
        return cls(
            base_url=config.service.base_url,
            timeout=config.api.timeout_seconds,
            user_agent=config.api.user_agent,
            download_retries=config.api.download_retries,
        )
