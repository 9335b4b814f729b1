"""Two-step DAVID session relay: query page -> hidden form -> download link.

DAVID's api.jsp does not return a report directly. It returns a page whose
inline script carries three session values (rowids, annot, action) that must
be posted back through the page's form. The form response then contains a
link to the tab-delimited report under UserDownload/.
"""

import re
from dataclasses import dataclass
from urllib.parse import urljoin

import structlog

from david_pipeline.annotation.query import check_query_length
from david_pipeline.api_clients.base import DavidClient, HtmlPage
from david_pipeline.errors import (
    DownloadLinkNotFoundError,
    NoFormError,
    NoScriptContentError,
)

logger = structlog.get_logger()

DOWNLOAD_LINK_PATTERN = re.compile(r"UserDownload/\w+\.txt")


@dataclass(frozen=True)
class SessionTokens:
    """Transient session values scraped from the query page.

    A token that was not found is an empty string; it is still submitted.
    """

    rowids: str = ""
    annot: str = ""
    action: str = ""


class ScriptTokenExtractor:
    """Extracts SessionTokens from the text of an inline script."""

    def extract(self, script_text: str) -> SessionTokens:
        raise NotImplementedError


class LineTokenExtractor(ScriptTokenExtractor):
    """Scan script text line by line for the three token assignments.

    A line is matched on substring: "rowids" first, then "annot.value",
    then "action"; a line feeds at most one token and later lines overwrite
    earlier ones. The value is everything after the first '=' with double
    quotes and semicolons removed.
    """

    markers = (
        ("rowids", "rowids"),
        ("annot.value", "annot"),
        ("action", "action"),
    )

    @staticmethod
    def _assigned_value(line: str) -> str:
        _, sep, value = line.partition("=")
        if not sep:
            return ""
        return value.replace('"', "").replace(";", "").strip()

    def extract(self, script_text: str) -> SessionTokens:
        found = {"rowids": "", "annot": "", "action": ""}

        for line in script_text.splitlines():
            for marker, name in self.markers:
                if marker in line:
                    found[name] = self._assigned_value(line)
                    break

        return SessionTokens(**found)


def first_script_text(page: HtmlPage) -> str:
    """Return the text of the page's first <script> element.

    Raises:
        NoScriptContentError: If there is no script element or it is blank
    """
    script = page.soup.find("script")
    if script is None:
        raise NoScriptContentError(f"No <script> element in page {page.url}")

    text = script.get_text()
    if not text.strip():
        raise NoScriptContentError(f"First <script> element in page {page.url} is empty")

    return text


def find_download_link(body: str) -> str:
    """Return the first UserDownload/<name>.txt path in a response body.

    Raises:
        DownloadLinkNotFoundError: If the pattern does not occur
    """
    match = DOWNLOAD_LINK_PATTERN.search(body)
    if match is None or not match.group(0):
        raise DownloadLinkNotFoundError(
            "Table link not found in DAVID response; the gene list may have "
            "been rejected or the page format changed"
        )
    return match.group(0)


class SessionRelay:
    """Turn a DAVID query URL into the relative path of a downloadable report.

    Holds no state between calls; the scraped tokens live only for the
    duration of resolve_download_link().
    """

    def __init__(
        self,
        client: DavidClient,
        extractor: ScriptTokenExtractor | None = None,
    ):
        """Initialize relay.

        Args:
            client: Transport used for both requests (shares cookies)
            extractor: Token extraction strategy (default: LineTokenExtractor)
        """
        self.client = client
        self.extractor = extractor if extractor is not None else LineTokenExtractor()

    def build_form_submission(
        self,
        page: HtmlPage,
        tokens: SessionTokens,
    ) -> tuple[str, dict[str, str]]:
        """Build (target URL, form data) for resubmitting the page's first form.

        Named inputs of the form are carried over, then rowids/annot/action
        are set to the scraped tokens. The target is the action token, else
        the form's action attribute, else the page URL, resolved against the
        page URL.

        Raises:
            NoFormError: If the page contains no form
        """
        form = page.soup.find("form")
        if form is None:
            raise NoFormError(f"No <form> element in page {page.url}")

        data: dict[str, str] = {}
        for field in form.find_all("input"):
            name = field.get("name")
            if name:
                data[name] = field.get("value", "")

        data["rowids"] = tokens.rowids
        data["annot"] = tokens.annot
        data["action"] = tokens.action

        target = tokens.action or form.get("action") or page.url
        return urljoin(page.url, target), data

    def resolve_download_link(self, query_url: str) -> str:
        """Run the two-step exchange and return the relative report path.

        Args:
            query_url: Full api.jsp query URL

        Returns:
            Relative path such as "UserDownload/ABC123.txt" (not absolutized)

        Raises:
            QueryTooLongError: If query_url exceeds the service limit
            TransportError: On GET/POST failure
            NoScriptContentError: If the query page has no script content
            NoFormError: If the query page has no form
            DownloadLinkNotFoundError: If the form response has no report link
        """
        check_query_length(query_url)

        page = self.client.get_page(query_url)

        tokens = self.extractor.extract(first_script_text(page))
        logger.info(
            "david_tokens_extracted",
            has_rowids=bool(tokens.rowids),
            has_annot=bool(tokens.annot),
            has_action=bool(tokens.action),
        )

        target, data = self.build_form_submission(page, tokens)
        result = self.client.post_form(target, data)

        link = find_download_link(result.text)
        logger.info("david_download_link_found", link=link)

        return link
