"""Exception hierarchy for DAVID queries, session relay and report parsing.

None of these are recovered from internally: every error is terminal for the
call that raised it and is surfaced to the caller.
"""


class DavidError(Exception):
    """Base class for all david-pipeline errors."""


class QueryTooLongError(DavidError):
    """Query URL exceeds the service's URL length ceiling.

    The caller must shrink the gene list.
    """

    def __init__(self, length: int, limit: int):
        self.length = length
        self.limit = limit
        super().__init__(
            f"Query URL is {length} characters, exceeds DAVID limit of {limit}. "
            f"Reduce the number of genes per query."
        )


class TransportError(DavidError):
    """Network or HTTP-level failure on a GET or POST (not retried)."""

    def __init__(self, message: str, url: str | None = None):
        self.url = url
        super().__init__(f"{message} (url: {url})" if url else message)


class NoScriptContentError(DavidError):
    """Query response has no script block to scrape session tokens from."""


class NoFormError(DavidError):
    """Query response has no form to resubmit."""


class DownloadLinkNotFoundError(DavidError):
    """Form response does not contain a UserDownload/*.txt link.

    Usually the service rejected the gene list or changed its page format.
    """


class MalformedHeaderError(DavidError):
    """Expected column name is missing from a report header."""

    def __init__(self, column: str, header: list[str]):
        self.column = column
        self.header = header
        super().__init__(f"Column {column!r} not found in report header: {header}")


class BlockParseError(DavidError):
    """A block of the full gene report could not be parsed.

    Isolated to one block; collected as a warning unless parsing is strict.
    """

    def __init__(self, block_index: int, reason: str, first_line: str = ""):
        self.block_index = block_index
        self.reason = reason
        self.first_line = first_line
        super().__init__(f"Block {block_index}: {reason}")
