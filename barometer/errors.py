"""Exceptions raised by the feed clients and pipelines.

Transport and protocol failures surface as the `requests` exceptions
(`ConnectionError`, `Timeout`, `HTTPError`); payload failures that `requests`
cannot detect are raised as `FeedPayloadError`.
"""


class FeedError(Exception):
    """Base class for upstream feed failures."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source


class FeedPayloadError(FeedError, ValueError):
    """Upstream answered, but the body does not have the expected shape."""
