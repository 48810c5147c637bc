from typing import Optional


class UpstreamError(Exception):
    """The upstream API could not produce a usable response."""

    def __init__(self, message: str, status_code: Optional[int] = None, url: str = ""):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.url = url
