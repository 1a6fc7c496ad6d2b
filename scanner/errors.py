class ScanError(Exception):
    """Base class for every failure the scanner raises on purpose."""


class InvalidInput(ScanError):
    """Bad or missing request input, raised before any work starts."""


class RenderFailure(ScanError):
    """A single page could not be rendered (navigation error, timeout, non-HTML)."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to render {url}: {reason}")
        self.url = url
        self.reason = reason


class AnalysisFailure(ScanError):
    """The model call failed for a reason other than quota exhaustion."""


class QuotaExceeded(AnalysisFailure):
    """The model provider reported a rate limit or exhausted quota.

    Callers must stop issuing model calls for the rest of the run.
    """
