"""
Error taxonomy for playlist generation.

Failures with a defined fallback (empty filtered pool, unmatched pick) are
handled inline and never reach these classes. Everything else propagates to
the caller as one of the exceptions below.
"""


class PipelineError(Exception):
    """Base exception for playlist generation failures"""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class CatalogEmptyError(PipelineError):
    """Raised when no catalog tracks are available for selection"""
    pass


class RetryableSelectionError(PipelineError):
    """Base for failures the orchestrator may retry once with relaxed filters"""
    pass


class ProviderUnavailableError(RetryableSelectionError):
    """Raised when the LLM provider fails at the transport level or returns an error status"""
    pass


class MalformedResponseError(RetryableSelectionError):
    """Raised when the LLM response lacks the required structured fields or valid picks"""
    pass


class ReconciliationEmptyError(RetryableSelectionError):
    """Raised when none of the LLM picks could be matched to the catalog"""
    pass
