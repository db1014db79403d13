"""Error taxonomy for provider calls.

Transport failures are left as httpx.TransportError subclasses; everything
else a provider can do wrong is expressed here.
"""

from typing import Optional


class ProviderError(Exception):
    """Base class for failures talking to an upstream provider."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        self.message = message
        super().__init__(f"[{provider}] {message}")


class ProviderHttpError(ProviderError):
    """The provider answered with a non-success HTTP status."""

    def __init__(self, provider: str, status_code: int, message: str = ""):
        self.status_code = status_code
        detail = f"HTTP {status_code}"
        if message:
            detail = f"{detail}: {message}"
        super().__init__(provider, detail)

    @property
    def is_transient(self) -> bool:
        """Rate limiting and server-side errors."""
        return self.status_code == 429 or self.status_code >= 500

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class ProviderResponseError(ProviderError):
    """The response body was not the JSON shape we expected."""


class MailTmError(ProviderError):
    """mail.tm failures, including calls made before authenticating."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__("MailTm", message)


class ConfigurationError(Exception):
    """A required setting (e.g. an API token) is missing."""


def is_not_found(exc: BaseException) -> bool:
    """Predicate for ResilientExecutor.execute(not_found=...)."""
    return isinstance(exc, ProviderHttpError) and exc.is_not_found
