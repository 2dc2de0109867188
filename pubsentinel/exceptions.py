"""Custom exceptions for PubSentinel."""


class PubSentinelError(Exception):
    """Base exception for all PubSentinel errors."""


class ConfigError(PubSentinelError):
    """Raised when the run cannot start: missing config file or required credential."""


class ManifestFetchError(PubSentinelError):
    """Raised when a repository's manifest cannot be fetched or decoded."""


class ManifestParseError(PubSentinelError):
    """Raised when manifest content is not valid YAML."""


class RegistryError(PubSentinelError):
    """Raised when a registry cannot resolve the latest version of a package or runtime."""

    def __init__(self, subject: str, reason: str, status_code: int | None = None):
        self.subject = subject
        self.reason = reason
        self.status_code = status_code
        status = f" (HTTP {status_code})" if status_code is not None else ""
        super().__init__(f"failed to resolve latest version for {subject}{status}: {reason}")


class SlackApiError(PubSentinelError):
    """Raised when a Slack Web API method answers with ``ok: false``."""

    def __init__(self, method: str, error: str):
        self.method = method
        self.error = error
        super().__init__(f"slack {method} failed: {error}")


class UploadError(PubSentinelError):
    """Raised when one phase of the external file upload fails."""

    def __init__(self, phase: str, reason: str):
        self.phase = phase
        self.reason = reason
        super().__init__(f"upload {phase} phase failed: {reason}")
