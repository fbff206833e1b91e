"""Relay error types."""


class RelayError(Exception):
    """Base class for relay failures."""

    pass


class UpstreamUnavailableError(RelayError):
    """Raised when the hosted model fails before any frame is sent."""

    pass


class UpstreamModelError(RelayError):
    """Raised when the hosted model reports an error inside its stream."""

    pass
