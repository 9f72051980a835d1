"""Typed failures raised by deck-monitor components.

Each error carries a machine-readable `code` and a human-readable `detail`.
The session controller converts them into `ErrorResult` records.
"""


class MonitorError(Exception):
    """Base class for all deck-monitor failures."""

    code = "monitor.error"

    def __init__(self, detail: str, code: str | None = None):
        super().__init__(detail)
        self.detail = detail
        if code is not None:
            self.code = code


class ProviderError(MonitorError):
    """The snapshot provider could not read the document."""

    code = "provider.failed"


class NotInitializedError(MonitorError):
    """An operation requires an initialized, monitoring session."""

    code = "session.not_initialized"


class InvalidSessionStateError(MonitorError):
    """The operation is not valid in the session's current state."""

    code = "session.invalid_state"


class SnapshotStoreError(MonitorError):
    """The snapshot store could not complete a read or write."""

    code = "store.failed"


class ConfigError(MonitorError):
    """The configuration file or environment is invalid."""

    code = "config.invalid"
