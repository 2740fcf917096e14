"""
Collection errors.

Every error aborts the current cycle of the collector that raised it and
is returned to the registry. Nothing is retried inside a collector.
"""


class CollectorError(Exception):
    """Base exception for a failed collection cycle."""


class DiscoveryError(CollectorError):
    """The instance tree could not be enumerated."""


class IdentityError(CollectorError):
    """A discovered path does not match the expected naming pattern."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(message)


class ReadError(CollectorError):
    """A counter value could not be retrieved or parsed."""

    def __init__(self, message: str, identity: tuple[str, ...] = (), counter: str | None = None):
        self.identity = identity
        self.counter = counter
        super().__init__(message)
