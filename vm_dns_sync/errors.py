class VmDnsSyncError(Exception):
    """Base class for every failure that aborts a sync run."""


class ConfigError(VmDnsSyncError):
    """Missing environment variable or unreadable/malformed credential file."""


class ProviderError(VmDnsSyncError):
    """Compute inventory listing or credential resolution failed."""


class ZoneListError(VmDnsSyncError):
    pass


class RecordFetchError(VmDnsSyncError):
    pass


class AmbiguousRecordError(VmDnsSyncError):
    """More than one A record for a hostname, or one with empty content."""


class MutationError(VmDnsSyncError):
    """A create, update or delete call was rejected."""
