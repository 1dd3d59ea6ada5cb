class AuditError(Exception):
    """Base class for failures inside a single audit attempt."""


class AuditExtractionError(AuditError):
    """Arguments or return value did not have the shape the binding expects."""


class AuditSerializationError(AuditError):
    """An entity snapshot could not be encoded to text."""


class AuditContextError(AuditError):
    """Actor or request context could not be read."""


class AuditPersistenceError(AuditError):
    """The storage backend rejected or failed the append."""
