"""
Exceptions raised by the record model and the key naming layer.

Validation problems are reported through return values
(see ``ValidationResult``); everything here signals a caller contract
violation or an unavailable facility.
"""


class RecordKitError(Exception):
    """Base exception for all recordkit errors."""
    pass


class NotFoundError(RecordKitError, LookupError):
    """An item, vertex, edge or row lookup did not match anything."""
    pass


class ModelMismatchError(RecordKitError, TypeError):
    """A payload kind does not agree with the graph's data model."""
    pass


class MalformedKeyError(RecordKitError, ValueError):
    """A store key cannot be encoded or decoded."""
    pass


class HashUnavailableError(RecordKitError):
    """The content digest could not be computed."""
    pass


class ValueConversionError(RecordKitError, ValueError):
    """A stored string value cannot be read back as the requested type."""
    pass


class GraphStructureError(RecordKitError):
    """The operation is not permitted by the graph's structure."""
    pass


class SchemaError(RecordKitError):
    """A grid schema change was attempted while rows exist."""
    pass
