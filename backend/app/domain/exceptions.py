"""Domain-specific exceptions — framework-independent."""


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class ValidationFailedError(Exception):
    """Raised when submitted values fail client-side validation.

    ``errors`` maps a field path (``name``, ``contacts.0.email``) to a
    human-readable message.
    """

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        summary = "; ".join(f"{field}: {message}" for field, message in errors.items())
        super().__init__(f"Validation failed: {summary}")


class StorageError(Exception):
    """Raised when the blob store rejects an upload or removal."""

    def __init__(self, bucket: str, path: str, message: str):
        self.bucket = bucket
        self.path = path
        self.message = message
        super().__init__(f"[{bucket}] {path}: {message}")


class PersistenceError(Exception):
    """Raised when a write against the relational store fails."""

    def __init__(self, operation: str, message: str):
        self.operation = operation
        self.message = message
        super().__init__(f"{operation} failed: {message}")


class ClientTransitionError(Exception):
    """Raised when archiving, restoring or purging a client fails.

    The transition name lets the editor render the failure next to the
    confirmation that triggered it.
    """

    def __init__(self, transition: str, client_id: str, message: str):
        self.transition = transition
        self.client_id = client_id
        self.message = message
        super().__init__(message)


class EditorStateError(Exception):
    """Raised when an editor operation is not allowed in the current state."""
