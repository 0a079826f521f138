"""
Custom exception classes for store operations.
"""


class StoreException(Exception):
    """Base exception for store operations."""

    pass


class EntityNotFoundException(StoreException):
    """Entity not found in the store."""

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with ID {entity_id} not found")


class ValidationError(StoreException):
    """Submitted data rejected at the form boundary."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")
