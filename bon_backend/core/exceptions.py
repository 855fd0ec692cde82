from typing import List, Optional


class BonError(Exception):
    """Base exception for salary-advance business errors."""

    code = "BON_ERROR"


class ValidationError(BonError):
    """One or more business rules rejected an application.

    Carries every violation plus the advisory warnings, never just the first.
    """

    code = "VALIDATION_ERROR"

    def __init__(self, errors: List[str], warnings: Optional[List[str]] = None):
        self.errors = list(errors)
        self.warnings = list(warnings or [])
        super().__init__("; ".join(self.errors))


class NotFoundError(BonError):
    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class StateError(BonError):
    """The requested transition is illegal for the entity's current status."""

    code = "STATE_ERROR"

    def __init__(self, message: str, status: Optional[str] = None):
        self.status = status
        super().__init__(message)


class ConfigError(BonError):
    """Rules configuration values are out of range."""

    code = "CONFIG_ERROR"

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")
