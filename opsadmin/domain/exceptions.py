# opsadmin/domain/exceptions.py

"""
Application exceptions.

Domain exceptions carry a message, an ``internal_code`` and optional
structured ``details``. They know nothing about HTTP: the exception
middleware maps ``internal_code`` to a status code.
"""

from typing import Any, Dict, Iterable, Optional


class DomainException(Exception):
    """
    Base exception for every application error.
    """

    internal_code = "DOMAIN_ERROR"

    def __init__(
            self,
            detail: str = "Domain error",
            internal_code: Optional[str] = None,
            details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(detail)
        self.detail = detail
        if internal_code is not None:
            self.internal_code = internal_code
        self.details = details or {}

    def __str__(self) -> str:
        return self.detail


class ResourceNotFoundException(DomainException):
    """Resource not found."""

    internal_code = "RESOURCE_NOT_FOUND"

    def __init__(self, detail: str = "Resource not found", resource_id: Any = None):
        resource_info = f" (ID: {resource_id})" if resource_id is not None else ""
        super().__init__(detail=f"{detail}{resource_info}")
        self.resource_id = resource_id


class TargetNotFoundException(ResourceNotFoundException):
    """
    The entity whose associations are being changed (user or role)
    does not exist.
    """

    internal_code = "TARGET_NOT_FOUND"

    def __init__(self, entity: str, resource_id: Any):
        super().__init__(detail=f"{entity} not found", resource_id=resource_id)
        self.entity = entity
        self.details = {"entity": entity, "id": resource_id}


class AssociationCandidateNotFoundException(DomainException):
    """
    One or more ids in a submitted association set do not exist.

    This is a caller error, reported as a single aggregate condition.
    """

    internal_code = "INVALID_ASSOCIATION_IDS"

    def __init__(self, entity: str, missing_ids: Iterable[int]):
        missing = sorted(set(missing_ids))
        super().__init__(
            detail=f"One or more specified {entity} IDs do not exist",
            details={"entity": entity, "missingIds": missing},
        )
        self.entity = entity
        self.missing_ids = missing


class ResourceAlreadyExistsException(DomainException):
    """Resource already exists."""

    internal_code = "RESOURCE_ALREADY_EXISTS"

    def __init__(self, detail: str = "Resource already exists", resource_id: Any = None):
        resource_info = f" (ID: {resource_id})" if resource_id is not None else ""
        super().__init__(detail=f"{detail}{resource_info}")


class InvalidCredentialsException(DomainException):
    """Invalid credentials."""

    internal_code = "INVALID_CREDENTIALS"

    def __init__(self, detail: str = "Invalid credentials"):
        super().__init__(detail=detail)


class DatabaseOperationException(DomainException):
    """Storage or transaction failure."""

    internal_code = "DATABASE_OPERATION_ERROR"

    def __init__(self, detail: str = "Error executing database operation",
                 original_error: Optional[Exception] = None):
        super().__init__(detail=detail)
        self.original_error = original_error


class InvalidInputException(DomainException):
    """Invalid input data."""

    internal_code = "INVALID_INPUT"

    def __init__(self, detail: str = "Invalid input data", fields: Optional[Dict[str, str]] = None):
        field_errors = ""
        if fields:
            field_errors = ": " + ", ".join([f"{field}: {error}" for field, error in fields.items()])
        super().__init__(detail=f"{detail}{field_errors}", details=dict(fields or {}))
