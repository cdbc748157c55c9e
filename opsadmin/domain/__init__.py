# opsadmin/domain/__init__.py

"""
Domain layer: exceptions, audit value objects and the request classifier.
"""

from opsadmin.domain.exceptions import (
    DomainException,
    ResourceNotFoundException,
    TargetNotFoundException,
    AssociationCandidateNotFoundException,
    ResourceAlreadyExistsException,
    InvalidCredentialsException,
    DatabaseOperationException,
    InvalidInputException,
)
