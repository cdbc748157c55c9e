# opsadmin/shared/utils/input_validation.py

import re
from typing import Optional, Tuple


class InputValidator:
    """
    Validation and sanitization of user input,
    complementing the Pydantic validations.
    """

    # Limits
    MAX_NAME_LENGTH = 100
    MAX_PASSWORD_LENGTH = 72  # bcrypt limit
    MIN_PASSWORD_LENGTH = 8
    MAX_IDENTIFIER_LENGTH = 50

    # Letters (accented included), digits, spaces, hyphens, apostrophes and dots
    NAME_PATTERN = re.compile(r'^[A-Za-zÀ-ÖØ-öø-ÿ0-9\s\-\'\._]+$')
    # At least one lower case, one upper case, one digit and one special character
    PASSWORD_PATTERN = re.compile(r'^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&#])[A-Za-z\d@$!%*?&#]{8,}$')
    # Permission resource / action parts
    IDENTIFIER_PATTERN = re.compile(r'^[a-z][a-z0-9_\-]*$')
    DANGEROUS_CHARS = re.compile(r'[<>\'";%{}\[\]]')

    @classmethod
    def validate_name(cls, name: str) -> Tuple[bool, Optional[str]]:
        """
        Validate a display name or role name.

        Returns:
            Tuple (valid, error_message)
        """
        if not name or not name.strip():
            return False, "Name cannot be empty"

        if len(name) > cls.MAX_NAME_LENGTH:
            return False, f"Name is too long (maximum {cls.MAX_NAME_LENGTH} characters)"

        if cls.DANGEROUS_CHARS.search(name):
            return False, "Name contains forbidden characters"

        if not cls.NAME_PATTERN.match(name):
            return False, "Name contains invalid characters"

        return True, None

    @classmethod
    def sanitize_name(cls, name: str) -> str:
        """Trim, collapse inner whitespace and truncate."""
        sanitized = re.sub(r'\s+', ' ', name.strip())
        return sanitized[:cls.MAX_NAME_LENGTH]

    @classmethod
    def validate_password(cls, password: str) -> Tuple[bool, Optional[str]]:
        if not password:
            return False, "Password cannot be empty"

        if len(password) < cls.MIN_PASSWORD_LENGTH:
            return False, f"Password must have at least {cls.MIN_PASSWORD_LENGTH} characters"

        if len(password) > cls.MAX_PASSWORD_LENGTH:
            return False, f"Password is too long (maximum {cls.MAX_PASSWORD_LENGTH} characters)"

        if not cls.PASSWORD_PATTERN.match(password):
            return False, ("Password must contain at least 1 upper case letter, 1 lower case letter, "
                           "1 digit and 1 special character")

        return True, None

    @classmethod
    def validate_identifier(cls, value: str) -> Tuple[bool, Optional[str]]:
        """
        Validate a permission resource or action (ex: ``user``, ``service-instance``).
        """
        if not value:
            return False, "Value cannot be empty"

        if len(value) > cls.MAX_IDENTIFIER_LENGTH:
            return False, f"Value is too long (maximum {cls.MAX_IDENTIFIER_LENGTH} characters)"

        if not cls.IDENTIFIER_PATTERN.match(value):
            return False, "Value must start with a lower case letter and contain only a-z, 0-9, '_' or '-'"

        return True, None
