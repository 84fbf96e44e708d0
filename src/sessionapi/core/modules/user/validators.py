from sessionapi.errors import ValidationError


def validate_username(username: str) -> None:
    """Validate username is non-empty and free of whitespace."""
    if not username or any(char.isspace() for char in username):
        raise ValidationError("Username must be non-empty and cannot contain whitespace")


def validate_password(password: str) -> None:
    """Validate password meets requirements.

    Requirements:
    - No whitespace characters
    - Minimum length of 2 characters

    Raises:
        ValidationError: If password doesn't meet requirements
    """
    if len(password) < 2:
        raise ValidationError("Password must be at least 2 characters long")

    if any(char.isspace() for char in password):
        raise ValidationError("Password cannot contain whitespace characters")
