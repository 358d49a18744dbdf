"""Password validation functions."""

PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 128


def validate_password_strength(password: str) -> str:
    """Validate password requirements.

    Requirements:
    - Between 6 and 128 characters
    - Not made up only of whitespace

    Args:
        password: Password string to validate

    Returns:
        The validated password string, unchanged

    Raises:
        ValueError: If password doesn't meet the requirements

    Examples:
        >>> validate_password_strength("pw123456")
        'pw123456'
        >>> validate_password_strength("short")
        Traceback (most recent call last):
        ...
        ValueError: Password must be at least 6 characters long

    """
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long")
    if len(password) > PASSWORD_MAX_LENGTH:
        raise ValueError(f"Password must be at most {PASSWORD_MAX_LENGTH} characters long")
    if not password.strip():
        raise ValueError("Password cannot be blank")
    return password
