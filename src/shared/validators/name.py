"""Display name validation."""

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50


def validate_display_name(name: str) -> str:
    """Trim surrounding whitespace and check the name is 2-50 characters.

    Raises:
        ValueError: If the trimmed name is too short or too long

    """
    name = " ".join(name.split())
    if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
        raise ValueError(f"Name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters")
    return name
