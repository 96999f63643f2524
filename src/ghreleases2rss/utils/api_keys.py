"""API key validation utilities.

Catches the usual copy-paste mistakes in Miniflux API tokens before the
first request is made.
"""


class APIKeyError(ValueError):
    """Raised when API key is invalid or missing."""

    pass


def validate_api_key(key: str | None, key_name: str = "MINIFLUX_API_KEY") -> str:
    """Validate API key format and return cleaned key.

    Args:
        key: The API key to validate (may be None)
        key_name: Environment variable name (for error messages)

    Returns:
        Validated and stripped API key

    Raises:
        APIKeyError: If key is missing, empty, or malformed

    Example:
        >>> key = validate_api_key(config.miniflux_api_key)
    """
    if key is None or not key.strip():
        raise APIKeyError(
            f"Miniflux API key is required.\n"
            f"Set the {key_name} environment variable.\n"
            f"Example: export {key_name}='your-api-key-here'"
        )

    stripped = key.strip()
    if (stripped.startswith('"') and stripped.endswith('"')) or (
        stripped.startswith("'") and stripped.endswith("'")
    ):
        raise APIKeyError(
            f"Miniflux API key should not be quoted.\n"
            f"Remove quotes from {key_name} environment variable.\n"
            f"Example: export {key_name}=your-api-key-here"
        )

    # Checked before stripping so a trailing newline is reported too
    if any(char in key for char in ["\n", "\r", "\0", "\t"]):
        raise APIKeyError(
            f"Miniflux API key contains invalid characters.\n"
            f"API keys should not contain newlines or control characters.\n"
            f"Check your {key_name} environment variable."
        )

    return stripped

