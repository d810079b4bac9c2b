import secrets


def random_file_name(extension: str) -> str:
    """base64url of 32 random bytes plus extension."""
    return f"{secrets.token_urlsafe(32)}.{extension}"
