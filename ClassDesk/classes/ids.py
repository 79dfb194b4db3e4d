import secrets

ID_LENGTH = 16


def generate_id() -> str:
    """Random URL-safe identity shared by every record type except users."""
    return secrets.token_urlsafe(12)[:ID_LENGTH]
