from todo_api.config import AUTH_HEADER


def auth(token: str) -> dict:
    """Request headers carrying ``token``."""
    return {AUTH_HEADER: token}
