from starlette.requests import Request

from .repository import UserRepository


def get_user_repository(request: Request) -> UserRepository:
    """FastAPI dependency: the repository the app factory attached."""
    repository = getattr(request.app.state, "user_repository", None)
    if repository is None:
        raise RuntimeError("User repository not configured. Is the app started?")
    return repository
