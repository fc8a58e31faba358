"""FastAPI dependencies: database, service registry and the signed-in user."""

from typing import Annotated

from fastapi import Depends, Request

from property_portfolio.config import get_settings
from property_portfolio.container import ServiceRegistry, get_database
from property_portfolio.domain.users import User
from property_portfolio.repositories.sqlite import SQLiteDatabase
from property_portfolio.services.auth import require_write_access


def get_db() -> SQLiteDatabase:
    """Get the database instance.

    Used as a FastAPI dependency and can be overridden in tests using
    app.dependency_overrides.
    """
    return get_database()


def get_services(db: Annotated[SQLiteDatabase, Depends(get_db)]) -> ServiceRegistry:
    return ServiceRegistry(db, get_settings())


Services = Annotated[ServiceRegistry, Depends(get_services)]


def session_token(request: Request) -> str | None:
    """Read the session token from the cookie, falling back to a Bearer header."""
    token = request.cookies.get(get_settings().session_cookie_name)
    if token:
        return token
    authorization = request.headers.get("authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials:
        return credentials.strip()
    return None


def get_current_user(request: Request, services: Services) -> User:
    return services.auth_service.resolve_session(session_token(request))


CurrentUser = Annotated[User, Depends(get_current_user)]


def get_writer(user: CurrentUser) -> User:
    require_write_access(user)
    return user


Writer = Annotated[User, Depends(get_writer)]


__all__ = [
    "CurrentUser",
    "Services",
    "Writer",
    "get_current_user",
    "get_db",
    "get_services",
    "get_writer",
    "session_token",
]
