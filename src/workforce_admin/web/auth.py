from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import current_app, g, session

from ..core.enums import Permission, Role
from ..core.exceptions import AuthenticationError, AuthorizationError
from ..profiles.service import SessionUser

CONTAINER_KEY = "workforce_admin.container"


def get_container():
    return current_app.extensions[CONTAINER_KEY]


def store_session_user(user: SessionUser, *, remember: bool = False) -> None:
    session.clear()
    session.permanent = bool(remember)
    session["profile_id"] = user.profile_id
    session["name"] = user.full_name
    session["email"] = user.email
    session["role"] = user.role.value


def current_user() -> Optional[SessionUser]:
    if "profile_id" not in session:
        return None
    return SessionUser(
        profile_id=int(session["profile_id"]),
        full_name=session.get("name", ""),
        email=session.get("email", ""),
        role=Role(session["role"]),
    )


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        user = current_user()
        if user is None:
            raise AuthenticationError("Please sign in to continue")
        g.user = user
        return view(*args, **kwargs)

    return wrapper


def permission_required(*permissions: Permission):
    """Allow the view when the session role holds any of the given permissions."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            user = current_user()
            if user is None:
                raise AuthenticationError("Please sign in to continue")
            service = get_container().permission_service
            if not any(service.has_permission(user.role, p) for p in permissions):
                raise AuthorizationError("You do not have permission to do this")
            g.user = user
            return view(*args, **kwargs)

        return wrapper

    return decorator
