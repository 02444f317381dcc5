from __future__ import annotations

from flask import Flask, g

from ..container import Container
from ..core.enums import Permission, Role
from ..core.exceptions import ValidationError
from ..web.auth import login_required
from ..web.params import json_body, ok


def _parse_role(value: str) -> Role:
    try:
        return Role(value)
    except ValueError:
        raise ValidationError(f"Unknown role: {value}")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/permissions", endpoint="permissions_matrix")
    @login_required
    def matrix():
        return ok(
            {
                "roles": container.permission_service.matrix(),
                "permissions": [p.value for p in Permission],
            }
        )

    @app.route("/api/permissions/<role>", methods=["PUT"], endpoint="permissions_set")
    @login_required
    def set_permissions(role: str):
        data = json_body()
        permissions = data.get("permissions")
        if not isinstance(permissions, list):
            raise ValidationError("permissions must be a list")
        granted = container.permission_service.set_role_permissions(
            current_role=g.user.role,
            role=_parse_role(role),
            permissions=permissions,
        )
        return ok(sorted(p.value for p in granted))

    @app.route("/api/permissions/reset", methods=["POST"], endpoint="permissions_reset")
    @login_required
    def reset():
        container.permission_service.reset_defaults(current_role=g.user.role)
        return ok(container.permission_service.matrix())
