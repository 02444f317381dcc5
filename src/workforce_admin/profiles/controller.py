from __future__ import annotations

from flask import Flask, g, request, session

from ..container import Container
from ..core.enums import Permission
from ..core.exceptions import AuthorizationError
from ..web.auth import login_required, permission_required, store_session_user
from ..web.params import arg_bool, body_optional_date, json_body, ok, patch_body, required


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def login():
        data = json_body()
        user = container.auth_service.authenticate(str(data.get("email", "")), str(data.get("password", "")))
        store_session_user(user, remember=bool(data.get("remember_me")))
        app.logger.info("Profile %s signed in", user.profile_id)
        return ok(
            {
                "profile_id": user.profile_id,
                "full_name": user.full_name,
                "email": user.email,
                "role": user.role.value,
                "permissions": sorted(p.value for p in container.permission_service.permissions_for(user.role)),
            }
        )

    @app.route("/api/auth/logout", methods=["POST"], endpoint="auth_logout")
    def logout():
        session.clear()
        return ok()

    @app.route("/api/auth/me", endpoint="auth_me")
    @login_required
    def me():
        profile = container.profile_service.get(g.user.profile_id)
        data = profile.to_public_dict()
        data["permissions"] = sorted(p.value for p in container.permission_service.permissions_for(profile.role))
        return ok(data)

    @app.route("/api/auth/change-password", methods=["POST"], endpoint="auth_change_password")
    @login_required
    def change_password():
        data = json_body()
        container.auth_service.change_password(
            profile_id=g.user.profile_id,
            current_password=str(data.get("current_password", "")),
            new_password=str(data.get("new_password", "")),
        )
        return ok()

    @app.route("/api/profiles", endpoint="profiles_list")
    @permission_required(Permission.EMPLOYEES_VIEW)
    def list_profiles():
        profiles = container.profile_service.list(
            role=request.args.get("role") or None,
            is_active=arg_bool("active"),
            search=request.args.get("q"),
        )
        return ok([p.to_public_dict() for p in profiles])

    @app.route("/api/profiles/stats", endpoint="profiles_stats")
    @permission_required(Permission.EMPLOYEES_VIEW)
    def profile_stats():
        return ok(container.profile_service.stats())

    @app.route("/api/profiles/<int:profile_id>", endpoint="profiles_get")
    @login_required
    def get_profile(profile_id: int):
        if profile_id != g.user.profile_id and not container.permission_service.has_permission(
            g.user.role, Permission.EMPLOYEES_VIEW
        ):
            raise AuthorizationError("You can only view your own profile")
        return ok(container.profile_service.get(profile_id).to_public_dict())

    @app.route("/api/profiles", methods=["POST"], endpoint="profiles_create")
    @permission_required(Permission.EMPLOYEES_MANAGE)
    def create_profile():
        data = json_body()
        profile_id = container.profile_service.create_profile(
            current_role=g.user.role,
            email=required(data, "email"),
            full_name=required(data, "full_name"),
            password=str(data.get("password") or ""),
            role=data.get("role") or "employee",
            phone=data.get("phone"),
            employment_type=data.get("employment_type"),
            hourly_rate=data.get("hourly_rate") or 0,
            salary=data.get("salary"),
            tax_file_number=data.get("tax_file_number"),
            start_date=body_optional_date(data, "start_date"),
            full_address=data.get("full_address"),
        )
        return ok(container.profile_service.get(profile_id).to_public_dict(), 201)

    @app.route("/api/profiles/<int:profile_id>", methods=["PATCH"], endpoint="profiles_update")
    @permission_required(Permission.EMPLOYEES_MANAGE)
    def update_profile(profile_id: int):
        data = patch_body("current_role", "profile_id")
        if "start_date" in data:
            data["start_date"] = body_optional_date(data, "start_date")
        profile = container.profile_service.update_profile(current_role=g.user.role, profile_id=profile_id, **data)
        return ok(profile.to_public_dict())

    @app.route("/api/profiles/<int:profile_id>/active", methods=["POST"], endpoint="profiles_set_active")
    @permission_required(Permission.EMPLOYEES_MANAGE)
    def set_active(profile_id: int):
        data = json_body()
        container.profile_service.set_active(
            profile_id=profile_id,
            is_active=bool(data.get("is_active", True)),
            current_profile_id=g.user.profile_id,
        )
        return ok(container.profile_service.get(profile_id).to_public_dict())

    @app.route("/api/profiles/<int:profile_id>", methods=["DELETE"], endpoint="profiles_delete")
    @permission_required(Permission.EMPLOYEES_MANAGE)
    def delete_profile(profile_id: int):
        container.profile_service.delete_profile(current_role=g.user.role, profile_id=profile_id)
        return ok()
