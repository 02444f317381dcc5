from __future__ import annotations

from flask import Flask, request

from ..container import Container
from ..core.enums import Permission
from ..web.auth import permission_required
from ..web.params import arg_id, body_date, body_id, body_optional_date, convert_dates, json_body, ok, patch_body, required


def register(app: Flask, container: Container) -> None:
    @app.route("/api/projects", endpoint="projects_list")
    @permission_required(Permission.PROJECTS_VIEW)
    def list_projects():
        projects = container.project_service.list(client_id=arg_id("client_id"), status=request.args.get("status"))
        return ok([p.to_dict() for p in projects])

    @app.route("/api/projects/<int:project_id>", endpoint="projects_get")
    @permission_required(Permission.PROJECTS_VIEW)
    def get_project(project_id: int):
        return ok(container.project_service.get(project_id).to_dict())

    @app.route("/api/projects", methods=["POST"], endpoint="projects_create")
    @permission_required(Permission.PROJECTS_MANAGE)
    def create_project():
        data = json_body()
        project_id = container.project_service.create(
            name=required(data, "name"),
            client_id=body_id(data, "client_id"),
            start_date=body_date(data, "start_date"),
            end_date=body_optional_date(data, "end_date"),
            description=data.get("description"),
            budget=data.get("budget") or 0,
        )
        return ok(container.project_service.get(project_id).to_dict(), 201)

    @app.route("/api/projects/<int:project_id>", methods=["PATCH"], endpoint="projects_update")
    @permission_required(Permission.PROJECTS_MANAGE)
    def update_project(project_id: int):
        data = convert_dates(patch_body("project_id"), "start_date", "end_date", nullable=("end_date",))
        return ok(container.project_service.update(project_id=project_id, **data).to_dict())

    @app.route("/api/projects/<int:project_id>/status", methods=["POST"], endpoint="projects_set_status")
    @permission_required(Permission.PROJECTS_MANAGE)
    def set_project_status(project_id: int):
        data = json_body()
        project = container.project_service.set_status(project_id=project_id, status=required(data, "status"))
        return ok(project.to_dict())

    @app.route("/api/projects/<int:project_id>", methods=["DELETE"], endpoint="projects_delete")
    @permission_required(Permission.PROJECTS_MANAGE)
    def delete_project(project_id: int):
        container.project_service.delete(project_id=project_id)
        return ok()
