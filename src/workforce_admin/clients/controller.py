from __future__ import annotations

from flask import Flask, request

from ..container import Container
from ..core.enums import Permission
from ..web.auth import permission_required
from ..web.params import json_body, ok, patch_body, required


def register(app: Flask, container: Container) -> None:
    @app.route("/api/clients", endpoint="clients_list")
    @permission_required(Permission.CLIENTS_VIEW)
    def list_clients():
        clients = container.client_service.list(status=request.args.get("status"), search=request.args.get("q"))
        return ok([c.to_dict() for c in clients])

    @app.route("/api/clients/<int:client_id>", endpoint="clients_get")
    @permission_required(Permission.CLIENTS_VIEW)
    def get_client(client_id: int):
        return ok(container.client_service.get(client_id).to_dict())

    @app.route("/api/clients", methods=["POST"], endpoint="clients_create")
    @permission_required(Permission.CLIENTS_MANAGE)
    def create_client():
        data = json_body()
        client_id = container.client_service.create(
            name=required(data, "name"),
            email=required(data, "email"),
            company=required(data, "company"),
            phone=data.get("phone"),
        )
        return ok(container.client_service.get(client_id).to_dict(), 201)

    @app.route("/api/clients/<int:client_id>", methods=["PATCH"], endpoint="clients_update")
    @permission_required(Permission.CLIENTS_MANAGE)
    def update_client(client_id: int):
        return ok(container.client_service.update(client_id=client_id, **patch_body("client_id")).to_dict())

    @app.route("/api/clients/<int:client_id>/status", methods=["POST"], endpoint="clients_set_status")
    @permission_required(Permission.CLIENTS_MANAGE)
    def set_client_status(client_id: int):
        data = json_body()
        return ok(container.client_service.set_status(client_id=client_id, status=required(data, "status")).to_dict())

    @app.route("/api/clients/<int:client_id>", methods=["DELETE"], endpoint="clients_delete")
    @permission_required(Permission.CLIENTS_MANAGE)
    def delete_client(client_id: int):
        container.client_service.delete(client_id=client_id)
        return ok()
