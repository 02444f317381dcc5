from __future__ import annotations

from flask import Flask, g, request

from ..container import Container
from ..core.enums import Permission
from ..core.exceptions import AuthorizationError
from ..web.auth import permission_required
from ..web.params import (
    arg_bool,
    arg_date,
    arg_id,
    body_date,
    body_id,
    body_ids,
    body_optional_date,
    body_optional_id,
    convert_dates,
    json_body,
    ok,
    patch_body,
    required,
)


def register(app: Flask, container: Container) -> None:
    payroll = container.payroll_service
    bulk = container.bulk_payroll_service

    def _can_manage() -> bool:
        return container.permission_service.has_permission(g.user.role, Permission.PAYROLL_MANAGE)

    @app.route("/api/payroll", endpoint="payroll_list")
    @permission_required(Permission.PAYROLL_VIEW, Permission.DASHBOARD_VIEW)
    def list_payrolls():
        # Profiles without payroll_view only see their own payslips.
        profile_id = arg_id("profile_id")
        if not container.permission_service.has_permission(g.user.role, Permission.PAYROLL_VIEW):
            profile_id = g.user.profile_id
        items = payroll.list(
            profile_id=profile_id,
            status=request.args.get("status"),
            start_date=arg_date("start"),
            end_date=arg_date("end"),
        )
        return ok([p.to_dict() for p in items], totals=payroll.totals(items))

    @app.route("/api/payroll/<int:payroll_id>", endpoint="payroll_get")
    @permission_required(Permission.PAYROLL_VIEW, Permission.DASHBOARD_VIEW)
    def get_payroll(payroll_id: int):
        item = payroll.get(payroll_id)
        if item.profile_id != g.user.profile_id and not container.permission_service.has_permission(
            g.user.role, Permission.PAYROLL_VIEW
        ):
            raise AuthorizationError("You can only view your own payroll")
        data = item.to_dict()
        if _can_manage():
            data["linked_entry_ids"] = container.repos.payrolls.linked_entry_ids(payroll_id)
        return ok(data)

    @app.route("/api/payroll/preview", methods=["POST"], endpoint="payroll_preview")
    @permission_required(Permission.PAYROLL_MANAGE)
    def preview():
        data = json_body()
        lines = payroll.preview(
            start=body_date(data, "start"),
            end=body_date(data, "end"),
            profile_ids=body_ids(data, "profile_ids") or None,
        )
        return ok([line.to_dict() for line in lines])

    @app.route("/api/payroll/generate", methods=["POST"], endpoint="payroll_generate")
    @permission_required(Permission.PAYROLL_MANAGE)
    def generate():
        data = json_body()
        created = payroll.generate(
            start=body_date(data, "start"),
            end=body_date(data, "end"),
            profile_ids=body_ids(data, "profile_ids") or None,
            created_by=g.user.profile_id,
        )
        return ok([p.to_dict() for p in created], 201)

    @app.route("/api/payroll", methods=["POST"], endpoint="payroll_create_manual")
    @permission_required(Permission.PAYROLL_MANAGE)
    def create_manual():
        data = json_body()
        payroll_id = payroll.create_manual(
            profile_id=body_id(data, "profile_id"),
            pay_period_start=body_date(data, "pay_period_start"),
            pay_period_end=body_date(data, "pay_period_end"),
            total_hours=required(data, "total_hours"),
            hourly_rate=data.get("hourly_rate"),
            deductions=data.get("deductions") or 0,
            bank_account_id=body_optional_id(data, "bank_account_id"),
            created_by=g.user.profile_id,
        )
        return ok(payroll.get(payroll_id).to_dict(), 201)

    @app.route("/api/payroll/<int:payroll_id>", methods=["PATCH"], endpoint="payroll_update")
    @permission_required(Permission.PAYROLL_MANAGE)
    def update(payroll_id: int):
        data = convert_dates(patch_body("payroll_id"), "pay_period_start", "pay_period_end")
        return ok(payroll.update(payroll_id=payroll_id, **data).to_dict())

    @app.route("/api/payroll/<int:payroll_id>/recalculate", methods=["POST"], endpoint="payroll_recalculate")
    @permission_required(Permission.PAYROLL_MANAGE)
    def recalculate(payroll_id: int):
        return ok(payroll.recalculate_from_linked_hours(payroll_id=payroll_id).to_dict())

    @app.route("/api/payroll/<int:payroll_id>/approve", methods=["POST"], endpoint="payroll_approve")
    @permission_required(Permission.PAYROLL_PROCESS)
    def approve(payroll_id: int):
        return ok(payroll.approve(payroll_id=payroll_id).to_dict())

    @app.route("/api/payroll/<int:payroll_id>/pay", methods=["POST"], endpoint="payroll_mark_paid")
    @permission_required(Permission.PAYROLL_PROCESS)
    def mark_paid(payroll_id: int):
        data = json_body()
        item = payroll.mark_paid(
            payroll_id=payroll_id,
            bank_account_id=body_optional_id(data, "bank_account_id"),
            paid_by=g.user.profile_id,
            paid_on=body_optional_date(data, "paid_on"),
        )
        return ok(item.to_dict())

    @app.route("/api/payroll/<int:payroll_id>", methods=["DELETE"], endpoint="payroll_delete")
    @permission_required(Permission.PAYROLL_MANAGE)
    def delete(payroll_id: int):
        payroll.delete(payroll_id=payroll_id)
        return ok()

    # Salary templates

    @app.route("/api/salary-templates", endpoint="salary_templates_list")
    @permission_required(Permission.PAYROLL_VIEW)
    def list_templates():
        return ok([t.to_dict() for t in payroll.list_templates(is_active=arg_bool("active"))])

    @app.route("/api/salary-templates", methods=["POST"], endpoint="salary_templates_create")
    @permission_required(Permission.PAYROLL_MANAGE)
    def create_template():
        data = json_body()
        name = required(data, "name")
        rate = required(data, "base_hourly_rate")
        extra = {k: v for k, v in data.items() if k not in ("name", "base_hourly_rate")}
        template_id = payroll.create_template(name=name, base_hourly_rate=rate, **extra)
        return ok(payroll.get_template(template_id).to_dict(), 201)

    @app.route("/api/salary-templates/<int:template_id>", methods=["PATCH"], endpoint="salary_templates_update")
    @permission_required(Permission.PAYROLL_MANAGE)
    def update_template(template_id: int):
        return ok(payroll.update_template(template_id=template_id, **patch_body("template_id")).to_dict())

    @app.route("/api/salary-templates/<int:template_id>", methods=["DELETE"], endpoint="salary_templates_delete")
    @permission_required(Permission.PAYROLL_MANAGE)
    def delete_template(template_id: int):
        payroll.delete_template(template_id=template_id)
        return ok()

    # Bulk payroll

    @app.route("/api/bulk-payroll", endpoint="bulk_payroll_list")
    @permission_required(Permission.PAYROLL_VIEW)
    def list_batches():
        return ok([b.to_dict() for b in bulk.list()])

    @app.route("/api/bulk-payroll/<int:bulk_id>", endpoint="bulk_payroll_get")
    @permission_required(Permission.PAYROLL_VIEW)
    def get_batch(bulk_id: int):
        return ok(bulk.get(bulk_id).to_dict())

    @app.route("/api/bulk-payroll", methods=["POST"], endpoint="bulk_payroll_create")
    @permission_required(Permission.PAYROLL_PROCESS)
    def create_batch():
        data = json_body()
        bulk_id = bulk.create_batch(
            name=required(data, "name"),
            pay_period_start=body_date(data, "pay_period_start"),
            pay_period_end=body_date(data, "pay_period_end"),
            profile_ids=body_ids(data, "profile_ids"),
            created_by=g.user.profile_id,
        )
        return ok(bulk.get(bulk_id).to_dict(), 201)

    @app.route("/api/bulk-payroll/<int:bulk_id>/process", methods=["POST"], endpoint="bulk_payroll_process")
    @permission_required(Permission.PAYROLL_PROCESS)
    def process_batch(bulk_id: int):
        return ok(bulk.process(bulk_id=bulk_id, processed_by=g.user.profile_id).to_dict())
