from __future__ import annotations

from flask import Flask, g, request

from ..container import Container
from ..core.enums import Permission
from ..web.auth import permission_required
from ..web.params import arg_date, arg_id, body_date, body_optional_id, convert_dates, json_body, ok, patch_body, required
from .model import TransactionFilter
from .service import parse_transaction_category, parse_transaction_type


def register(app: Flask, container: Container) -> None:
    banking = container.banking_service

    @app.route("/api/bank-accounts", endpoint="bank_accounts_list")
    @permission_required(Permission.BANK_BALANCE_VIEW)
    def list_accounts():
        return ok([a.to_dict() for a in banking.list_accounts(profile_id=arg_id("profile_id"))])

    @app.route("/api/bank-accounts", methods=["POST"], endpoint="bank_accounts_create")
    @permission_required(Permission.BANK_BALANCE_MANAGE)
    def create_account():
        data = json_body()
        account_id = banking.create_account(
            profile_id=body_optional_id(data, "profile_id"),
            bank_name=required(data, "bank_name"),
            account_number=str(required(data, "account_number")),
            account_holder_name=required(data, "account_holder_name"),
            bsb_code=data.get("bsb_code"),
            swift_code=data.get("swift_code"),
            is_primary=bool(data.get("is_primary")),
            opening_balance=data.get("opening_balance") or 0,
        )
        return ok(banking.get_account(account_id).to_dict(), 201)

    @app.route("/api/bank-accounts/<int:account_id>", methods=["PATCH"], endpoint="bank_accounts_update")
    @permission_required(Permission.BANK_BALANCE_MANAGE)
    def update_account(account_id: int):
        return ok(banking.update_account(account_id=account_id, **patch_body("account_id")).to_dict())

    @app.route("/api/bank-accounts/<int:account_id>/primary", methods=["POST"], endpoint="bank_accounts_primary")
    @permission_required(Permission.BANK_BALANCE_MANAGE)
    def set_primary(account_id: int):
        return ok(banking.set_primary(account_id=account_id).to_dict())

    @app.route("/api/bank-accounts/<int:account_id>", methods=["DELETE"], endpoint="bank_accounts_delete")
    @permission_required(Permission.BANK_BALANCE_MANAGE)
    def delete_account(account_id: int):
        banking.delete_account(account_id=account_id)
        return ok()

    @app.route("/api/bank-transactions", endpoint="bank_transactions_list")
    @permission_required(Permission.BANK_BALANCE_VIEW)
    def list_transactions():
        tx_type = request.args.get("type")
        category = request.args.get("category")
        filters = TransactionFilter(
            type=parse_transaction_type(tx_type) if tx_type else None,
            category=parse_transaction_category(category) if category else None,
            bank_account_id=arg_id("bank_account_id"),
            profile_id=arg_id("profile_id"),
            start_date=arg_date("start"),
            end_date=arg_date("end"),
            search=request.args.get("q") or None,
        )
        return ok([t.to_dict() for t in banking.list_transactions(filters)])

    @app.route("/api/bank-transactions", methods=["POST"], endpoint="bank_transactions_create")
    @permission_required(Permission.BANK_BALANCE_MANAGE)
    def record_transaction():
        data = json_body()
        tx_id = banking.record_transaction(
            description=required(data, "description"),
            amount=required(data, "amount"),
            transaction_type=required(data, "type"),
            category=data.get("category") or "other",
            transaction_date=body_date(data, "date"),
            bank_account_id=body_optional_id(data, "bank_account_id"),
            client_id=body_optional_id(data, "client_id"),
            project_id=body_optional_id(data, "project_id"),
            profile_id=body_optional_id(data, "profile_id"),
            created_by=g.user.profile_id,
        )
        return ok(banking.get_transaction(tx_id).to_dict(), 201)

    @app.route("/api/bank-transactions/<int:transaction_id>", methods=["PATCH"], endpoint="bank_transactions_update")
    @permission_required(Permission.BANK_BALANCE_MANAGE)
    def update_transaction(transaction_id: int):
        data = patch_body("transaction_id")
        if "date" in data:
            data["transaction_date"] = data.pop("date")
        data = convert_dates(data, "transaction_date")
        return ok(banking.update_transaction(transaction_id=transaction_id, **data).to_dict())

    @app.route("/api/bank-transactions/<int:transaction_id>", methods=["DELETE"], endpoint="bank_transactions_delete")
    @permission_required(Permission.BANK_BALANCE_MANAGE)
    def delete_transaction(transaction_id: int):
        banking.delete_transaction(transaction_id=transaction_id)
        return ok()

    @app.route("/api/bank-balance", endpoint="bank_balance")
    @permission_required(Permission.BANK_BALANCE_VIEW)
    def balance():
        return ok(banking.balance_summary(start_date=arg_date("start"), end_date=arg_date("end")))
