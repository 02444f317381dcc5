from datetime import date
from decimal import Decimal

import pytest

from workforce_admin.banking.model import TransactionFilter
from workforce_admin.core.enums import TransactionCategory, TransactionType
from workforce_admin.core.exceptions import ConflictError, NotFoundError, ValidationError


def _account(container, **overrides):
    fields = dict(bank_name="First Bank", account_number="000123456789", account_holder_name="Acme")
    fields.update(overrides)
    return container.banking_service.create_account(**fields)


def _tx(container, amount, kind, category="other", day=date(2025, 3, 3), **extra):
    return container.banking_service.record_transaction(
        description=f"{kind} {amount}",
        amount=amount,
        transaction_type=kind,
        category=category,
        transaction_date=day,
        **extra,
    )


def test_only_one_primary_account_per_owner(container, world):
    service = container.banking_service
    first = _account(container, is_primary=True)
    second = _account(container, is_primary=True, account_number="999988887777")
    staff = _account(container, profile_id=world.alice_id, is_primary=True)

    assert not service.get_account(first).is_primary
    assert service.get_account(second).is_primary
    assert service.get_account(staff).is_primary

    service.set_primary(account_id=first)
    assert service.get_account(first).is_primary
    assert not service.get_account(second).is_primary
    assert service.get_account(staff).is_primary


def test_account_number_is_masked(container):
    account = container.banking_service.get_account(_account(container))
    assert account.to_dict()["account_number"] == "****6789"


def test_account_for_unknown_profile(container):
    with pytest.raises(NotFoundError):
        _account(container, profile_id=404)


def test_account_with_transactions_cannot_be_deleted(container):
    account_id = _account(container)
    _tx(container, "10", "deposit", bank_account_id=account_id)
    with pytest.raises(ConflictError):
        container.banking_service.delete_account(account_id=account_id)


def test_transaction_validation(container):
    with pytest.raises(ValidationError):
        _tx(container, "0", "deposit")
    with pytest.raises(ValidationError):
        _tx(container, "5", "refund")
    with pytest.raises(ValidationError):
        _tx(container, "5", "deposit", category="gifts")


def test_update_transaction(container):
    tx_id = _tx(container, "10", "deposit", category="income")
    tx = container.banking_service.update_transaction(transaction_id=tx_id, amount="12.5", type="withdrawal")
    assert tx.amount == Decimal("12.50")
    assert tx.type == TransactionType.WITHDRAWAL
    assert tx.signed_amount == Decimal("-12.50")


def test_balance_summary(container):
    account_id = _account(container, opening_balance="1000")
    _tx(container, "500", "deposit", category="income", bank_account_id=account_id)
    _tx(container, "200", "withdrawal", category="salary", bank_account_id=account_id)
    _tx(container, "50", "withdrawal", category="office", day=date(2025, 4, 2))

    summary = container.banking_service.balance_summary()
    assert summary["opening_balance"] == "1000.00"
    assert summary["total_deposits"] == "500.00"
    assert summary["total_withdrawals"] == "250.00"
    assert summary["balance"] == "1250.00"
    assert summary["accounts"][0]["balance"] == "1300.00"

    march = container.banking_service.balance_summary(start_date=date(2025, 3, 1), end_date=date(2025, 3, 31))
    assert march["transactions"] == 2


def test_totals_by_category(container):
    _tx(container, "500", "deposit", category="income")
    _tx(container, "200", "withdrawal", category="salary")
    _tx(container, "100", "withdrawal", category="salary")

    totals = {row["category"]: row for row in container.banking_service.totals_by_category()}
    assert totals["salary"]["withdrawals"] == "300.00"
    assert totals["salary"]["net"] == "-300.00"
    assert totals["income"]["deposits"] == "500.00"


def test_list_transactions_search(container):
    _tx(container, "500", "deposit", category="income")
    _tx(container, "200", "withdrawal", category="salary")
    found = container.banking_service.list_transactions(TransactionFilter(category=TransactionCategory.SALARY))
    assert [t.amount for t in found] == [Decimal("200.00")]
    assert len(container.banking_service.list_transactions(TransactionFilter(search="deposit"))) == 1


def test_account_used_by_a_salary_template_cannot_be_deleted(container):
    account_id = _account(container)
    container.payroll_service.create_template(name="Casual", base_hourly_rate="30", bank_account_id=account_id)
    with pytest.raises(ConflictError):
        container.banking_service.delete_account(account_id=account_id)


def test_unused_account_can_be_deleted(container):
    account_id = _account(container)
    container.banking_service.delete_account(account_id=account_id)
    with pytest.raises(NotFoundError):
        container.banking_service.get_account(account_id)
