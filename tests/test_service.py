from datetime import datetime, timezone
from decimal import Decimal

import pytest

from app.errors import (
    InvalidAccount,
    InvalidAmount,
    MissingField,
    NotFound,
    StoreUnavailable,
    Unauthorized,
)
from app.models import Account
from app.repo import get_balance, get_balances, list_recent_txns
from app.service import create_transaction, delete_transaction, update_transaction


def test_create_returns_full_record(db_path):
    before = datetime.now(timezone.utc)
    txn = create_transaction(db_path, account="nour", amount="12.50", reason="allowance")

    assert txn.id > 0
    assert txn.account is Account.NOUR
    assert txn.amount == Decimal("12.50")
    assert txn.reason == "allowance"
    created = datetime.fromisoformat(txn.created_at.replace("Z", "+00:00"))
    assert created >= before
    assert get_balance(db_path, "nour") == Decimal("12.50")


@pytest.mark.parametrize("amount", ["10", "-3.25", "0"])
def test_create_adds_amount_to_balance(db_path, amount):
    create_transaction(db_path, account="hana", amount="5")
    before = get_balance(db_path, "hana")
    create_transaction(db_path, account="hana", amount=amount)
    assert get_balance(db_path, "hana") == before + Decimal(amount)


def test_create_then_delete_restores_balance(db_path):
    create_transaction(db_path, account="hana", amount="4")
    before = get_balances(db_path)
    txn = create_transaction(db_path, account="hana", amount="-9.99")
    delete_transaction(db_path, txn.id)
    assert get_balances(db_path) == before


def test_invalid_account_persists_nothing(db_path):
    with pytest.raises(InvalidAccount):
        create_transaction(db_path, account="mars", amount="1")
    assert list_recent_txns(db_path, 10) == []


def test_invalid_amount_persists_nothing(db_path):
    with pytest.raises(InvalidAmount):
        create_transaction(db_path, account="hana", amount="abc")
    assert list_recent_txns(db_path, 10) == []


@pytest.mark.parametrize("account,amount", [(None, "1"), ("hana", None), ("", "1"), ("hana", "")])
def test_missing_fields(db_path, account, amount):
    with pytest.raises(MissingField):
        create_transaction(db_path, account=account, amount=amount)


def test_debit_direction_negates(db_path):
    txn = create_transaction(db_path, account="hana", amount="20.00", direction="debit")
    assert txn.amount == Decimal("-20.00")
    assert get_balance(db_path, "hana") == Decimal("-20.00")


def test_blank_reason_is_stored_as_none(db_path):
    txn = create_transaction(db_path, account="hana", amount="1", reason="   ")
    assert txn.reason is None


def test_update_moves_amount_between_accounts(db_path):
    create_transaction(db_path, account="hana", amount="100")
    create_transaction(db_path, account="nour", amount="50")
    txn = create_transaction(db_path, account="hana", amount="30")
    before = get_balances(db_path)

    updated = update_transaction(db_path, txn.id, account="nour", amount="12", reason="moved")

    after = get_balances(db_path)
    assert after[Account.HANA] == before[Account.HANA] - Decimal("30")
    assert after[Account.NOUR] == before[Account.NOUR] + Decimal("12")
    assert updated.id == txn.id
    assert updated.created_at == txn.created_at


def test_update_same_account_replaces_amount(db_path):
    txn = create_transaction(db_path, account="hana", amount="30")
    update_transaction(db_path, txn.id, account="hana", amount="5", direction="debit")
    assert get_balance(db_path, "hana") == Decimal("-5")


def test_update_validates_before_lookup(db_path):
    with pytest.raises(InvalidAccount):
        update_transaction(db_path, 42, account="mars", amount="1")
    with pytest.raises(NotFound):
        update_transaction(db_path, 42, account="hana", amount="1")


def test_delete_unknown_id_leaves_balances(db_path):
    create_transaction(db_path, account="nour", amount="7")
    before = get_balances(db_path)
    with pytest.raises(NotFound):
        delete_transaction(db_path, 999)
    assert get_balances(db_path) == before


def test_write_password_gate(db_path):
    with pytest.raises(Unauthorized):
        create_transaction(
            db_path, account="hana", amount="1", password="nope", admin_password="secret"
        )
    assert list_recent_txns(db_path, 10) == []

    txn = create_transaction(
        db_path, account="hana", amount="1", password="secret", admin_password="secret"
    )
    with pytest.raises(Unauthorized):
        update_transaction(
            db_path, txn.id, account="hana", amount="2", admin_password="secret"
        )
    with pytest.raises(Unauthorized):
        delete_transaction(db_path, txn.id, password="", admin_password="secret")
    delete_transaction(db_path, txn.id, password="secret", admin_password="secret")


def test_validation_errors_come_before_password_check(db_path):
    with pytest.raises(InvalidAmount):
        create_transaction(
            db_path, account="hana", amount="abc", password="nope", admin_password="secret"
        )


def test_near_cap_amounts_still_sum(db_path):
    create_transaction(db_path, account="hana", amount="999999999999999")
    create_transaction(db_path, account="hana", amount="999999999999999")
    assert get_balance(db_path, "hana") == Decimal("1999999999999998")
    assert get_balances(db_path)[Account.HANA] == Decimal("1999999999999998")


def test_amount_beyond_cap_is_invalid(db_path):
    with pytest.raises(InvalidAmount):
        create_transaction(db_path, account="hana", amount="1000000000000000")
    assert list_recent_txns(db_path, 10) == []


def test_three_decimal_amount_is_stored_exactly(db_path):
    txn = create_transaction(db_path, account="hana", amount="12.345")
    assert txn.amount == Decimal("12.345")
    assert txn.as_dict()["amount"] == "12.345"
    assert get_balance(db_path, "hana") == Decimal("12.345")


@pytest.mark.parametrize("account", ["HANA", "Nour", " hana "])
def test_account_must_match_exactly(db_path, account):
    with pytest.raises(InvalidAccount):
        create_transaction(db_path, account=account, amount="1")
    assert list_recent_txns(db_path, 10) == []


def test_store_failure_on_unopenable_path(tmp_path):
    db_dir = tmp_path / "is_a_directory"
    db_dir.mkdir()
    with pytest.raises(StoreUnavailable):
        create_transaction(db_dir, account="hana", amount="1")
    with pytest.raises(StoreUnavailable):
        get_balance(db_dir, "hana")


def test_store_failure_on_corrupt_file(tmp_path):
    corrupt = tmp_path / "corrupt.sqlite"
    corrupt.write_bytes(b"this is not a sqlite database" * 200)
    with pytest.raises(StoreUnavailable):
        create_transaction(corrupt, account="nour", amount="5")
    with pytest.raises(StoreUnavailable):
        get_balances(corrupt)
    assert corrupt.read_bytes() == b"this is not a sqlite database" * 200
