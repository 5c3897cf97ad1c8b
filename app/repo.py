from datetime import datetime, timezone
from decimal import Decimal

from .db import session
from .errors import NotFound
from .logic import validate_account
from .models import Account, Transaction, sum_amounts

_COLUMNS = "id, account, amount, reason, created_at"


def _now() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def _stored_amount(amount: Decimal) -> str:
    return format(amount, "f")


def get_balance(db_path, account) -> Decimal:
    valid_account = validate_account(account)
    with session(db_path) as conn:
        rows = conn.execute(
            "SELECT amount FROM transactions WHERE account = ?",
            (valid_account.value,),
        ).fetchall()
    return sum_amounts(row["amount"] for row in rows)


def get_balances(db_path) -> dict[Account, Decimal]:
    with session(db_path) as conn:
        rows = conn.execute("SELECT account, amount FROM transactions").fetchall()
    return {
        account: sum_amounts(
            row["amount"] for row in rows if row["account"] == account.value
        )
        for account in Account
    }


def list_txns(db_path, account, *, limit: int | None = None) -> list[Transaction]:
    valid_account = validate_account(account)
    sql = f"""
        SELECT {_COLUMNS} FROM transactions
        WHERE account = ?
        ORDER BY created_at DESC, id DESC
    """
    params: tuple = (valid_account.value,)
    if limit is not None:
        sql += " LIMIT ?"
        params += (max(int(limit), 0),)
    with session(db_path) as conn:
        rows = conn.execute(sql, params).fetchall()
    return [Transaction.from_row(row) for row in rows]


def list_recent_txns(db_path, limit: int) -> list[Transaction]:
    with session(db_path) as conn:
        rows = conn.execute(
            f"""
            SELECT {_COLUMNS} FROM transactions
            ORDER BY created_at DESC, id DESC
            LIMIT ?
            """,
            (max(int(limit), 0),),
        ).fetchall()
    return [Transaction.from_row(row) for row in rows]


def get_txn(db_path, txn_id: int) -> Transaction | None:
    with session(db_path) as conn:
        row = conn.execute(
            f"SELECT {_COLUMNS} FROM transactions WHERE id = ?",
            (txn_id,),
        ).fetchone()
    return Transaction.from_row(row) if row is not None else None


def insert_txn(
    db_path,
    *,
    account: Account,
    amount: Decimal,
    reason: str | None,
    created_at: str | None = None,
) -> Transaction:
    with session(db_path) as conn:
        cur = conn.execute(
            """
            INSERT INTO transactions(account, amount, reason, created_at)
            VALUES (?, ?, ?, ?)
            """,
            (account.value, _stored_amount(amount), reason, created_at or _now()),
        )
        row = conn.execute(
            f"SELECT {_COLUMNS} FROM transactions WHERE id = ?",
            (cur.lastrowid,),
        ).fetchone()
    return Transaction.from_row(row)


def update_txn(
    db_path,
    txn_id: int,
    *,
    account: Account,
    amount: Decimal,
    reason: str | None,
) -> Transaction:
    with session(db_path) as conn:
        cur = conn.execute(
            """
            UPDATE transactions
            SET account = ?, amount = ?, reason = ?
            WHERE id = ?
            """,
            (account.value, _stored_amount(amount), reason, txn_id),
        )
        if cur.rowcount == 0:
            raise NotFound(f"transaction {txn_id} not found")
        row = conn.execute(
            f"SELECT {_COLUMNS} FROM transactions WHERE id = ?",
            (txn_id,),
        ).fetchone()
    return Transaction.from_row(row)


def delete_txn(db_path, txn_id: int) -> Transaction:
    with session(db_path) as conn:
        row = conn.execute(
            f"SELECT {_COLUMNS} FROM transactions WHERE id = ?",
            (txn_id,),
        ).fetchone()
        if row is None:
            raise NotFound(f"transaction {txn_id} not found")
        conn.execute("DELETE FROM transactions WHERE id = ?", (txn_id,))
    return Transaction.from_row(row)
