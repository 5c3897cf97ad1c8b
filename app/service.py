"""Validated writes against the ledger.

Each function checks its input completely before touching the store, so a
rejected call never leaves a partial write behind.
"""

from decimal import Decimal

from .errors import LedgerError
from .logging_utils import get_logger
from .logic import check_write_access, require_fields, signed_amount, validate_account
from .models import Account, Transaction
from .repo import delete_txn, insert_txn, update_txn

LOGGER = get_logger(__name__)


def _clean_reason(reason) -> str | None:
    if reason is None:
        return None
    text = str(reason).strip()
    return text or None


def _validate_fields(account, amount, direction) -> tuple[Account, Decimal]:
    require_fields(account=account, amount=amount)
    valid_account = validate_account(account)
    value = signed_amount(amount, direction)
    return valid_account, value


def create_transaction(
    db_path,
    *,
    account,
    amount,
    reason=None,
    direction=None,
    password=None,
    admin_password: str = "",
) -> Transaction:
    try:
        valid_account, value = _validate_fields(account, amount, direction)
        check_write_access(admin_password, password)
    except LedgerError as exc:
        LOGGER.warning("Rejected create: %s (%s)", exc.reason, exc)
        raise
    txn = insert_txn(
        db_path,
        account=valid_account,
        amount=value,
        reason=_clean_reason(reason),
    )
    LOGGER.info("Created transaction %s for %s: %s", txn.id, txn.account.value, txn.amount)
    return txn


def update_transaction(
    db_path,
    txn_id: int,
    *,
    account,
    amount,
    reason=None,
    direction=None,
    password=None,
    admin_password: str = "",
) -> Transaction:
    try:
        valid_account, value = _validate_fields(account, amount, direction)
        check_write_access(admin_password, password)
    except LedgerError as exc:
        LOGGER.warning("Rejected update of %s: %s (%s)", txn_id, exc.reason, exc)
        raise
    txn = update_txn(
        db_path,
        txn_id,
        account=valid_account,
        amount=value,
        reason=_clean_reason(reason),
    )
    LOGGER.info("Updated transaction %s for %s: %s", txn.id, txn.account.value, txn.amount)
    return txn


def delete_transaction(
    db_path,
    txn_id: int,
    *,
    password=None,
    admin_password: str = "",
) -> Transaction:
    try:
        check_write_access(admin_password, password)
    except LedgerError as exc:
        LOGGER.warning("Rejected delete of %s: %s", txn_id, exc.reason)
        raise
    txn = delete_txn(db_path, txn_id)
    LOGGER.info("Deleted transaction %s for %s: %s", txn.id, txn.account.value, txn.amount)
    return txn
