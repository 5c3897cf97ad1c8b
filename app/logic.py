import hmac
from decimal import Decimal, InvalidOperation

from .errors import InvalidAccount, InvalidAmount, MissingField, Unauthorized
from .models import Account

MAX_AMOUNT = Decimal("1e15")


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def require_fields(**fields) -> None:
    missing = [name for name, value in fields.items() if _is_blank(value)]
    if missing:
        raise MissingField(f"missing fields: {', '.join(missing)}")


def validate_account(value) -> Account:
    if isinstance(value, Account):
        return value
    if not isinstance(value, str):
        raise InvalidAccount(f"invalid account: {value!r}")
    try:
        return Account(value)
    except ValueError as exc:
        raise InvalidAccount(f"invalid account: {value!r}") from exc


def validate_direction(s: str) -> str:
    direction = s.strip().lower() if isinstance(s, str) else s
    if direction not in {"credit", "debit"}:
        raise InvalidAmount("direction must be credit or debit")
    return direction


def parse_amount(s) -> Decimal:
    if _is_blank(s):
        raise MissingField("amount required")
    if isinstance(s, bool) or not isinstance(s, (str, int, float, Decimal)):
        raise InvalidAmount("amount invalid")
    try:
        d = Decimal(s.strip() if isinstance(s, str) else str(s))
    except InvalidOperation as e:
        raise InvalidAmount("amount invalid") from e
    if not d.is_finite():
        raise InvalidAmount("amount must be finite")
    if abs(d) >= MAX_AMOUNT:
        raise InvalidAmount("amount out of range")
    if d.is_zero():
        d = d.copy_abs()
    return d


def signed_amount(amount, direction=None) -> Decimal:
    """Turn submitted amount fields into one signed value.

    Without a direction the amount is already signed. With ``credit`` or
    ``debit`` it is an unsigned magnitude and debit flips its sign.
    """
    value = parse_amount(amount)
    if _is_blank(direction):
        return value
    valid_direction = validate_direction(direction)
    if value < 0:
        raise InvalidAmount("amount must be non-negative when a direction is given")
    if valid_direction == "debit" and not value.is_zero():
        return value.copy_negate()
    return value


def check_write_access(admin_password: str, password) -> None:
    if not admin_password:
        return
    supplied = password if isinstance(password, str) else ""
    if not hmac.compare_digest(supplied.encode(), admin_password.encode()):
        raise Unauthorized("wrong password")
