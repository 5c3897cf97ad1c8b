from dataclasses import dataclass
from decimal import MAX_EMAX, MAX_PREC, MIN_EMIN, Decimal, Inexact, localcontext
from enum import Enum


class Account(str, Enum):
    HANA = "hana"
    NOUR = "nour"

    @property
    def label(self) -> str:
        return self.value.capitalize()


def sum_amounts(amounts) -> Decimal:
    """Add amounts without rounding; a balance is always the exact sum."""
    with localcontext() as ctx:
        ctx.prec = MAX_PREC
        ctx.Emax = MAX_EMAX
        ctx.Emin = MIN_EMIN
        ctx.traps[Inexact] = True
        return sum((Decimal(amount) for amount in amounts), Decimal("0"))


def format_amount(value: Decimal) -> str:
    """Render an amount with at least two decimals, keeping any extra precision."""
    if value.as_tuple().exponent > -2:
        value = value.quantize(Decimal("0.01"))
    return format(value, "f")


@dataclass(frozen=True)
class Transaction:
    id: int
    account: Account
    amount: Decimal
    reason: str | None
    created_at: str

    @classmethod
    def from_row(cls, row) -> "Transaction":
        return cls(
            id=int(row["id"]),
            account=Account(row["account"]),
            amount=Decimal(row["amount"]),
            reason=row["reason"],
            created_at=row["created_at"],
        )

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "account": self.account.value,
            "amount": format_amount(self.amount),
            "reason": self.reason,
            "created_at": self.created_at,
        }
