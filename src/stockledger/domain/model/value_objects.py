"""Value Objects and numeric coercion shared across the domain.

Quantities and costs are Decimals throughout: replaying thousands of moves
must not drift the way binary floats do.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from stockledger.domain.exceptions import ValidationError

# Average unit cost is carried at four decimal places.
COST_QUANTUM = Decimal("0.0001")
WHOLE_UNIT = Decimal("1")
CENTS = Decimal("0.01")


def to_decimal(
    value: str | int | float | Decimal | None,
    error_cls: type[ValidationError] = ValidationError,
    label: str = "value",
) -> Decimal:
    """Coerce *value* to a finite Decimal or raise *error_cls*.

    Floats go through ``str`` first so ``0.1`` becomes ``Decimal("0.1")``
    and not its binary expansion.
    """
    if value is None or isinstance(value, bool):
        raise error_cls(f"{label.capitalize()} is required")
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as exc:
        raise error_cls(f"Invalid {label}: {value!r}") from exc
    if not result.is_finite():
        raise error_cls(f"Invalid {label}: {value!r}")
    return result


def quantize_cost(amount: Decimal) -> Decimal:
    return amount.quantize(COST_QUANTUM, rounding=ROUND_HALF_UP)


def round2(amount: Decimal) -> Decimal:
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Money:
    """Counterparty-facing monetary amount.

    Non-negative by construction. Sign only appears in report aggregates,
    which are plain Decimals.
    """

    amount: Decimal
    currency: str = "INR"

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            raise ValidationError(
                f"Money amount must be a Decimal, got {type(self.amount).__name__}"
            )
        if self.amount < Decimal("0"):
            raise ValidationError(
                f"Money amount cannot be negative, got {self.amount}"
            )

    # --- Arithmetic helpers ---------------------------------------------------

    def __add__(self, other: Money) -> Money:
        self._assert_same_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __mul__(self, factor: int | Decimal) -> Money:
        if isinstance(factor, bool) or not isinstance(factor, (int, Decimal)):
            raise TypeError(
                f"Can only multiply Money by int or Decimal, got {type(factor).__name__}"
            )
        return Money(self.amount * factor, self.currency)

    # --- Display --------------------------------------------------------------

    def __str__(self) -> str:
        symbol = "₹" if self.currency == "INR" else self.currency
        return f"{symbol} {self.amount:.2f}"

    # --- Internal helpers -----------------------------------------------------

    def _assert_same_currency(self, other: Money) -> None:
        if self.currency != other.currency:
            raise ValidationError(
                f"Cannot combine {self.currency} with {other.currency}"
            )

    # --- Factory --------------------------------------------------------------

    @staticmethod
    def of(amount: str | float | int | Decimal, currency: str = "INR") -> Money:
        """Convenient factory that coerces to Decimal safely."""
        return Money(to_decimal(amount, label="money amount"), currency)

    @staticmethod
    def zero(currency: str = "INR") -> Money:
        return Money(Decimal("0"), currency)
