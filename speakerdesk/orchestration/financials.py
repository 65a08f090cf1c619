"""Commission and speaker fee derivation for won deals."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from speakerdesk.core.exceptions import ValidationError

CENT = Decimal("0.01")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class Financials:
    deal_value: Decimal
    commission_percentage: Decimal
    commission_amount: Decimal
    speaker_fee: Decimal


def to_decimal(value: Any, field: str) -> Decimal | None:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    try:
        # str() so floats keep their printed value rather than binary noise.
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"{field} must be a number", details=str(value)) from exc


def to_cents(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def derive_financials(
    deal_value: Any,
    commission_percentage: Any = None,
    commission_amount: Any = None,
    speaker_fee: Any = None,
    default_percentage: Decimal = Decimal("20"),
) -> Financials:
    """Split a deal value into the bureau commission and the speaker's fee.

    ``commission_amount = deal_value * pct / 100`` and
    ``speaker_fee = deal_value - commission_amount``, both in cents. The fee
    is taken from the rounded commission so the two always add back up to
    the deal value. Any of the three outputs can be overridden.
    """
    value = to_cents(to_decimal(deal_value, "deal_value") or Decimal("0"))
    if value < 0:
        raise ValidationError("deal_value must be >= 0")

    pct = to_decimal(commission_percentage, "commission_percentage")
    if pct is None:
        pct = default_percentage
    if not Decimal("0") <= pct <= HUNDRED:
        raise ValidationError("commission_percentage must be between 0 and 100")

    commission_override = to_decimal(commission_amount, "commission_amount")
    commission = to_cents(commission_override if commission_override is not None else value * pct / HUNDRED)

    fee_override = to_decimal(speaker_fee, "speaker_fee")
    fee = to_cents(fee_override) if fee_override is not None else value - commission

    return Financials(
        deal_value=value,
        commission_percentage=pct,
        commission_amount=commission,
        speaker_fee=fee,
    )
