from __future__ import annotations

from typing import Any

from extraction.model import Money, Posting, TransactionDraft, TransactionItem, Unit, Variant
from extraction.values import minor_to_decimal


def wrap(draft: TransactionDraft) -> TransactionItem | None:
    """Freeze a draft, or return None when it carries no money (no currency or zero amount)."""

    if draft.currency is None or not draft.amount:
        return None

    amount = Money(draft.currency, draft.amount)
    posting = Posting(
        type=draft.type,
        date=draft.date,
        amount=amount,
        shares=draft.shares,
        security=draft.security,
        note=draft.note,
        units=tuple(draft.units),
    )

    if draft.variant is Variant.POSTING:
        return TransactionItem(variant=Variant.POSTING, posting=posting)

    # Units, shares and the security stay on the security leg.
    cash_leg = Posting(type=draft.type, date=draft.date, amount=amount, note=draft.note)
    return TransactionItem(variant=Variant.PAIRED, posting=posting, cash_leg=cash_leg)


def _money_to_dict(money: Money | None) -> dict[str, Any] | None:
    if money is None:
        return None
    return {
        "currency": money.currency,
        "amountMinor": money.amount,
        "amount": str(minor_to_decimal(money.amount)),
    }


def _unit_to_dict(unit: Unit) -> dict[str, Any]:
    return {
        "type": unit.type.value,
        "category": unit.category,
        "amount": _money_to_dict(unit.amount),
        "forex": _money_to_dict(unit.forex),
        "exchangeRate": str(unit.exchange_rate) if unit.exchange_rate is not None else None,
    }


def _posting_to_dict(posting: Posting) -> dict[str, Any]:
    security = posting.security
    return {
        "type": posting.type.value,
        "date": posting.date.isoformat() if posting.date else None,
        "amount": _money_to_dict(posting.amount),
        "shares": str(posting.shares) if posting.shares is not None else None,
        "security": (
            {
                "id": security.id,
                "name": security.name,
                "isin": security.isin,
                "wkn": security.wkn,
                "currency": security.currency,
            }
            if security
            else None
        ),
        "note": posting.note,
        "units": [_unit_to_dict(u) for u in posting.units],
    }


def item_to_dict(item: TransactionItem) -> dict[str, Any]:
    out: dict[str, Any] = {"variant": item.variant.value, **_posting_to_dict(item.posting)}
    if item.cash_leg is not None:
        out["cashLeg"] = _posting_to_dict(item.cash_leg)
    return out
