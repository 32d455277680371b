"""Section effects as data.

Rule tables never hold callables: each section lists effect commands (frozen
dataclasses) and ``apply_effect`` interprets them against the draft, the
merged value map and the document context.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from functools import singledispatch
from typing import Any, TypeVar

from extraction.context import EXCHANGE_RATE, Context
from extraction.errors import RuleConfigurationError, SecurityResolutionError, ValueFormatError
from extraction.matching import Match
from extraction.model import Money, TransactionDraft, TransactionType, Unit, UnitType
from extraction.securities import SecurityResolver
from extraction.values import GERMAN, ValueCodec, parse_currency_code, reciprocal


T = TypeVar("T")


@dataclass(frozen=True)
class ExtractionEnv:
    resolver: SecurityResolver
    codec: ValueCodec = GERMAN


class ValueMap(dict[str, str]):
    """Captured values layered over a context snapshot (captures win)."""

    def __init__(self, context_values: dict[str, str], match: Match | None = None) -> None:
        super().__init__(context_values)
        self.origins: dict[str, int] = {}
        if match is not None:
            self.update(match.values)
            self.origins.update(match.origins)

    def line_of(self, key: str) -> int | None:
        return self.origins.get(key)

    def require(self, key: str) -> str:
        value = self.get(key)
        if value is None:
            raise ValueFormatError(key, None, None, "no value captured")
        return value

    def convert(self, key: str, convert: Callable[[str], T]) -> T:
        raw = self.require(key)
        try:
            return convert(raw)
        except ValueFormatError:
            raise
        except ValueError as exc:
            raise ValueFormatError(key, raw, self.line_of(key), str(exc)) from exc


@dataclass(frozen=True)
class SetType:
    """Switch the draft type when the captured value is listed in ``mapping``."""

    field: str
    mapping: dict[str, TransactionType]


@dataclass(frozen=True)
class SetSecurity:
    name: str = "name"
    isin: str = "isin"
    wkn: str = "wkn"
    currency: str = "currency"
    name_continued: str | None = "nameContinued"


@dataclass(frozen=True)
class SetShares:
    """Share quantity; any notation other than ``unit_notations`` counts in units of 100."""

    field: str = "shares"
    notation: str | None = "notation"
    unit_notations: tuple[str, ...] = ("Stück",)
    per_hundred: bool = False
    context_key: str | None = None


@dataclass(frozen=True)
class SetDate:
    field: str = "date"
    time: str | None = None
    # two-digit years are completed with this context value ("20" + "21")
    century: str | None = None


@dataclass(frozen=True)
class SetStatementDate:
    """Day and month from the line, year from the statement header.

    On the first statement of a year a booking from the previous December
    shows a posting month that differs from the value month; it belongs to
    the previous year.
    """

    day: str = "day"
    month: str = "month"
    posting_month: str | None = "postingMonth"
    year: str = "year"
    statement_no: str = "nr"
    first_statement: str = "001"


@dataclass(frozen=True)
class SetAmount:
    amount: str = "amount"
    currency: str = "currency"


@dataclass(frozen=True)
class SetNote:
    field: str = "note"
    strip_prefix: str = ""
    strip_suffix: str = ""


@dataclass(frozen=True)
class PutContext:
    keys: tuple[str, ...]
    block: bool = False


@dataclass(frozen=True)
class RecordExchangeRate:
    rate: str = "exchangeRate"
    fx_amount: str = "fxAmount"
    fx_currency: str = "fxCurrency"
    amount: str = "amount"
    currency: str = "currency"


Effect = Any


@singledispatch
def apply_effect(
    effect: Effect, draft: TransactionDraft, values: ValueMap, context: Context, env: ExtractionEnv
) -> None:
    raise RuleConfigurationError(f"Unknown effect: {type(effect).__name__}")


@apply_effect.register(SetType)
def _set_type(effect: SetType, draft, values, context, env) -> None:
    captured = values.get(effect.field)
    new_type = effect.mapping.get(captured) if captured is not None else None
    if new_type is None:
        return
    if new_type.variant is not draft.variant:
        raise RuleConfigurationError(f"Cannot turn a {draft.type.value} draft into {new_type.value}")
    draft.type = new_type


@apply_effect.register(SetSecurity)
def _set_security(effect: SetSecurity, draft, values, context, env) -> None:
    name = values.get(effect.name)
    if effect.name_continued:
        continued = values.get(effect.name_continued)
        if name and continued:
            name = f"{name} {continued}"
    name = name.strip() if name else None
    isin = values.get(effect.isin)
    wkn = values.get(effect.wkn)

    if not (name or isin or wkn):
        raise SecurityResolutionError("No name, ISIN or WKN available to identify the security")

    currency = None
    if values.get(effect.currency):
        currency = values.convert(effect.currency, parse_currency_code)

    try:
        draft.security = env.resolver.resolve_or_create_security(name, isin, wkn, currency)
    except SecurityResolutionError:
        raise
    except Exception as exc:
        raise SecurityResolutionError(f"Could not resolve security isin={isin} wkn={wkn} name={name}") from exc


@apply_effect.register(SetShares)
def _set_shares(effect: SetShares, draft, values, context, env) -> None:
    shares = values.convert(effect.field, env.codec.parse_shares)

    per_hundred = effect.per_hundred
    notation = values.get(effect.notation) if effect.notation else None
    if notation is not None:
        known = {n.casefold() for n in effect.unit_notations}
        per_hundred = per_hundred or notation.casefold() not in known

    if per_hundred:
        shares = shares / Decimal(100)

    draft.shares = shares
    if effect.context_key:
        context[effect.context_key] = env.codec.format_decimal(shares)


@apply_effect.register(SetDate)
def _set_date(effect: SetDate, draft, values, context, env) -> None:
    raw = values.require(effect.field)
    if effect.century:
        century = values.require(effect.century)
        # dd.mm.yy -> dd.mm.ccyy
        raw = raw[:6] + century + raw[6:8]

    time_of_day = values.get(effect.time) if effect.time else None
    try:
        draft.date = env.codec.parse_date(raw, time_of_day)
    except ValueError as exc:
        raise ValueFormatError(effect.field, raw, values.line_of(effect.field), str(exc)) from exc


@apply_effect.register(SetStatementDate)
def _set_statement_date(effect: SetStatementDate, draft, values, context, env) -> None:
    day = values.convert(effect.day, int)
    month = values.convert(effect.month, int)
    year = values.convert(effect.year, int)

    if effect.posting_month and values.get(effect.statement_no) == effect.first_statement:
        posting_month = values.convert(effect.posting_month, int)
        if posting_month != month:
            year -= 1

    try:
        draft.date = datetime(year, month, day)
    except ValueError as exc:
        raw = f"{day:02d}.{month:02d}.{year}"
        raise ValueFormatError(effect.day, raw, values.line_of(effect.day), str(exc)) from exc


@apply_effect.register(SetAmount)
def _set_amount(effect: SetAmount, draft, values, context, env) -> None:
    draft.amount = values.convert(effect.amount, env.codec.parse_amount)
    draft.currency = values.convert(effect.currency, parse_currency_code)


@apply_effect.register(SetNote)
def _set_note(effect: SetNote, draft, values, context, env) -> None:
    note = values.require(effect.field).strip()
    if effect.strip_prefix and note.startswith(effect.strip_prefix):
        note = note[len(effect.strip_prefix) :]
    if effect.strip_suffix and note.endswith(effect.strip_suffix):
        note = note[: -len(effect.strip_suffix)]
    draft.note = note.strip() or None


@apply_effect.register(PutContext)
def _put_context(effect: PutContext, draft, values, context, env) -> None:
    for key in effect.keys:
        value = values.get(key)
        if value is None:
            continue
        if effect.block:
            context.put_block(key, value)
        else:
            context[key] = value


@apply_effect.register(RecordExchangeRate)
def _record_exchange_rate(effect: RecordExchangeRate, draft, values, context, env) -> None:
    rate = values.convert(effect.rate, env.codec.parse_exchange_rate)
    fx_currency = values.convert(effect.fx_currency, parse_currency_code)
    currency = values.convert(effect.currency, parse_currency_code)
    tx_currency = draft.currency or currency

    # stored quote: foreign units per one unit of the transaction currency
    if tx_currency == fx_currency:
        rate = reciprocal(rate)
    context.put_block(EXCHANGE_RATE, str(rate))

    security_currency = draft.security.currency if draft.security else None
    if security_currency is None or security_currency == tx_currency:
        return

    fx_amount = values.convert(effect.fx_amount, env.codec.parse_amount)
    amount = values.convert(effect.amount, env.codec.parse_amount)

    if fx_currency != tx_currency:
        gross = Money(currency, amount)
        forex = Money(fx_currency, fx_amount)
    else:
        gross = Money(fx_currency, fx_amount)
        forex = Money(currency, amount)
    draft.add_unit(Unit(UnitType.GROSS_VALUE, gross, forex=forex, exchange_rate=reciprocal(rate)))


def exchange_rate_from(context: Context) -> Decimal | None:
    raw = context.get(EXCHANGE_RATE)
    return Decimal(raw) if raw else None
