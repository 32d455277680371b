"""Shared tax and fee sections.

These run after the bank-specific sections of a block and attach TAX / FEE
units to the draft. Three rules apply on top of plain matching:

* joint accounts list capital-gains tax, solidarity surcharge and church tax
  once per co-holder; both lines are summed into one unit,
* once a "withheld" withholding-tax line was seen in the block, the
  creditable and reclaimable sub-lines are ignored (they are parts of the
  same tax and re-adding them drifts by rounding),
* a tax/fee in a foreign currency is converted with the block exchange rate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_DOWN, Decimal
from enum import Enum

from extraction.context import JOINT_ACCOUNT, WITHHOLDING_TAX_FOUND, Context
from extraction.effects import ExtractionEnv, ValueMap, apply_effect, exchange_rate_from
from extraction.model import Money, TransactionDraft, Unit, UnitType
from extraction.sections import Guard, OptionalSection, SectionSpec
from extraction.values import parse_currency_code, reciprocal


logger = logging.getLogger("portfolio-extractor")


class TaxCategory(str, Enum):
    CAPITAL_GAINS = "capital_gains_tax"
    SOLIDARITY_SURCHARGE = "solidarity_surcharge"
    CHURCH = "church_tax"
    WITHHOLDING = "withholding_tax"
    WITHHOLDING_CREDITABLE = "creditable_withholding_tax"
    WITHHOLDING_RECLAIMABLE = "reclaimable_withholding_tax"
    FINANCIAL_TRANSACTION = "financial_transaction_tax"


class FeeCategory(str, Enum):
    COMMISSION = "commission"
    EXCHANGE_FEE = "exchange_fee"
    TRANSFER_FEE = "transfer_fee"
    THIRD_PARTY_SETTLEMENT = "third_party_settlement_fee"
    EXCHANGE_SETTLEMENT = "exchange_settlement_costs"
    COURTAGE = "courtage"


# Creditable never suppresses reclaimable; only the withheld line does.
_SUPPRESSED_BY_WITHHOLDING = frozenset({TaxCategory.WITHHOLDING_CREDITABLE, TaxCategory.WITHHOLDING_RECLAIMABLE})


@dataclass(frozen=True)
class AddTax:
    category: TaxCategory
    amounts: tuple[str, ...] = ("tax",)
    currencies: tuple[str, ...] = ("currency",)


@dataclass(frozen=True)
class AddFee:
    category: FeeCategory
    amounts: tuple[str, ...] = ("fee",)
    currencies: tuple[str, ...] = ("currency",)


@dataclass(frozen=True)
class TaxLine:
    category: TaxCategory
    pattern: str
    joint: bool = False


@dataclass(frozen=True)
class FeeLine:
    category: FeeCategory
    pattern: str
    joint: bool = False


TAX_LINES: tuple[TaxLine, ...] = (
    # Kapitalertragsteuer 24,45 % auf 131,25 EUR 32,09- EUR
    TaxLine(
        TaxCategory.CAPITAL_GAINS,
        r"^Kapitalertragsteuer [\.,\d]+(\s+)?% .* [\.,\d]+ \w{3} (?P<tax>[\.,\d]+)- (?P<currency>\w{3})$",
        joint=True,
    ),
    # Solidaritätszuschlag 5,5 % auf 32,09 EUR 1,76- EUR
    TaxLine(
        TaxCategory.SOLIDARITY_SURCHARGE,
        r"^Solidarit.tszuschlag [\.,\d]+(\s+)?% .* [\.,\d]+ \w{3} (?P<tax>[\.,\d]+)- (?P<currency>\w{3})$",
        joint=True,
    ),
    # Kirchensteuer 9 % auf 32,09 EUR 2,88- EUR
    TaxLine(
        TaxCategory.CHURCH,
        r"^Kirchensteuer [\.,\d]+(\s+)?% .* [\.,\d]+ \w{3} (?P<tax>[\.,\d]+)- (?P<currency>\w{3})$",
        joint=True,
    ),
    # Einbehaltene Quellensteuer 35 % auf 51,00 CHF 14,93- EUR
    TaxLine(
        TaxCategory.WITHHOLDING,
        r"^Einbehaltene Quellensteuer .* (?P<tax>[\.,\d]+)- (?P<currency>\w{3})$",
    ),
    # Anrechenbare Quellensteuer 15 % auf 42,65 EUR 6,40 EUR
    TaxLine(
        TaxCategory.WITHHOLDING_CREDITABLE,
        r"^Anrechenbare Quellensteuer .* (?P<tax>[\.,\d]+) (?P<currency>\w{3})$",
    ),
    # 20 % rückforderbare Quellensteuer 10,20 CHF
    TaxLine(
        TaxCategory.WITHHOLDING_RECLAIMABLE,
        r"^.* r.ckforderbare Quellensteuer (?P<tax>[\.,\d]+) (?P<currency>\w{3})$",
    ),
    # Finanztransaktionssteuer 5,71- EUR
    TaxLine(
        TaxCategory.FINANCIAL_TRANSACTION,
        r"^Finanztransaktionssteuer (?P<tax>[\.,\d]+)- (?P<currency>\w{3})$",
    ),
)

FEE_LINES: tuple[FeeLine, ...] = (
    # Provision 7,50- EUR
    FeeLine(FeeCategory.COMMISSION, r"^Provision (?P<fee>[\.,\d]+)- (?P<currency>\w{3})$"),
    # Transaktionsentgelt Börse 0,71- EUR
    FeeLine(FeeCategory.EXCHANGE_FEE, r"^Transaktionsentgelt B.rse (?P<fee>[\.,\d]+)- (?P<currency>\w{3})$"),
    # Übertragungs-/Liefergebühr 0,20- EUR
    FeeLine(FeeCategory.TRANSFER_FEE, r"^.bertragungs-/Liefergeb.hr (?P<fee>[\.,\d]+)- (?P<currency>\w{3})$"),
    # Fremde Abwicklungsgebühr für die Umschreibung von Namensaktien 0,60- EUR
    FeeLine(
        FeeCategory.THIRD_PARTY_SETTLEMENT,
        r"^Fremde Abwicklungsgeb.hr .* (?P<fee>[\.,\d]+)- (?P<currency>\w{3})$",
    ),
    # Abwicklungskosten Börse 0,06- EUR
    FeeLine(FeeCategory.EXCHANGE_SETTLEMENT, r"^Abwicklungskosten B.rse (?P<fee>[\.,\d]+)- (?P<currency>\w{3})$"),
    # Maklercourtage 0,0800 % vom Kurswert 1,67- EUR
    FeeLine(FeeCategory.COURTAGE, r"^Maklercourtage .* (?P<fee>[\.,\d]+)- (?P<currency>\w{3})$"),
)


def _numbered(pattern: str, groups: tuple[str, ...], n: int) -> str:
    for group in groups:
        pattern = pattern.replace(f"(?P<{group}>", f"(?P<{group}{n}>")
    return pattern


def _line_sections(category: Enum, pattern: str, joint: bool, amount_group: str, effect_type: type) -> list[SectionSpec]:
    single = effect_type(category)
    if not joint:
        return [OptionalSection(patterns=(pattern,), effects=(single,), name=category.value)]

    # joint accounts book a tax or fee only when both co-holder lines are printed
    groups = (amount_group, "currency")
    both = effect_type(
        category,
        amounts=(f"{amount_group}1", f"{amount_group}2"),
        currencies=("currency1", "currency2"),
    )
    return [
        OptionalSection(
            patterns=(pattern,),
            effects=(single,),
            when=Guard(JOINT_ACCOUNT, negate=True),
            name=category.value,
        ),
        OptionalSection(
            patterns=(_numbered(pattern, groups, 1), _numbered(pattern, groups, 2)),
            effects=(both,),
            when=Guard(JOINT_ACCOUNT),
            name=f"{category.value} (joint account)",
        ),
    ]


def tax_and_fee_sections() -> tuple[SectionSpec, ...]:
    sections: list[SectionSpec] = []
    for tax in TAX_LINES:
        sections.extend(_line_sections(tax.category, tax.pattern, tax.joint, "tax", AddTax))
    for fee in FEE_LINES:
        sections.extend(_line_sections(fee.category, fee.pattern, fee.joint, "fee", AddFee))
    return tuple(sections)


TAX_AND_FEE_SECTIONS = tax_and_fee_sections()


def to_transaction_currency(money: Money, draft: TransactionDraft, context: Context) -> Money:
    """Convert a foreign tax/fee with the reciprocal of the block exchange rate.

    Amounts stay in their own currency when the draft has no currency yet or
    no rate was recorded for the block.
    """

    if draft.currency is None or money.currency == draft.currency:
        return money

    rate = exchange_rate_from(context)
    if rate is None:
        logger.debug("[taxes] no exchange rate for %s -> %s, keeping %s", money.currency, draft.currency, money)
        return money

    converted = (Decimal(money.amount) * reciprocal(rate)).quantize(Decimal(1), rounding=ROUND_HALF_DOWN)
    return Money(draft.currency, int(converted))


def _attach(
    unit_type: UnitType,
    category: Enum,
    amounts: tuple[str, ...],
    currencies: tuple[str, ...],
    draft: TransactionDraft,
    values: ValueMap,
    context: Context,
    env: ExtractionEnv,
) -> None:
    totals: dict[str, int] = {}
    for amount_key, currency_key in zip(amounts, currencies):
        money = Money(
            values.convert(currency_key, parse_currency_code),
            values.convert(amount_key, env.codec.parse_amount),
        )
        money = to_transaction_currency(money, draft, context)
        totals[money.currency] = totals.get(money.currency, 0) + money.amount

    for currency, amount in totals.items():
        if amount == 0:
            continue
        draft.add_unit(Unit(unit_type, Money(currency, amount), category=category.value))


@apply_effect.register(AddTax)
def _add_tax(effect: AddTax, draft, values, context, env) -> None:
    if effect.category is TaxCategory.WITHHOLDING:
        context.put_block(WITHHOLDING_TAX_FOUND, "true")
    elif effect.category in _SUPPRESSED_BY_WITHHOLDING and context.flag(WITHHOLDING_TAX_FOUND):
        logger.debug("[taxes] %s ignored, withheld tax already booked", effect.category.value)
        return

    _attach(UnitType.TAX, effect.category, effect.amounts, effect.currencies, draft, values, context, env)


@apply_effect.register(AddFee)
def _add_fee(effect: AddFee, draft, values, context, env) -> None:
    _attach(UnitType.FEE, effect.category, effect.amounts, effect.currencies, draft, values, context, env)
