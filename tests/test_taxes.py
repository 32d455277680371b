from __future__ import annotations

from extraction.context import EXCHANGE_RATE, JOINT_ACCOUNT, WITHHOLDING_TAX_FOUND, Context
from extraction.model import Money, TransactionTemplate, TransactionType, UnitType
from extraction.sections import run_sections
from extraction.taxes import TAX_AND_FEE_SECTIONS, to_transaction_currency


CAPITAL_GAINS = "Kapitalertragsteuer 25,00 % auf 200,00 EUR 50,00- EUR"
WITHHELD = "Einbehaltene Quellensteuer 35 % auf 51,00 CHF 14,93- EUR"
CREDITABLE = "Anrechenbare Quellensteuer 15 % auf 42,65 EUR 6,40 EUR"
RECLAIMABLE = "20 % rückforderbare Quellensteuer 10,20 CHF"


def _run(lines, context, env, currency="EUR", type_=TransactionType.DIVIDENDS):
    draft = TransactionTemplate(type_).new_draft()
    draft.currency = currency
    run_sections(lines, 0, len(lines), TAX_AND_FEE_SECTIONS, draft, context, env)
    return draft


def _total(draft, unit_type: UnitType) -> int:
    return sum(u.amount.amount for u in draft.units if u.type is unit_type)


def test_joint_account_sums_both_lines(env) -> None:
    lines = (CAPITAL_GAINS, "Anteilige Berechnungsgrundlage", CAPITAL_GAINS)
    draft = _run(lines, Context({JOINT_ACCOUNT: "true"}), env, type_=TransactionType.SELL)

    assert len(draft.units) == 1
    assert draft.units[0].amount == Money("EUR", 10000)
    assert draft.units[0].category == "capital_gains_tax"


def test_single_account_counts_first_line_once(env) -> None:
    lines = (CAPITAL_GAINS, CAPITAL_GAINS)
    draft = _run(lines, Context({JOINT_ACCOUNT: "false"}), env, type_=TransactionType.SELL)

    assert [u.amount for u in draft.units] == [Money("EUR", 5000)]


def test_joint_solidarity_and_church_tax(env) -> None:
    lines = (
        "Solidaritätszuschlag 5,50 % auf 50,00 EUR 2,75- EUR",
        "Kirchensteuer 9,00 % auf 50,00 EUR 4,50- EUR",
        "Solidaritätszuschlag 5,50 % auf 50,00 EUR 2,75- EUR",
        "Kirchensteuer 9,00 % auf 50,00 EUR 4,50- EUR",
    )
    draft = _run(lines, Context({JOINT_ACCOUNT: "true"}), env)

    by_category = {u.category: u.amount.amount for u in draft.units}
    assert by_category == {"solidarity_surcharge": 550, "church_tax": 900}


def test_withheld_tax_suppresses_creditable_and_reclaimable(env) -> None:
    context = Context()
    context.put_block(EXCHANGE_RATE, "1.1959")
    draft = _run((WITHHELD, CREDITABLE, RECLAIMABLE), context, env)

    assert _total(draft, UnitType.TAX) == 1493
    assert [u.category for u in draft.units] == ["withholding_tax"]
    assert context.flag(WITHHOLDING_TAX_FOUND)


def test_creditable_does_not_suppress_reclaimable(env) -> None:
    context = Context()
    context.put_block(EXCHANGE_RATE, "1.1959")
    draft = _run((CREDITABLE, RECLAIMABLE), context, env)

    assert [(u.category, u.amount) for u in draft.units] == [
        ("creditable_withholding_tax", Money("EUR", 640)),
        ("reclaimable_withholding_tax", Money("EUR", 853)),
    ]


def test_withholding_flag_is_block_local(env) -> None:
    context = Context()
    _run((WITHHELD,), context, env)
    context.begin_block()

    draft = _run((CREDITABLE,), context, env)
    assert _total(draft, UnitType.TAX) == 640


def test_financial_transaction_tax_ignores_withholding_flag(env) -> None:
    draft = _run((WITHHELD, "Finanztransaktionssteuer 5,71- EUR"), Context(), env, type_=TransactionType.BUY)
    assert _total(draft, UnitType.TAX) == 1493 + 571


def test_foreign_tax_without_rate_keeps_its_currency(env) -> None:
    draft = _run((RECLAIMABLE,), Context(), env)
    assert [u.amount for u in draft.units] == [Money("CHF", 1020)]


def test_to_transaction_currency_uses_reciprocal_rate() -> None:
    draft = TransactionTemplate(TransactionType.DIVIDENDS).new_draft()
    draft.currency = "EUR"
    context = Context()
    context.put_block(EXCHANGE_RATE, "1.1959")

    assert to_transaction_currency(Money("CHF", 1020), draft, context) == Money("EUR", 853)
    assert to_transaction_currency(Money("EUR", 1020), draft, context) == Money("EUR", 1020)


def test_fees_are_collected_per_category(env) -> None:
    lines = (
        "Provision 7,50- EUR",
        "Transaktionsentgelt Börse 0,71- EUR",
        "Übertragungs-/Liefergebühr 0,20- EUR",
        "Fremde Abwicklungsgebühr für die Umschreibung von Namensaktien 0,60- EUR",
        "Abwicklungskosten Börse 0,06- EUR",
        "Maklercourtage 0,0800 % vom Kurswert 1,67- EUR",
    )
    draft = _run(lines, Context(), env, type_=TransactionType.BUY)

    assert _total(draft, UnitType.FEE) == 750 + 71 + 20 + 60 + 6 + 167
    assert [u.category for u in draft.units] == [
        "commission",
        "exchange_fee",
        "transfer_fee",
        "third_party_settlement_fee",
        "exchange_settlement_costs",
        "courtage",
    ]


def test_zero_fee_adds_no_unit(env) -> None:
    draft = _run(("Provision 0,00- EUR",), Context(), env, type_=TransactionType.BUY)
    assert draft.units == []


def test_conversion_rounds_half_down() -> None:
    draft = TransactionTemplate(TransactionType.DIVIDENDS).new_draft()
    draft.currency = "EUR"
    context = Context()
    context.put_block(EXCHANGE_RATE, "2")

    assert to_transaction_currency(Money("USD", 101), draft, context) == Money("EUR", 50)
    assert to_transaction_currency(Money("USD", 103), draft, context) == Money("EUR", 51)
    assert to_transaction_currency(Money("USD", 102), draft, context) == Money("EUR", 51)


def test_joint_account_ignores_a_single_tax_line(env) -> None:
    draft = _run((CAPITAL_GAINS,), Context({JOINT_ACCOUNT: "true"}), env, type_=TransactionType.SELL)
    assert draft.units == []
