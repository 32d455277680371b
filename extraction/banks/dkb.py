"""Rule table for Deutsche Kreditbank (DKB) statements.

Pure data: document types, block starts and sections. Regexes keep `.` in
place of umlauts because the text layer of older statements varies there.
"""

from __future__ import annotations

from extraction.context import JOINT_ACCOUNT
from extraction.documents import BlockSpec, ContextRule, DocumentType
from extraction.effects import (
    PutContext,
    RecordExchangeRate,
    SetAmount,
    SetDate,
    SetNote,
    SetSecurity,
    SetShares,
    SetStatementDate,
    SetType,
)
from extraction.model import TransactionTemplate, TransactionType
from extraction.registry import BankExtractor
from extraction.sections import Alternative, FindSection, OneOfSection, OptionalSection, RequiredSection
from extraction.taxes import AddFee, FeeCategory


SECURITY_HEADER = r"Nominale Wertpapierbezeichnung ISIN \(WKN\)"

# Anteilige Berechnungsgrundlage für (50,00 %) Kapitalertragsteuer 65,63 EUR
JOINT_ACCOUNT_RULE = ContextRule(r"^Anteilige Berechnungsgrundlage f.r \(50,00(\s+)?%\).*$", flag=JOINT_ACCOUNT)

# EUR 2.000,00 8,75 % METALCORP GROUP B.V. DE000A1HLTD2 (A1HLTD)
# Stück 29,2893 COMSTAGE-MSCI WORLD TRN U.ETF LU0392494562 (ETF110)
_SECURITY_LINE = r"^(St.ck|\w{3}) (?P<shares>[\.,\d]+) (?P<name>.*) (?P<isin>\w{12}) \((?P<wkn>.*)\)$"
_NAME_CONTINUED = r"(?P<nameContinued>.*)"

_SHARES = FindSection(
    marker=SECURITY_HEADER,
    patterns=(r"^(?P<notation>St.ck|\w{3}) (?P<shares>[\.,\d]+) .*$",),
    effects=(SetShares(),),
    attributes=("notation", "shares"),
    name="shares",
)


# ---------------------------------------------------------------------------
# Wertpapier Abrechnung Kauf / Verkauf, redemptions
# ---------------------------------------------------------------------------

_BUY_SELL_START = (
    r"^(Wertpapier Abrechnung "
    r"(?P<type>Kauf|Kauf Direkthandel|Ausgabe Investmentfonds|Verkauf|Verkauf Direkthandel"
    r"|Verkauf aus Kapitalma.nahme|R.cknahme Investmentfonds)"
    r"|(?P<redemption>Gesamtk.ndigung|Teilr.ckzahlung mit Nennwert.nderung|Teilliquidation mit Nennwertreduzierung))$"
)

_SELL_TYPES = {
    "Verkauf": TransactionType.SELL,
    "Verkauf Direkthandel": TransactionType.SELL,
    "Verkauf aus Kapitalmaßnahme": TransactionType.SELL,
    "Rücknahme Investmentfonds": TransactionType.SELL,
}

_REDEMPTION_TYPES = {
    "Gesamtkündigung": TransactionType.SELL,
    "Teilrückzahlung mit Nennwertänderung": TransactionType.SELL,
    "Teilliquidation mit Nennwertreduzierung": TransactionType.SELL,
}

BUY_SELL = BlockSpec(
    start=_BUY_SELL_START,
    template=TransactionTemplate(TransactionType.BUY),
    with_taxes_and_fees=True,
    name="buy_sell",
    sections=(
        OptionalSection(
            patterns=(_BUY_SELL_START,),
            effects=(SetType("type", _SELL_TYPES), SetType("redemption", _REDEMPTION_TYPES)),
            name="type",
        ),
        # EUR 2.000,00 8,75 % METALCORP GROUP B.V. DE000A1HLTD2 (A1HLTD)
        # EO-ANLEIHE 2013(18)
        # Kurswert 1.950,00- EUR
        FindSection(
            marker=SECURITY_HEADER,
            patterns=(
                _SECURITY_LINE,
                _NAME_CONTINUED,
                r"^(Kurswert|R.ckzahlungsbetrag) [\.,\d]+([+-])? (?P<currency>\w{3})(.*)?$",
            ),
            # security and shares are handed to the tax settlement block below
            effects=(SetSecurity(), PutContext(("name", "nameContinued", "isin", "wkn"))),
            attributes=("name", "isin", "wkn", "nameContinued", "currency"),
            name="security",
        ),
        FindSection(
            marker=SECURITY_HEADER,
            patterns=(r"^(?P<notation>St.ck|\w{3}) (?P<shares>[\.,\d]+) .*$",),
            effects=(SetShares(context_key="shares"),),
            attributes=("notation", "shares"),
            name="shares",
        ),
        # Den Gegenwert buchen wir mit Valuta 09.07.2020 zu Gunsten des Kontos 1053412345
        OptionalSection(
            patterns=(r"^Den (Gegenwert|Betrag) buchen wir mit Valuta (?P<date>\d{2}\.\d{2}\.\d{4}) .*$",),
            effects=(SetDate(),),
            name="value date",
        ),
        # Schlusstag/-Zeit 25.11.2015 11:02:54 Zinstermin Monat(e) 27. Juni
        OptionalSection(
            patterns=(r"^Schlusstag(/-Zeit)? .* (?P<time>\d{2}:\d{2}:\d{2}) .*$",),
            effects=(PutContext(("time",), block=True),),
            name="time",
        ),
        # Schlusstag 06.03.2017 Auftraggeber Max Mustermann
        OptionalSection(
            patterns=(r"^Schlusstag(/-Zeit)? (?P<date>\d{2}\.\d{2}\.\d{4}) .*$",),
            effects=(SetDate(time="time"),),
            name="trade date",
        ),
        # Ausmachender Betrag 2.974,39+ EUR
        OptionalSection(
            patterns=(r"^Ausmachender Betrag (?P<amount>[\.,\d]+)([+-])? (?P<currency>\w{3})$",),
            effects=(SetAmount(),),
            name="amount",
        ),
        # Limit 1,75 EUR
        # Rückzahlungskurs 100 % Rückzahlungsdatum 31.07.2014
        OptionalSection(
            patterns=(r"^(?P<note>(Limit|R.ckzahlungskurs) [\.,\d]+ (\w{3}|%))(.*)?$",),
            effects=(SetNote(),),
            name="note",
        ),
    ),
)

# Steuerliche Ausgleichrechnung
# Ausmachender Betrag 56,57 EUR
# Den Gegenwert buchen wir mit Valuta 27.10.2015 zu Gunsten des Kontos 12345678
TAX_SETTLEMENT = BlockSpec(
    start=r"^Steuerliche Ausgleichrechnung$",
    template=TransactionTemplate(TransactionType.TAX_REFUND),
    name="tax_settlement",
    sections=(
        OptionalSection(
            patterns=(
                r"^Ausmachender Betrag (?P<amount>[\.,\d]+) (?P<currency>\w{3})$",
                r"^Den Gegenwert buchen wir mit Valuta (?P<date>\d{2}\.\d{2}\.\d{4}) .*$",
            ),
            effects=(SetDate(), SetAmount(), SetShares(notation=None), SetSecurity()),
            attributes=("amount", "currency", "date"),
            name="tax settlement",
        ),
    ),
)


# ---------------------------------------------------------------------------
# Dividendengutschrift, Zinsgutschrift, Ausschüttung
# ---------------------------------------------------------------------------

_DIVIDEND_START = (
    r"^(Dividendengutschrift|Zinsgutschrift|Gutschrift von Investmentertr.gen|Aussch.ttung aus Genussschein"
    r"|Aussch.ttung Investmentfonds|Ertragsgutschrift nach § 27 KStG|Gutschrift"
    r"|Ertr.gnisgutschrift aus Wertpapieren)$"
)

DIVIDEND = BlockSpec(
    start=_DIVIDEND_START,
    template=TransactionTemplate(TransactionType.DIVIDENDS),
    with_taxes_and_fees=True,
    name="dividend",
    sections=(
        # EUR 10.000,00 PCC SE DE000A1R1AN5 (A1R1AN)
        # INH.-TEILSCHULDV. V.13(13/17)
        # Zinsertrag 181,25+ EUR
        FindSection(
            marker=SECURITY_HEADER,
            patterns=(
                _SECURITY_LINE,
                _NAME_CONTINUED,
                r"^(Zinsertrag|Zahlbarkeitstag .*) [\.,\d]+([+])? (?P<currency>\w{3})$",
            ),
            effects=(SetSecurity(),),
            attributes=("name", "isin", "wkn", "nameContinued", "currency"),
            required=False,
            name="security",
        ),
        # Stück 10,6841 SPDR S&P US DIVID.ARISTOCR.ETF
        # REGISTERED SHARES O.N.
        # IE00B6YX5D40 (A1JKS0)
        # Ertrag pro St. 0,230700000 USD
        FindSection(
            marker=SECURITY_HEADER,
            patterns=(
                r"^(St.ck|\w{3}) (?P<shares>[\.,\d]+) (?P<name>.*)$",
                _NAME_CONTINUED,
                r"^(?P<isin>\w{12}) \((?P<wkn>.*)\)$",
                r"^Ertrag pro St. [\.,\d]+ (?P<currency>\w{3})$",
            ),
            effects=(SetSecurity(),),
            attributes=("name", "isin", "wkn", "nameContinued", "currency"),
            required=False,
            name="security (isin on own line)",
        ),
        _SHARES,
        # Den Betrag buchen wir mit Wertstellung 04.01.2016 zu Gunsten des Kontos 12345678
        RequiredSection(
            patterns=(r"^Den Betrag buchen wir mit Wertstellung (?P<date>\d{2}\.\d{2}\.\d{4}) .*$",),
            effects=(SetDate(),),
            name="date",
        ),
        # Ausmachender Betrag 144,52+ EUR
        RequiredSection(
            patterns=(r"^Ausmachender Betrag (?P<amount>[\.,\d]+)[+] (?P<currency>\w{3})$",),
            effects=(SetAmount(),),
            name="amount",
        ),
        # Devisenkurs EUR / CHF 1,1959
        # Ausschüttung 51,00 CHF 42,65+ EUR
        OptionalSection(
            patterns=(
                r"^Devisenkurs \w{3} / \w{3} (?P<exchangeRate>[\.,\d]+)(.*)?$",
                r"^(Aussch.ttung|Dividendengutschrift|Kurswert) (?P<fxAmount>[\.,\d]+) (?P<fxCurrency>\w{3}) "
                r"(?P<amount>[\.,\d]+)[+] (?P<currency>\w{3})(.*)?$",
            ),
            effects=(RecordExchangeRate(),),
            attributes=("exchangeRate", "fxAmount", "fxCurrency", "amount", "currency"),
            name="exchange rate",
        ),
        # Ex-Tag 09.02.2017 Art der Dividende Quartalsdividende
        OptionalSection(patterns=(r"^.* Art der Dividende (?P<note>.*)$",), effects=(SetNote(),), name="note"),
        OptionalSection(patterns=(r"^(?P<note>Kapitalr.ckzahlung)$",), effects=(SetNote(),), name="note"),
    ),
)


# ---------------------------------------------------------------------------
# Vorabpauschale Investmentfonds
# ---------------------------------------------------------------------------

ADVANCE_TAX = BlockSpec(
    start=r"^Vorabpauschale Investmentfonds$",
    template=TransactionTemplate(TransactionType.TAXES),
    name="advance_tax",
    sections=(
        # Stück 49,1102 VANGUARD FTSE ALL-WORLD U.ETF IE00BK5BQT80 (A2PKXG)
        # REG. SHS USD ACC. ON
        # Zahlbarkeitstag 04.01.2021 Vorabpauschale pro St. 0,037971560 EUR
        FindSection(
            marker=SECURITY_HEADER,
            patterns=(
                _SECURITY_LINE,
                _NAME_CONTINUED,
                r"^.* Vorabpauschale pro St. [\.,\d]+ (?P<currency>\w{3})$",
            ),
            effects=(SetSecurity(),),
            attributes=("name", "isin", "wkn", "nameContinued", "currency"),
            name="security",
        ),
        _SHARES,
        RequiredSection(
            patterns=(r"^Den Betrag buchen wir mit Wertstellung (?P<date>\d{2}\.\d{2}\.\d{4}) .*$",),
            effects=(SetDate(),),
            name="date",
        ),
        # Ausmachender Betrag 0,08- EUR
        OptionalSection(
            patterns=(r"^Ausmachender Betrag (?P<amount>[\.,\d]+)- (?P<currency>\w{3})$",),
            effects=(SetAmount(),),
            name="amount",
        ),
    ),
)


# ---------------------------------------------------------------------------
# Halbjahresabrechnung Sparplan
# ---------------------------------------------------------------------------

# Kauf 90,00 531781/77.00 40,1900 1,0000 2,2394 05.07.2018 09.07.2018 0,00 0,00
_SAVINGS_PLAN_PURCHASE = (
    r"^Kauf (?P<amount>[\.,\d]+) \d{2,10}/.* (?P<shares>[\.,\d]+) "
    r"(?P<date>\d{2}\.\d{2}\.\d{4}) \d{2}\.\d{2}\.\d{4} .*$"
)

_SAVINGS_PLAN_EFFECTS = (
    SetSecurity(),
    SetDate(),
    SetShares(notation=None),
    SetAmount(),
)

SAVINGS_PLAN_PURCHASE = BlockSpec(
    start=r"^Kauf [\.,\d]+ .*$",
    template=TransactionTemplate(TransactionType.BUY),
    name="savings_plan_purchase",
    sections=(
        OneOfSection(
            alternatives=(
                # + Provision 0,49 Summe 200,49
                Alternative(
                    patterns=(_SAVINGS_PLAN_PURCHASE, r"^.* Provision (?P<fee>[\.,\d]+) .*$"),
                    effects=_SAVINGS_PLAN_EFFECTS + (AddFee(FeeCategory.COMMISSION),),
                    attributes=("amount", "shares", "date", "fee", "currency"),
                ),
                Alternative(
                    patterns=(_SAVINGS_PLAN_PURCHASE,),
                    effects=_SAVINGS_PLAN_EFFECTS,
                    attributes=("amount", "shares", "date", "currency"),
                ),
            ),
            name="purchase",
        ),
    ),
)


# ---------------------------------------------------------------------------
# Kontoauszug (giro account)
# ---------------------------------------------------------------------------

# 02.01. 02.01. Überweisung 1.000,00
def _booking_line(kinds: str, lead: str = "") -> str:
    return (
        rf"^\d{{2}}\.(?P<postingMonth>\d{{2}})\. (?P<day>\d{{2}})\.(?P<month>\d{{2}})\. "
        rf"{lead}(?P<note>{kinds}) (?P<amount>[\.,\d]+)$"
    )


def _booking_start(kinds: str, lead: str = "") -> str:
    return rf"^\d{{2}}\.\d{{2}}\. \d{{2}}\.\d{{2}}\. {lead}({kinds}) [\.,\d]+$"


_REMOVAL_KINDS = r".berweisung|Dauerauftrag|Basislastschrift|Kartenzahlung|Kreditkartenabr."
_DEPOSIT_KINDS = r"Lohn, Gehalt, Rente|Zahlungseingang|Bareinzahlung am GA|sonstige Buchung|Eingang Echtzeit.berw"

_STATEMENT_BOOKING = (SetStatementDate(), SetAmount(), SetNote())

ACCOUNT_INTEREST = BlockSpec(
    start=r"^Abrechnungszeitraum vom \d{2}\.\d{2}\.\d{4} bis \d{2}\.\d{2}\.\d{4}$",
    template=TransactionTemplate(TransactionType.INTEREST),
    name="interest",
    sections=(
        # Abrechnungszeitraum vom 01.10.2020 bis 31.12.2020
        # Zinsen für eingeräumte Kontoüberziehung 3,28-
        OptionalSection(
            patterns=(
                r"^(?P<note>Abrechnungszeitraum vom \d{2}\.\d{2}\.\d{4} bis \d{2}\.\d{2}\.\d{4})$",
                r"^(Zinsen f.r Guthaben|Zinsen f.r einger.umte Konto.berziehung) (\s+)?(?P<amount>[\.,\d]+)(?P<sign>[+-])$",
            ),
            effects=(
                SetType("sign", {"-": TransactionType.INTEREST_CHARGE}),
                SetDate("accountingBillDate"),
                SetAmount(),
                SetNote(),
            ),
            attributes=("note", "amount", "sign"),
            name="interest",
        ),
    ),
)

OVERDRAFT_INTEREST = BlockSpec(
    start=r"^Zinsen f.r Dispositionskredit (\s+)?[\.,\d]+-$",
    template=TransactionTemplate(TransactionType.INTEREST),
    name="overdraft_interest",
    sections=(
        RequiredSection(
            patterns=(r"^(?P<note>Zinsen f.r Dispositionskredit) (\s+)?(?P<amount>[\.,\d]+)(?P<sign>[+-])$",),
            effects=(
                SetType("sign", {"-": TransactionType.INTEREST_CHARGE}),
                SetDate("accountingBillDate"),
                SetAmount(),
                SetNote(),
            ),
            name="overdraft interest",
        ),
    ),
)

ACCOUNT_TAXES = BlockSpec(
    start=r"^Kapitalertragsteuer (\s+)?[\.,\d]+[+-]$",
    template=TransactionTemplate(TransactionType.TAXES),
    name="account_taxes",
    sections=(
        # Kapitalertragsteuer 12,34+
        RequiredSection(
            patterns=(r"^(?P<note>Kapitalertragsteuer) (\s+)?(?P<amount>[\.,\d]+)(?P<sign>[+-])$",),
            effects=(
                SetType("sign", {"+": TransactionType.TAX_REFUND}),
                SetDate("accountingBillDate"),
                SetAmount(),
                SetNote(),
            ),
            name="capital gains tax",
        ),
    ),
)

ACCOUNT_REMOVAL = BlockSpec(
    start=_booking_start(_REMOVAL_KINDS),
    template=TransactionTemplate(TransactionType.REMOVAL),
    name="removal",
    sections=(RequiredSection(patterns=(_booking_line(_REMOVAL_KINDS),), effects=_STATEMENT_BOOKING, name="removal"),),
)

ACCOUNT_DEPOSIT = BlockSpec(
    start=_booking_start(_DEPOSIT_KINDS),
    template=TransactionTemplate(TransactionType.DEPOSIT),
    name="deposit",
    sections=(RequiredSection(patterns=(_booking_line(_DEPOSIT_KINDS),), effects=_STATEMENT_BOOKING, name="deposit"),),
)

# 30.12. 30.12. 8390 Steuerausgleich 12,34
ACCOUNT_TAX_SETTLEMENT = BlockSpec(
    start=_booking_start("Steuerausgleich", lead=r"\d+ "),
    template=TransactionTemplate(TransactionType.TAX_REFUND),
    name="tax_settlement",
    sections=(
        RequiredSection(
            patterns=(_booking_line("Steuerausgleich", lead=r"\d+ "),),
            effects=_STATEMENT_BOOKING,
            name="tax settlement",
        ),
    ),
)

# 05.03. 05.03. Rechnung 1,50
# Entgelt Bargeldeinzahlung am Automaten
ACCOUNT_FEES = BlockSpec(
    start=_booking_start("Rechnung"),
    template=TransactionTemplate(TransactionType.FEES),
    name="fees",
    sections=(
        RequiredSection(
            patterns=(_booking_line("Rechnung"), r"^.* Bargeldeinzahlung .*$"),
            effects=_STATEMENT_BOOKING,
            name="fees",
        ),
    ),
)


# ---------------------------------------------------------------------------
# Kreditkartenabrechnung
# ---------------------------------------------------------------------------

_CARD_DATES = r"^\d{2}\.\d{2}\.\d{2} (?P<date>\d{2}\.\d{2}\.\d{2})"
_CARD_BOOKING = (
    SetDate(century="century"),
    SetAmount(),
    # "*" and ">" are printed around merchants abroad
    SetNote(strip_prefix="*", strip_suffix=">"),
)
_CARD_ATTRIBUTES = ("date", "note", "amount")

CARD_DEPOSIT = BlockSpec(
    start=r"^\d{2}\.\d{2}\.\d{2} \d{2}\.\d{2}\.\d{2}(?! Habenzins).* [\.,\d]+\+$",
    template=TransactionTemplate(TransactionType.DEPOSIT),
    name="card_deposit",
    sections=(
        OneOfSection(
            alternatives=(
                # 15.11.20 16.11.20 Ausgleich Kreditkarte gem. Abrechnung v. 500,00+
                Alternative(
                    patterns=(_CARD_DATES + r" (?P<note>Ausgleich Kreditkarte gem\. Abrechnung) v\. (?P<amount>[\.,\d]+)\+$",),
                    effects=_CARD_BOOKING,
                    attributes=_CARD_ATTRIBUTES,
                ),
                # 03.11.20 04.11.20 *Refund Shop USD 12,00 1,1800 10,17+
                Alternative(
                    patterns=(_CARD_DATES + r"(?P<note>(?! Habenzins).*) \w{3} [\.,\d]+ [\.,\d]+ (?P<amount>[\.,\d]+)\+$",),
                    effects=_CARD_BOOKING,
                    attributes=_CARD_ATTRIBUTES,
                ),
                Alternative(
                    patterns=(_CARD_DATES + r"(?P<note>(?! Habenzins).*) (?P<amount>[\.,\d]+)\+$",),
                    effects=_CARD_BOOKING,
                    attributes=_CARD_ATTRIBUTES,
                ),
            ),
            required=True,
            name="deposit",
        ),
    ),
)

# 30.11.20 30.11.20 Habenzins auf 30 Tage 0,05+
CARD_INTEREST = BlockSpec(
    start=r"^\d{2}\.\d{2}\.\d{2} \d{2}\.\d{2}\.\d{2} Habenzins auf \d+ Tage [\.,\d]+\+$",
    template=TransactionTemplate(TransactionType.INTEREST),
    name="card_interest",
    sections=(
        RequiredSection(
            patterns=(_CARD_DATES + r" (?P<note>Habenzins auf \d+ Tage) (?P<amount>[\.,\d]+)\+$",),
            effects=_CARD_BOOKING,
            name="interest",
        ),
    ),
)

# 30.11.20 30.11.20 Abgeltungsteuer 0,01 -
CARD_TAXES = BlockSpec(
    start=r"^\d{2}\.\d{2}\.\d{2} \d{2}\.\d{2}\.\d{2} Abgeltungsteuer [\.,\d]+ -$",
    template=TransactionTemplate(TransactionType.TAXES),
    name="card_taxes",
    sections=(
        RequiredSection(
            patterns=(_CARD_DATES + r" (?P<note>Abgeltungsteuer) (?P<amount>[\.,\d]+) -$",),
            effects=_CARD_BOOKING,
            name="taxes",
        ),
    ),
)

CARD_REMOVAL = BlockSpec(
    start=r"^\d{2}\.\d{2}\.\d{2} \d{2}\.\d{2}\.\d{2}(?! Abgeltungsteuer).* [\.,\d]+ -$",
    template=TransactionTemplate(TransactionType.REMOVAL),
    name="card_removal",
    sections=(
        OneOfSection(
            alternatives=(
                # 02.11.20 03.11.20 *Amazon Marketplace> USD 25,00 1,1700 21,37 -
                Alternative(
                    patterns=(_CARD_DATES + r"(?P<note>(?! Abgeltungsteuer).*) \w{3} [\.,\d]+ [\.,\d]+ (?P<amount>[\.,\d]+) -$",),
                    effects=_CARD_BOOKING,
                    attributes=_CARD_ATTRIBUTES,
                ),
                # 05.11.20 06.11.20 REWE Markt Berlin 23,45 -
                Alternative(
                    patterns=(_CARD_DATES + r"(?P<note>(?! Abgeltungsteuer).*) (?P<amount>[\.,\d]+) -$",),
                    effects=_CARD_BOOKING,
                    attributes=_CARD_ATTRIBUTES,
                ),
            ),
            required=True,
            name="removal",
        ),
    ),
)


# ---------------------------------------------------------------------------
# Document types, most specific first
# ---------------------------------------------------------------------------

ACCOUNT_STATEMENT = DocumentType(
    name="account_statement",
    pattern=r"Kontoauszug Nummer",
    context_rules=(
        # Bu.Tag Wert Wir haben für Sie gebucht Belastung in EUR Gutschrift in EUR
        ContextRule(r"^Bu.Tag Wert Wir haben f.r Sie gebucht Belastung in (?P<currency>\w{3}).*$"),
        # Kontoauszug Nummer 001 / 2021 vom 01.01.2021 bis 29.01.2021
        ContextRule(
            r"^Kontoauszug Nummer (?P<nr>\d{3}) / (?P<year>\d{4}) vom \d{2}\.\d{2}\.\d{4} bis \d{2}\.\d{2}\.\d{4}$"
        ),
        # Abrechnung 31.12.2020
        ContextRule(r"^Abrechnung (?P<accountingBillDate>\d{2}\.\d{2}\.\d{4})$"),
    ),
    blocks=(
        ACCOUNT_INTEREST,
        OVERDRAFT_INTEREST,
        ACCOUNT_TAXES,
        ACCOUNT_REMOVAL,
        ACCOUNT_DEPOSIT,
        ACCOUNT_TAX_SETTLEMENT,
        ACCOUNT_FEES,
    ),
)

CREDIT_CARD_STATEMENT = DocumentType(
    name="credit_card_statement",
    pattern=r"Ihre Abrechnung vom ",
    context_rules=(
        # Beleg BuchungVerwendungszweck EUR
        ContextRule(r"^Beleg BuchungVerwendungszweck (?P<currency>\w{3})$"),
        # Ihre Abrechnung vom 01.11.2020 bis 30.11.2020 Abrechnungsdatum: 30. November 2020
        ContextRule(
            r"^Ihre Abrechnung vom \d{2}\.\d{2}\.\d{4} bis \d{2}\.\d{2}\.\d{4} "
            r"Abrechnungsdatum: \d{2}\. .*(?P<century>\d{2})\d{2}$"
        ),
    ),
    blocks=(CARD_DEPOSIT, CARD_INTEREST, CARD_TAXES, CARD_REMOVAL),
)

SAVINGS_PLAN = DocumentType(
    name="savings_plan",
    pattern=r"Halbjahresabrechnung Sparplan",
    context_rules=(
        # iShares Core MSCI World UCITS ETF IE00B4L5Y983 (A0RPWH) Sparplan
        ContextRule(r"(?P<name>.*) (?P<isin>\w{12}) (\((?P<wkn>.*)\).*)$"),
        # EUR in Stück
        ContextRule(r"^(?P<currency>\w{3}) in .*$"),
    ),
    blocks=(SAVINGS_PLAN_PURCHASE,),
)

ADVANCE_TAX_STATEMENT = DocumentType(
    name="advance_tax",
    pattern=r"Vorabpauschale Investmentfonds",
    blocks=(ADVANCE_TAX,),
)

BUY_SELL_CONFIRMATION = DocumentType(
    name="buy_sell",
    pattern=(
        r"(?m)^(Wertpapier Abrechnung .*|Gesamtk.ndigung|Teilr.ckzahlung mit Nennwert.nderung"
        r"|Teilliquidation mit Nennwertreduzierung)$"
    ),
    context_rules=(JOINT_ACCOUNT_RULE,),
    blocks=(BUY_SELL, TAX_SETTLEMENT),
)

DIVIDEND_NOTE = DocumentType(
    name="dividend",
    pattern=r"(?m)" + _DIVIDEND_START,
    context_rules=(JOINT_ACCOUNT_RULE,),
    blocks=(DIVIDEND,),
)


DKB = BankExtractor(
    name="dkb",
    label="Deutsche Kreditbank AG",
    identifiers=("DKB", "Deutsche Kreditbank", "10919 Berlin"),
    document_types=(
        ACCOUNT_STATEMENT,
        CREDIT_CARD_STATEMENT,
        SAVINGS_PLAN,
        ADVANCE_TAX_STATEMENT,
        BUY_SELL_CONFIRMATION,
        DIVIDEND_NOTE,
    ),
)
