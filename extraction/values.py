from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation


_CURRENCY_RE = re.compile(r"^[A-Z]{3}$")

# Amounts are always held as integers of 1/100 of the currency unit.
MINOR_UNITS = Decimal("100")
_CENT = Decimal("0.01")


@dataclass(frozen=True)
class ValueCodec:
    """Locale-aware conversion of captured strings into numbers and dates.

    The default instance reads German formatting ("1.234,56", "25.11.2015"),
    which is what the bundled rule tables capture. Methods raise ``ValueError``
    on malformed input; callers that know the field/line wrap it into a
    ``ValueFormatError``.
    """

    decimal_separator: str = ","
    grouping_separator: str = "."
    date_formats: tuple[str, ...] = ("%d.%m.%Y", "%d.%m.%y", "%Y-%m-%d")
    time_formats: tuple[str, ...] = ("%H:%M:%S", "%H:%M")

    def _number_pattern(self) -> re.Pattern[str]:
        group = re.escape(self.grouping_separator)
        dec = re.escape(self.decimal_separator)
        return re.compile(rf"^(?:\d{{1,3}}(?:{group}\d{{3}})+|\d+)(?:{dec}\d+)?$")

    def to_decimal(self, raw: str) -> Decimal:
        if raw is None:
            raise ValueError("missing number")
        s = raw.strip()
        if not self._number_pattern().match(s):
            raise ValueError(f"not a number in this locale: {raw!r}")

        s = s.replace(self.grouping_separator, "").replace(self.decimal_separator, ".")
        try:
            return Decimal(s)
        except InvalidOperation as exc:  # pragma: no cover - guarded by the regex
            raise ValueError(f"not a number: {raw!r}") from exc

    def parse_amount(self, raw: str) -> int:
        """'1.234,56' -> 123456 (minor units, half-up to the cent)."""
        d = self.to_decimal(raw).quantize(_CENT, rounding=ROUND_HALF_UP)
        return int(d * MINOR_UNITS)

    def parse_shares(self, raw: str) -> Decimal:
        return self.to_decimal(raw)

    def parse_exchange_rate(self, raw: str) -> Decimal:
        rate = self.to_decimal(raw)
        if rate == 0:
            raise ValueError("exchange rate must not be zero")
        return rate

    def parse_date(self, raw: str, time_of_day: str | None = None) -> datetime:
        if not raw or not raw.strip():
            raise ValueError("missing date")

        day: datetime | None = None
        for fmt in self.date_formats:
            try:
                day = datetime.strptime(raw.strip(), fmt)
                break
            except ValueError:
                continue
        if day is None:
            raise ValueError(f"unsupported date: {raw!r}")

        if not time_of_day:
            return day

        for fmt in self.time_formats:
            try:
                t = datetime.strptime(time_of_day.strip(), fmt).time()
            except ValueError:
                continue
            return datetime.combine(day.date(), t)
        raise ValueError(f"unsupported time: {time_of_day!r}")

    def format_amount(self, minor: int) -> str:
        """123456 -> '1.234,56'."""
        sign = "-" if minor < 0 else ""
        units, cents = divmod(abs(minor), 100)
        grouped = f"{units:,}".replace(",", self.grouping_separator)
        return f"{sign}{grouped}{self.decimal_separator}{cents:02d}"

    def format_decimal(self, value: Decimal) -> str:
        """Inverse of ``to_decimal`` without grouping (used for context hand-offs)."""
        text = format(value.normalize(), "f")
        return text.replace(".", self.decimal_separator)


def parse_currency_code(raw: str | None) -> str:
    code = (raw or "").strip()
    if not _CURRENCY_RE.match(code):
        raise ValueError(f"not an ISO-4217 currency code: {raw!r}")
    return code


def minor_to_decimal(minor: int) -> Decimal:
    return (Decimal(minor) / MINOR_UNITS).quantize(_CENT)


GERMAN = ValueCodec()


def reciprocal(rate: Decimal) -> Decimal:
    """1 / rate with ten fractional digits, rounded half-down."""
    return (Decimal(1) / rate).quantize(Decimal("1e-10"), rounding=ROUND_HALF_DOWN)
