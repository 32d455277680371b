from __future__ import annotations

from typing import Protocol

from extraction.model import Security


class SecurityResolver(Protocol):
    def resolve_or_create_security(
        self, name: str | None, isin: str | None, wkn: str | None, currency: str | None
    ) -> Security: ...


class SecurityCache:
    """In-memory resolver: same ISIN / WKN / name within one run -> same security.

    Lookup order is ISIN, then WKN, then name. Identifiers are handed out
    sequentially, so two fresh caches fed the same documents agree.
    """

    def __init__(self) -> None:
        self._securities: list[Security] = []
        self._by_isin: dict[str, Security] = {}
        self._by_wkn: dict[str, Security] = {}
        self._by_name: dict[str, Security] = {}

    def __len__(self) -> int:
        return len(self._securities)

    def resolve_or_create_security(
        self, name: str | None, isin: str | None, wkn: str | None, currency: str | None
    ) -> Security:
        if isin and isin in self._by_isin:
            return self._by_isin[isin]
        if wkn and wkn in self._by_wkn:
            return self._by_wkn[wkn]
        if name and name in self._by_name:
            return self._by_name[name]

        security = Security(
            id=f"sec-{len(self._securities) + 1}",
            name=name,
            isin=isin,
            wkn=wkn,
            currency=currency,
        )
        self._securities.append(security)
        if isin:
            self._by_isin[isin] = security
        if wkn:
            self._by_wkn[wkn] = security
        if name:
            self._by_name[name] = security
        return security
