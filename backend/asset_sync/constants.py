"""Application constants to avoid magic strings."""

from enum import Enum

# Owner filter value that disables owner filtering on the overview
ALL_OWNERS = "ALL"


class AccountType(str, Enum):
    """Account type as stored by the system of record."""

    REGULAR = "REGULAR"
    PENSION = "PENSION"
    ISA = "ISA"
    IRP = "IRP"
    SPECIAL = "SPECIAL"


class AssetClass(str, Enum):
    """Asset class as stored by the system of record.

    ``STOCK`` and ``BOND`` are legacy values still returned for older rows.
    """

    STOCK = "STOCK"
    STOCK_KR = "STOCK_KR"
    STOCK_US = "STOCK_US"
    ETF_KR = "ETF_KR"
    CRYPTO = "CRYPTO"
    REITS = "REITS"
    BOND = "BOND"
    BOND_KR = "BOND_KR"
    BOND_US = "BOND_US"
    COMMODITY = "COMMODITY"
    GOLD_SPOT = "GOLD_SPOT"
    CASH = "CASH"
    RP = "RP"
    ISSUED_NOTE = "ISSUED_NOTE"
    DEPOSIT_SAVINGS = "DEPOSIT_SAVINGS"

    @property
    def requires_code(self) -> bool:
        """Whether holdings of this class are identified by a market lookup code."""
        return self in CODE_REQUIRED_CLASSES

    @property
    def label(self) -> str:
        return ASSET_CLASS_LABELS[self]


CODE_REQUIRED_CLASSES = frozenset(
    {
        AssetClass.STOCK,
        AssetClass.STOCK_KR,
        AssetClass.STOCK_US,
        AssetClass.ETF_KR,
        AssetClass.CRYPTO,
        AssetClass.REITS,
        AssetClass.BOND,
        AssetClass.BOND_KR,
        AssetClass.BOND_US,
        AssetClass.COMMODITY,
        AssetClass.GOLD_SPOT,
    }
)

ASSET_CLASS_LABELS = {
    AssetClass.STOCK: "Equity",
    AssetClass.STOCK_KR: "Domestic equity",
    AssetClass.STOCK_US: "Foreign equity",
    AssetClass.ETF_KR: "Domestic fund",
    AssetClass.CRYPTO: "Crypto",
    AssetClass.REITS: "Trust certificate",
    AssetClass.BOND: "Bond",
    AssetClass.BOND_KR: "Domestic bond",
    AssetClass.BOND_US: "Foreign bond",
    AssetClass.COMMODITY: "Commodity",
    AssetClass.GOLD_SPOT: "Gold spot",
    AssetClass.CASH: "Cash",
    AssetClass.RP: "Repo",
    AssetClass.ISSUED_NOTE: "Issued note",
    AssetClass.DEPOSIT_SAVINGS: "Savings",
}


class DividendCycle(str, Enum):
    """Distribution cycle labels as written in the spreadsheet."""

    MONTHLY = "1개월"
    QUARTERLY = "3개월"
    SEMIANNUAL = "6개월"
    ANNUAL = "12개월"
    NONE = "없음"

    @property
    def payments_per_year(self) -> int:
        return _PAYMENTS_PER_YEAR[self]

    @classmethod
    def parse(cls, value: str | None) -> "DividendCycle":
        """Map a raw cycle label to a member; unknown or empty labels mean no income."""
        if not value:
            return cls.NONE
        try:
            return cls(value.strip())
        except ValueError:
            return cls.NONE


_PAYMENTS_PER_YEAR = {
    DividendCycle.MONTHLY: 12,
    DividendCycle.QUARTERLY: 4,
    DividendCycle.SEMIANNUAL: 2,
    DividendCycle.ANNUAL: 1,
    DividendCycle.NONE: 0,
}
