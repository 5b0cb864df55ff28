from decimal import Decimal

from django.conf import settings

# Fallbacks when a project does not define the LEDGER_* settings
DEFAULT_ACCOUNTS = {
    "receivable": "1200",
    "revenue": "4000",
    "tax_payable": "2200",
}


def currency_places() -> int:
    return getattr(settings, "LEDGER_CURRENCY_PLACES", 2)


def money_quantum() -> Decimal:
    """Smallest currency unit, e.g. Decimal("0.01") for 2 places."""
    return Decimal(1).scaleb(-currency_places())


def default_tax_rate() -> Decimal:
    return Decimal(str(getattr(settings, "LEDGER_DEFAULT_TAX_RATE", "0.10")))


def account_code(role: str) -> str:
    """Chart-of-accounts code configured for a posting role."""
    configured = getattr(settings, "LEDGER_ACCOUNTS", {}) or {}
    return configured.get(role, DEFAULT_ACCOUNTS[role])
