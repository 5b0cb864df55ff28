import datetime
from decimal import Decimal

from ledger_core.models import Account, BankAccount
from ledger_core.services import post_entry

# code, name, type, sub type
CHART = {
    "cash": ("1000", "Cash at Bank", "asset", "current_asset"),
    "receivable": ("1200", "Accounts Receivable", "asset", "current_asset"),
    "equipment": ("1500", "Office Equipment", "asset", "fixed_asset"),
    "tax": ("2200", "Sales Tax Payable", "liability", "current_liability"),
    "loan": ("2500", "Bank Loan", "liability", "long_term_liability"),
    "capital": ("3000", "Owner's Capital", "equity", "owner_equity"),
    "revenue": ("4000", "Service Revenue", "revenue", "operating_revenue"),
    "rent": ("5000", "Rent Expense", "expense", "operating_expense"),
    "travel": ("5100", "Travel Expense", "expense", "operating_expense"),
}


def make_chart():
    """Standard small-business chart; cash is linked to a bank account."""
    accounts = {
        key: Account.objects.create(code=code, name=name, ac_type=ac_type, sub_type=sub_type)
        for key, (code, name, ac_type, sub_type) in CHART.items()
    }
    accounts["bank"] = BankAccount.objects.create(
        name="Operating Account", ledger_account=accounts["cash"]
    )
    return accounts


def dr(account, amount):
    return {"account_id": account.pk, "debit_amount": Decimal(amount)}


def cr(account, amount):
    return {"account_id": account.pk, "credit_amount": Decimal(amount)}


def post(day, *lines, description="Test entry", **extra):
    return post_entry(dict(entry_date=day, description=description, **extra), list(lines))


def d(value):
    return datetime.date.fromisoformat(value)


def balance_of(account):
    account.refresh_from_db()
    return account.balance
