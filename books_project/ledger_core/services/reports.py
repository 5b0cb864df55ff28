"""
Financial statements built from posted journal lines.

Every report is a read-only aggregation returning frozen dataclasses, so
callers (views, admin, tests) get explicit structures instead of ORM rows.
"""
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional, Tuple

from django.db.models import Sum

from ..models import BankAccount, JournalLine
from ..models.account import (BALANCE_SHEET_TYPES, INCOME_STATEMENT_TYPES,
                              LONG_TERM_LIABILITY_SUB_TYPES,
                              NON_CURRENT_ASSET_SUB_TYPES, signed_amount)

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class AccountAmount:
    """One account's aggregate in its normal-balance sign convention."""
    account_id: Optional[int]
    code: str
    name: str
    ac_type: str
    amount: Decimal


@dataclass(frozen=True)
class ProfitAndLoss:
    start_date: date
    end_date: date
    revenue_total: Decimal
    expense_total: Decimal
    net_income: Decimal
    by_account: Tuple[AccountAmount, ...] = ()


@dataclass(frozen=True)
class BalanceSheet:
    as_of: date
    assets: Tuple[AccountAmount, ...]
    liabilities: Tuple[AccountAmount, ...]
    equity: Tuple[AccountAmount, ...]
    total_assets: Decimal
    total_liabilities: Decimal
    total_equity: Decimal
    total_liabilities_and_equity: Decimal
    current_earnings: Decimal = ZERO

    @property
    def is_balanced(self):
        return self.total_assets == self.total_liabilities_and_equity


@dataclass(frozen=True)
class CashFlow:
    start_date: date
    end_date: date
    operating: Decimal
    investing: Decimal
    financing: Decimal
    net_change: Decimal
    opening_cash: Decimal
    closing_cash: Decimal


@dataclass(frozen=True)
class TrialBalanceRow:
    account_id: int
    code: str
    name: str
    ac_type: str
    debit: Decimal
    credit: Decimal


@dataclass(frozen=True)
class TrialBalance:
    as_of: date
    rows: Tuple[TrialBalanceRow, ...] = field(default_factory=tuple)
    total_debit: Decimal = ZERO
    total_credit: Decimal = ZERO


def _account_totals(lines):
    """Group posted lines by account → (debit, credit) sums, ordered by code."""
    return (
        lines.values("account_id", "account__code", "account__name", "account__ac_type")
        .annotate(debit=Sum("debit_amount"), credit=Sum("credit_amount"))
        .order_by("account__code")
    )


def _account_amounts(lines):
    amounts = []
    for row in _account_totals(lines):
        amounts.append(AccountAmount(
            account_id=row["account_id"],
            code=row["account__code"],
            name=row["account__name"],
            ac_type=row["account__ac_type"],
            amount=signed_amount(
                row["account__ac_type"], row["debit"] or ZERO, row["credit"] or ZERO
            ),
        ))
    return amounts


def _sum(amounts):
    return sum((a.amount for a in amounts), ZERO)


# ----------------------------
# Profit & Loss
# ----------------------------
def profit_and_loss(start_date, end_date) -> ProfitAndLoss:
    """Revenue and expense activity of posted entries dated within [start, end]."""
    lines = JournalLine.objects.between(start_date, end_date).filter(
        account__ac_type__in=INCOME_STATEMENT_TYPES
    )
    by_account = _account_amounts(lines)
    revenue = _sum(a for a in by_account if a.ac_type == "revenue")
    expense = _sum(a for a in by_account if a.ac_type == "expense")
    return ProfitAndLoss(
        start_date=start_date,
        end_date=end_date,
        revenue_total=revenue,
        expense_total=expense,
        net_income=revenue - expense,
        by_account=tuple(by_account),
    )


# ----------------------------
# Balance sheet
# ----------------------------
def balance_sheet(as_of) -> BalanceSheet:
    """
    Cumulative position at `as_of`. Income and expense not yet closed to
    equity appear as a synthetic "Current earnings" equity row, so
    assets == liabilities + equity for any date.
    """
    all_lines = JournalLine.objects.as_of(as_of)
    sheet = _account_amounts(all_lines.filter(account__ac_type__in=BALANCE_SHEET_TYPES))
    assets = [a for a in sheet if a.ac_type == "asset"]
    liabilities = [a for a in sheet if a.ac_type == "liability"]
    equity = [a for a in sheet if a.ac_type == "equity"]

    earnings = _account_amounts(all_lines.filter(account__ac_type__in=INCOME_STATEMENT_TYPES))
    current_earnings = (
        _sum(a for a in earnings if a.ac_type == "revenue")
        - _sum(a for a in earnings if a.ac_type == "expense")
    )
    if current_earnings:
        equity.append(AccountAmount(
            account_id=None,
            code="",
            name="Current earnings",
            ac_type="equity",
            amount=current_earnings,
        ))

    total_assets = _sum(assets)
    total_liabilities = _sum(liabilities)
    total_equity = _sum(equity)
    return BalanceSheet(
        as_of=as_of,
        assets=tuple(assets),
        liabilities=tuple(liabilities),
        equity=tuple(equity),
        total_assets=total_assets,
        total_liabilities=total_liabilities,
        total_equity=total_equity,
        total_liabilities_and_equity=total_liabilities + total_equity,
        current_earnings=current_earnings,
    )


# ----------------------------
# Cash flow
# ----------------------------
def cash_account_ids():
    """Ledger accounts linked from a bank account count as cash."""
    return set(
        BankAccount.objects.filter(ledger_account__isnull=False)
        .values_list("ledger_account_id", flat=True)
    )


def classify_counterparty(ac_type, sub_type):
    if ac_type == "equity":
        return "financing"
    if ac_type == "liability" and sub_type in LONG_TERM_LIABILITY_SUB_TYPES:
        return "financing"
    if ac_type == "asset" and sub_type in NON_CURRENT_ASSET_SUB_TYPES:
        return "investing"
    return "operating"


def _cash_position(lines, cash_ids):
    debit, credit = lines.filter(account_id__in=cash_ids).totals()
    return debit - credit


def cash_flow(start_date, end_date) -> CashFlow:
    """
    Movement of cash accounts over [start, end]. Each entry's cash effect is
    attributed to one category, chosen by its largest non-cash line.
    """
    cash_ids = cash_account_ids()
    if not cash_ids:
        return CashFlow(start_date, end_date, ZERO, ZERO, ZERO, ZERO, ZERO, ZERO)

    posted = JournalLine.objects.posted()
    opening = _cash_position(
        posted.filter(journal__entry_date__lt=start_date), cash_ids
    )
    closing = _cash_position(JournalLine.objects.as_of(end_date), cash_ids)

    in_range = JournalLine.objects.between(start_date, end_date)
    touched = in_range.filter(account_id__in=cash_ids).values("journal_id")
    lines = (
        in_range.filter(journal_id__in=touched)
        .select_related("account")
        .order_by("journal_id", "id")
    )

    cash_by_entry = defaultdict(lambda: ZERO)
    dominant = {}
    for line in lines:
        if line.account_id in cash_ids:
            cash_by_entry[line.journal_id] += line.debit_amount - line.credit_amount
            continue
        size = line.debit_amount + line.credit_amount
        current = dominant.get(line.journal_id)
        # first line wins ties
        if current is None or size > current[0]:
            dominant[line.journal_id] = (size, line.account)

    totals = {"operating": ZERO, "investing": ZERO, "financing": ZERO}
    for journal_id, cash_amount in cash_by_entry.items():
        counterparty = dominant.get(journal_id)
        if counterparty is None:
            # transfer between cash accounts
            category = "operating"
        else:
            account = counterparty[1]
            category = classify_counterparty(account.ac_type, account.sub_type)
        totals[category] += cash_amount

    return CashFlow(
        start_date=start_date,
        end_date=end_date,
        operating=totals["operating"],
        investing=totals["investing"],
        financing=totals["financing"],
        net_change=totals["operating"] + totals["investing"] + totals["financing"],
        opening_cash=opening,
        closing_cash=closing,
    )


# ----------------------------
# Trial balance
# ----------------------------
def trial_balance(as_of) -> TrialBalance:
    """Net debit or credit per account; the two columns always agree."""
    rows = []
    for row in _account_totals(JournalLine.objects.as_of(as_of)):
        net = (row["debit"] or ZERO) - (row["credit"] or ZERO)
        if not net:
            continue
        rows.append(TrialBalanceRow(
            account_id=row["account_id"],
            code=row["account__code"],
            name=row["account__name"],
            ac_type=row["account__ac_type"],
            debit=net if net > 0 else ZERO,
            credit=-net if net < 0 else ZERO,
        ))
    return TrialBalance(
        as_of=as_of,
        rows=tuple(rows),
        total_debit=sum((r.debit for r in rows), ZERO),
        total_credit=sum((r.credit for r in rows), ZERO),
    )
