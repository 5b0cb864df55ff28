from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal

from django.db.models import F, Sum
from django.utils import timezone

from ..models import BankAccount, ExpenseClaim, Invoice
from .reports import profit_and_loss

ZERO = Decimal("0.00")


@dataclass(frozen=True)
class DashboardMetrics:
    total_revenue: Decimal
    outstanding_invoices: Decimal
    cash_balance: Decimal
    monthly_expenses: Decimal
    revenue_growth: Decimal  # percent, month over month
    overdue_invoices_count: int
    bank_accounts_count: int
    expense_growth: Decimal  # percent, month over month


def month_bounds(day):
    """First and last day of the month containing `day`."""
    start = day.replace(day=1)
    if start.month == 12:
        next_start = date(start.year + 1, 1, 1)
    else:
        next_start = date(start.year, start.month + 1, 1)
    return start, next_start - timedelta(days=1)


def growth_percent(current, previous):
    """Percent change; 0 when there is nothing to compare against."""
    if not previous:
        return ZERO
    return ((current - previous) / previous * 100).quantize(
        Decimal("0.1"), rounding=ROUND_HALF_UP
    )


def _claims_total(start, end):
    return ExpenseClaim.objects.filter(
        expense_date__gte=start, expense_date__lte=end
    ).aggregate(total=Sum("amount"))["total"] or ZERO


def dashboard_metrics(today=None) -> DashboardMetrics:
    today = today or timezone.localdate()
    this_start, this_end = month_bounds(today)
    last_start, last_end = month_bounds(this_start - timedelta(days=1))

    total_revenue = Invoice.objects.filter(status="paid").aggregate(
        total=Sum("paid_amount"))["total"] or ZERO
    outstanding = Invoice.objects.filter(status__in=("sent", "overdue")).aggregate(
        total=Sum(F("total_amount") - F("paid_amount")))["total"] or ZERO
    active_banks = BankAccount.objects.active()
    cash = active_banks.aggregate(total=Sum("balance"))["total"] or ZERO

    this_month_expenses = _claims_total(this_start, this_end)
    last_month_expenses = _claims_total(last_start, last_end)
    this_month_revenue = profit_and_loss(this_start, this_end).revenue_total
    last_month_revenue = profit_and_loss(last_start, last_end).revenue_total

    return DashboardMetrics(
        total_revenue=total_revenue,
        outstanding_invoices=outstanding,
        cash_balance=cash,
        monthly_expenses=this_month_expenses,
        revenue_growth=growth_percent(this_month_revenue, last_month_revenue),
        overdue_invoices_count=Invoice.objects.filter(
            status="overdue", due_date__lt=today).count(),
        bank_accounts_count=active_banks.count(),
        expense_growth=growth_percent(this_month_expenses, last_month_expenses),
    )
