from decimal import Decimal

from django.test import TestCase

from ledger_core.models import BankAccount
from ledger_core.services import (balance_sheet, cash_flow, create_draft_entry,
                                  profit_and_loss, trial_balance)

from .helpers import cr, d, dr, make_chart, post


class ReportFixture(TestCase):
    """
    January: owner invests 1000, buys equipment 400, draws a 500 loan,
    earns 300. February: pays 100 rent.
    """

    def setUp(self):
        self.a = make_chart()
        a = self.a
        post(d("2024-01-01"), dr(a["cash"], "1000"), cr(a["capital"], "1000"))
        post(d("2024-01-10"), dr(a["equipment"], "400"), cr(a["cash"], "400"))
        post(d("2024-01-15"), dr(a["cash"], "500"), cr(a["loan"], "500"))
        post(d("2024-01-20"), dr(a["cash"], "300"), cr(a["revenue"], "300"))
        post(d("2024-02-01"), dr(a["rent"], "100"), cr(a["cash"], "100"))
        # drafts never count
        create_draft_entry(
            {"entry_date": d("2024-01-25"), "description": "Not posted"},
            [dr(a["cash"], "999"), cr(a["revenue"], "999")],
        )


class ProfitAndLossTests(ReportFixture):

    def test_single_month(self):
        report = profit_and_loss(d("2024-01-01"), d("2024-01-31"))
        self.assertEqual(report.revenue_total, Decimal("300.00"))
        self.assertEqual(report.expense_total, Decimal("0.00"))
        self.assertEqual(report.net_income, Decimal("300.00"))
        self.assertEqual([row.code for row in report.by_account], ["4000"])

    def test_range_spanning_months(self):
        report = profit_and_loss(d("2024-01-01"), d("2024-02-29"))
        self.assertEqual(report.revenue_total, Decimal("300.00"))
        self.assertEqual(report.expense_total, Decimal("100.00"))
        self.assertEqual(report.net_income, Decimal("200.00"))
        self.assertEqual([row.code for row in report.by_account], ["4000", "5000"])

    def test_empty_range(self):
        report = profit_and_loss(d("2023-01-01"), d("2023-12-31"))
        self.assertEqual(report.net_income, Decimal("0.00"))
        self.assertEqual(report.by_account, ())


class BalanceSheetTests(ReportFixture):

    def test_identity_holds_on_every_date(self):
        for day in ("2023-12-31", "2024-01-01", "2024-01-12", "2024-01-31", "2024-02-29"):
            sheet = balance_sheet(d(day))
            self.assertTrue(sheet.is_balanced, day)
            self.assertEqual(sheet.total_assets, sheet.total_liabilities + sheet.total_equity, day)

    def test_end_of_january_position(self):
        sheet = balance_sheet(d("2024-01-31"))
        self.assertEqual(sheet.total_assets, Decimal("1800.00"))  # cash 1400 + equipment 400
        self.assertEqual(sheet.total_liabilities, Decimal("500.00"))
        self.assertEqual(sheet.current_earnings, Decimal("300.00"))
        self.assertEqual(sheet.total_equity, Decimal("1300.00"))
        self.assertEqual(sheet.equity[-1].name, "Current earnings")

    def test_no_current_earnings_row_before_any_income(self):
        sheet = balance_sheet(d("2024-01-12"))
        self.assertEqual([row.code for row in sheet.equity], ["3000"])


class CashFlowTests(ReportFixture):

    def test_january_categories(self):
        report = cash_flow(d("2024-01-01"), d("2024-01-31"))
        self.assertEqual(report.operating, Decimal("300.00"))
        self.assertEqual(report.investing, Decimal("-400.00"))
        self.assertEqual(report.financing, Decimal("1500.00"))  # capital + loan
        self.assertEqual(report.net_change, Decimal("1400.00"))
        self.assertEqual(report.opening_cash, Decimal("0.00"))
        self.assertEqual(report.closing_cash, Decimal("1400.00"))

    def test_net_change_reconciles_opening_to_closing(self):
        for start, end in (("2024-01-01", "2024-01-31"), ("2024-02-01", "2024-02-29"),
                           ("2024-01-11", "2024-02-15")):
            report = cash_flow(d(start), d(end))
            self.assertEqual(report.net_change, report.closing_cash - report.opening_cash)

    def test_february_rent_is_operating(self):
        report = cash_flow(d("2024-02-01"), d("2024-02-29"))
        self.assertEqual(report.operating, Decimal("-100.00"))
        self.assertEqual(report.opening_cash, Decimal("1400.00"))
        self.assertEqual(report.closing_cash, Decimal("1300.00"))

    def test_no_cash_accounts_means_no_flow(self):
        BankAccount.objects.all().delete()
        report = cash_flow(d("2024-01-01"), d("2024-01-31"))
        self.assertEqual(report.net_change, Decimal("0.00"))


class TrialBalanceTests(ReportFixture):

    def test_columns_agree(self):
        report = trial_balance(d("2024-02-29"))
        self.assertEqual(report.total_debit, Decimal("1800.00"))
        self.assertEqual(report.total_credit, Decimal("1800.00"))
        rows = {row.code: (row.debit, row.credit) for row in report.rows}
        self.assertEqual(rows["1000"], (Decimal("1300.00"), Decimal("0.00")))
        self.assertEqual(rows["3000"], (Decimal("0.00"), Decimal("1000.00")))
        self.assertNotIn("1200", rows)  # untouched accounts are omitted
