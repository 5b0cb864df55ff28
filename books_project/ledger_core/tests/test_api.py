import json
from decimal import Decimal
from unittest.mock import patch

from django.db import OperationalError
from django.test import TestCase

from ledger_core.models import (Client, ExpenseClaim, Invoice, JournalEntry,
                                JournalLine, User)

from .helpers import balance_of, cr, d, dr, make_chart, post


class ApiTestCase(TestCase):

    def setUp(self):
        self.accounts = make_chart()

    def get(self, url, **params):
        return self.client.get(url, params)

    def send(self, method, url, body=None):
        return getattr(self.client, method)(
            url, data=json.dumps(body or {}), content_type="application/json"
        )


class JournalEntryApiTests(ApiTestCase):

    def _body(self, debit="100.00", credit="100.00", **extra):
        body = {
            "entryDate": "2024-03-01",
            "description": "Cash sale",
            "lines": [
                {"accountId": self.accounts["cash"].pk, "debitAmount": debit},
                {"accountId": self.accounts["revenue"].pk, "creditAmount": credit},
            ],
        }
        body.update(extra)
        return body

    def test_post_entry_returns_camel_case_money_strings(self):
        resp = self.send("post", "/api/journal-entries", self._body())
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["status"], "posted")
        self.assertEqual(data["totalAmount"], "100.00")
        self.assertEqual(data["entryDate"], "2024-03-01")
        self.assertEqual(data["lines"][0]["debitAmount"], "100.00")
        self.assertNotIn("postingFingerprint", data)
        self.assertEqual(balance_of(self.accounts["cash"]), Decimal("100.00"))

    def test_unbalanced_entry_is_400_with_kind(self):
        resp = self.send("post", "/api/journal-entries", self._body(credit="99.99"))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["kind"], "unbalanced_entry")
        self.assertFalse(JournalEntry.objects.exists())

    def test_duplicate_entry_number_kind(self):
        self.send("post", "/api/journal-entries", self._body(entryNumber="JE-7"))
        resp = self.send("post", "/api/journal-entries", self._body(entryNumber="JE-7"))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["kind"], "duplicate_entry_number")

    def test_draft_then_post(self):
        resp = self.send("post", "/api/journal-entries", self._body(status="draft"))
        entry_id = resp.json()["id"]
        self.assertEqual(resp.json()["status"], "draft")

        resp = self.send("put", f"/api/journal-entries/{entry_id}/post")
        self.assertEqual(resp.json()["status"], "posted")

        drafts = self.get("/api/journal-entries", status="draft").json()
        self.assertEqual(drafts, [])

    def test_boolean_account_id_is_400(self):
        body = self._body()
        body["lines"][0]["accountId"] = True
        resp = self.send("post", "/api/journal-entries", body)
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(JournalEntry.objects.exists())

    def test_storage_failure_is_500_persistence_error(self):
        with patch.object(JournalLine.objects, "create", side_effect=OperationalError("disk I/O error")), \
                self.assertLogs("ledger_core", level="ERROR"):
            resp = self.send("post", "/api/journal-entries", self._body())

        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json()["kind"], "persistence_error")
        self.assertFalse(JournalEntry.objects.exists())
        self.assertEqual(balance_of(self.accounts["cash"]), Decimal("0.00"))

    def test_missing_entry_is_404(self):
        resp = self.get("/api/journal-entries/987654")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["kind"], "not_found")

    def test_malformed_json_is_400(self):
        resp = self.client.post("/api/journal-entries", data="{oops", content_type="application/json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["kind"], "validation")

    def test_wrong_method_is_405(self):
        resp = self.client.delete("/api/journal-entries")
        self.assertEqual(resp.status_code, 405)


class AccountApiTests(ApiTestCase):

    def test_create_uses_type_on_the_wire(self):
        resp = self.send("post", "/api/accounts", {
            "code": "1010", "name": "Petty Cash", "type": "asset", "subType": "current_asset",
        })
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["type"], "asset")
        self.assertEqual(data["normalBalance"], "debit")
        self.assertEqual(data["balance"], "0.00")

    def test_invalid_account_reports_field_errors(self):
        resp = self.send("post", "/api/accounts", {"code": "1000", "name": "Dup", "type": "asset"})
        self.assertEqual(resp.status_code, 400)
        body = resp.json()
        self.assertEqual(body["kind"], "validation")
        self.assertIn("code", body["errors"])

    def test_delete_deactivates(self):
        travel = self.accounts["travel"]
        resp = self.send("delete", f"/api/accounts/{travel.pk}")
        self.assertEqual(resp.status_code, 200)
        travel.refresh_from_db()
        self.assertFalse(travel.is_active)
        codes = [a["code"] for a in self.get("/api/accounts").json()]
        self.assertNotIn("5100", codes)

    def test_balance_endpoint(self):
        post(d("2024-01-05"), dr(self.accounts["cash"], "70"), cr(self.accounts["revenue"], "70"))
        url = f"/api/accounts/{self.accounts['cash'].pk}/balance"
        self.assertEqual(self.get(url).json()["balance"], "70.00")
        self.assertEqual(self.get(url, asOf="2024-01-04").json()["balance"], "0.00")

    def test_balance_of_unknown_account(self):
        resp = self.get("/api/accounts/987654/balance")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["kind"], "account_not_found")

    def test_bad_as_of_date(self):
        resp = self.get(f"/api/accounts/{self.accounts['cash'].pk}/balance", asOf="yesterday")
        self.assertEqual(resp.status_code, 400)


class InvoiceApiTests(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.acme = Client.objects.create(name="Acme")

    def _create(self):
        return self.send("post", "/api/invoices", {
            "invoiceNumber": "INV-1",
            "clientId": self.acme.pk,
            "issueDate": "2024-06-01",
            "dueDate": "2024-06-30",
            "taxRate": "0.10",
            "lineItems": [
                {"description": "Consulting", "quantity": 2, "rate": "50"},
                {"description": "Support", "quantity": 1, "rate": "25"},
            ],
        })

    def test_create_derives_totals(self):
        resp = self._create()
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["subtotal"], "125.00")
        self.assertEqual(data["taxAmount"], "12.50")
        self.assertEqual(data["totalAmount"], "137.50")
        self.assertEqual(data["status"], "draft")
        self.assertEqual(data["client"]["name"], "Acme")
        self.assertEqual(len(data["lineItems"]), 2)

    def test_bad_tax_rate_is_400(self):
        for rate in ("abc", "-0.10"):
            resp = self.send("post", "/api/invoices", {
                "invoiceNumber": f"INV-{rate}", "clientId": self.acme.pk,
                "issueDate": "2024-06-01", "dueDate": "2024-06-30", "taxRate": rate,
                "lineItems": [{"description": "Consulting", "quantity": 1, "rate": "50"}],
            })
            self.assertEqual(resp.status_code, 400)
            self.assertEqual(resp.json()["kind"], "validation")
        self.assertFalse(Invoice.objects.exists())

    def test_send_pay_flow(self):
        invoice_id = self._create().json()["id"]
        self.assertEqual(self.send("put", f"/api/invoices/{invoice_id}/send").json()["status"], "sent")

        resp = self.send("put", f"/api/invoices/{invoice_id}/payments", {
            "amount": "137.50", "depositAccountId": self.accounts["cash"].pk,
            "paymentDate": "2024-06-20",
        })
        self.assertEqual(resp.json()["status"], "paid")
        self.assertEqual(resp.json()["outstandingAmount"], "0.00")

    def test_payment_on_draft_is_invalid_state(self):
        invoice_id = self._create().json()["id"]
        resp = self.send("put", f"/api/invoices/{invoice_id}/payments", {
            "amount": "10", "depositAccountId": self.accounts["cash"].pk,
        })
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["kind"], "invalid_state")

    def test_issued_invoice_only_updates_paperwork(self):
        invoice_id = self._create().json()["id"]
        self.send("put", f"/api/invoices/{invoice_id}/send")
        resp = self.send("put", f"/api/invoices/{invoice_id}", {
            "notes": "Thanks!", "totalAmount": "1.00",
        })
        self.assertEqual(resp.status_code, 200)
        invoice = Invoice.objects.get(pk=invoice_id)
        self.assertEqual(invoice.notes, "Thanks!")
        self.assertEqual(invoice.total_amount, Decimal("137.50"))

    def test_cancel_endpoint(self):
        invoice_id = self._create().json()["id"]
        self.assertEqual(self.send("put", f"/api/invoices/{invoice_id}/cancel").json()["status"], "cancelled")


class ExpenseClaimApiTests(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.employee = User.objects.create_user("sam", password="pw-12345678")
        self.manager = User.objects.create_user("kim", password="pw-12345678")

    def test_submit_approve_pay(self):
        resp = self.send("post", "/api/expense-claims", {
            "claimNumber": "EXP-1", "userId": self.employee.pk, "description": "Taxi",
            "amount": "30.00", "expenseDate": "2024-04-02",
            "accountId": self.accounts["travel"].pk,
        })
        self.assertEqual(resp.status_code, 200)
        claim = resp.json()
        self.assertEqual(claim["status"], "submitted")
        self.assertEqual(claim["userId"], self.employee.pk)
        self.assertEqual(claim["user"]["username"], "sam")
        self.assertNotIn("password", claim["user"])

        resp = self.send("put", f"/api/expense-claims/{claim['id']}/approve",
                         {"approverId": self.manager.pk})
        self.assertEqual(resp.json()["status"], "approved")
        self.assertEqual(resp.json()["approvedById"], self.manager.pk)

        resp = self.send("put", f"/api/expense-claims/{claim['id']}/pay",
                         {"paymentAccountId": self.accounts["cash"].pk})
        self.assertEqual(resp.json()["status"], "paid")

    def test_approve_requires_approver(self):
        claim = ExpenseClaim.objects.create(
            claim_number="EXP-2", claimant=self.employee, description="Taxi",
            amount=Decimal("30.00"), expense_date=d("2024-04-02"),
        )
        resp = self.send("put", f"/api/expense-claims/{claim.pk}/approve", {})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Approver ID is required")

    def test_pay_before_approve_is_invalid_state(self):
        claim = ExpenseClaim.objects.create(
            claim_number="EXP-3", claimant=self.employee, description="Taxi",
            amount=Decimal("30.00"), expense_date=d("2024-04-02"),
        )
        resp = self.send("put", f"/api/expense-claims/{claim.pk}/pay", {})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["kind"], "invalid_state")

    def test_unknown_claim_is_404(self):
        resp = self.send("put", "/api/expense-claims/987654/reject", {})
        self.assertEqual(resp.status_code, 404)


class BankingApiTests(ApiTestCase):

    def test_record_and_reconcile_once(self):
        resp = self.send("post", "/api/bank-transactions", {
            "bankAccountId": self.accounts["bank"].pk, "transactionDate": "2024-05-01",
            "description": "Deposit", "amount": "60.00", "type": "credit",
        })
        self.assertEqual(resp.status_code, 200)
        tx = resp.json()
        self.assertEqual(tx["type"], "credit")
        self.assertEqual(tx["balance"], "60.00")

        url = f"/api/bank-transactions/{tx['id']}/reconcile"
        self.assertTrue(self.send("put", url).json()["isReconciled"])
        resp = self.send("put", url)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["kind"], "already_reconciled")

    def test_list_filtered_by_bank_account(self):
        self.send("post", "/api/bank-transactions", {
            "bankAccountId": self.accounts["bank"].pk, "transactionDate": "2024-05-01",
            "description": "Deposit", "amount": "60.00", "type": "credit",
        })
        rows = self.get("/api/bank-transactions", bankAccountId=self.accounts["bank"].pk).json()
        self.assertEqual(len(rows), 1)
        self.assertEqual(self.get("/api/bank-transactions", bankAccountId=987654).json(), [])

    def test_non_numeric_bank_account_filter_is_400(self):
        resp = self.get("/api/bank-transactions", bankAccountId="abc")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["kind"], "validation")


class ReportApiTests(ApiTestCase):

    def setUp(self):
        super().setUp()
        a = self.accounts
        post(d("2024-01-01"), dr(a["cash"], "1000"), cr(a["capital"], "1000"))
        post(d("2024-01-20"), dr(a["cash"], "300"), cr(a["revenue"], "300"))

    def test_profit_loss(self):
        data = self.get("/api/reports/profit-loss", startDate="2024-01-01", endDate="2024-01-31").json()
        self.assertEqual(data["revenueTotal"], "300.00")
        self.assertEqual(data["netIncome"], "300.00")
        self.assertEqual(data["byAccount"][0]["code"], "4000")

    def test_balance_sheet(self):
        data = self.get("/api/reports/balance-sheet", date="2024-01-31").json()
        self.assertEqual(data["totalAssets"], "1300.00")
        self.assertEqual(data["totalLiabilitiesAndEquity"], "1300.00")
        self.assertTrue(data["isBalanced"])

    def test_cash_flow(self):
        data = self.get("/api/reports/cash-flow", startDate="2024-01-01", endDate="2024-01-31").json()
        self.assertEqual(data["financing"], "1000.00")
        self.assertEqual(data["operating"], "300.00")
        self.assertEqual(data["netChange"], "1300.00")

    def test_trial_balance(self):
        data = self.get("/api/reports/trial-balance", date="2024-01-31").json()
        self.assertEqual(data["totalDebit"], data["totalCredit"])

    def test_missing_dates_are_400(self):
        resp = self.get("/api/reports/profit-loss")
        self.assertEqual(resp.status_code, 400)

    def test_dashboard(self):
        data = self.get("/api/dashboard/metrics").json()
        self.assertEqual(data["bankAccountsCount"], 1)
        self.assertIn("revenueGrowth", data)


class ContactApiTests(ApiTestCase):

    def test_client_crud(self):
        created = self.send("post", "/api/clients", {"name": "Globex", "paymentTerms": 14}).json()
        self.assertEqual(created["paymentTerms"], 14)

        updated = self.send("put", f"/api/clients/{created['id']}", {"city": "Springfield"}).json()
        self.assertEqual(updated["city"], "Springfield")
        self.assertEqual(updated["name"], "Globex")

        self.send("delete", f"/api/clients/{created['id']}")
        self.assertEqual(self.get("/api/clients").json(), [])
        # still readable by id
        self.assertFalse(self.get(f"/api/clients/{created['id']}").json()["isActive"])

    def test_vendor_requires_name(self):
        resp = self.send("post", "/api/vendors", {"email": "x@example.com"})
        self.assertEqual(resp.status_code, 400)
        self.assertIn("name", resp.json()["errors"])

    def test_user_create_hides_password(self):
        resp = self.send("post", "/api/users", {"username": "lee", "password": "s3cret-pass", "fullName": "Lee"})
        self.assertEqual(resp.status_code, 200)
        self.assertNotIn("password", resp.json())
        self.assertTrue(User.objects.get(username="lee").check_password("s3cret-pass"))
