from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase
from django.urls import reverse

from books_project.celery import celery_app
from ledger_core.models import (Account, BankTransaction, Client, ExpenseClaim,
                                Invoice, JournalEntry, User)
from ledger_core.services import (create_draft_entry, create_invoice,
                                  record_bank_transaction, send_invoice)
from ledger_core.tasks import flag_overdue_invoices, recompute_account_balances

from .helpers import balance_of, cr, d, dr, make_chart, post


class TaskTests(TestCase):

    def setUp(self):
        self.accounts = make_chart()

    def test_recompute_task_repairs_drift(self):
        cash = self.accounts["cash"]
        post(d("2024-01-02"), dr(cash, "80"), cr(self.accounts["revenue"], "80"))
        Account.objects.filter(pk=cash.pk).update(balance=Decimal("1.00"))

        with self.assertLogs("ledger_core.services.balances", level="WARNING"):
            corrected = recompute_account_balances.delay().get()

        self.assertEqual(corrected, 1)
        self.assertEqual(balance_of(cash), Decimal("80.00"))

    def test_tests_use_the_in_memory_broker(self):
        # eager tasks still open a producer on the configured broker
        self.assertEqual(celery_app.conf.broker_url, "memory://")
        self.assertTrue(celery_app.conf.task_always_eager)

    def test_recompute_task_with_clean_books(self):
        post(d("2024-01-02"), dr(self.accounts["cash"], "80"), cr(self.accounts["revenue"], "80"))
        self.assertEqual(recompute_account_balances(), 0)

    def test_flag_overdue_invoices_task(self):
        acme = Client.objects.create(name="Acme")
        invoice = create_invoice(
            {"invoice_number": "INV-9", "client": acme,
             "issue_date": d("2020-01-01"), "due_date": d("2020-01-31")},
            [{"description": "Work", "quantity": 1, "rate": "10"}],
        )
        send_invoice(invoice.pk)

        self.assertEqual(flag_overdue_invoices.delay().get(), 1)
        invoice.refresh_from_db()
        self.assertEqual(invoice.status, "overdue")
        # nothing left to flag
        self.assertEqual(flag_overdue_invoices(), 0)


class CommandTests(TestCase):

    def test_seed_demo_is_repeatable(self):
        out = StringIO()
        call_command("seed_demo", stdout=out)
        call_command("seed_demo", stdout=out)

        self.assertEqual(JournalEntry.objects.filter(reference="demo-seed").count(), 5)
        self.assertEqual(Invoice.objects.count(), 1)
        self.assertEqual(Invoice.objects.get().status, "sent")
        cash = Account.objects.get(code="1000")
        self.assertEqual(cash.balance, Decimal("14500.00"))
        self.assertIn("already present", out.getvalue())
        self.assertTrue(User.objects.get(username="demo").check_password("demo123"))

    def test_rebuild_balances_command(self):
        call_command("seed_demo", stdout=StringIO())
        Account.objects.filter(code="4000").update(balance=Decimal("0.00"))

        out = StringIO()
        with self.assertLogs("ledger_core.services.balances", level="WARNING"):
            call_command("rebuild_balances", stdout=out)

        self.assertIn("1 account(s) corrected", out.getvalue())
        self.assertEqual(Account.objects.get(code="4000").balance, Decimal("2625.00"))


class AdminActionTests(TestCase):

    def setUp(self):
        self.accounts = make_chart()
        self.admin = User.objects.create_superuser("root", "root@example.com", "pw-12345678")
        self.client.force_login(self.admin)

    def run_action(self, model_name, action, *pks):
        url = reverse(f"admin:ledger_core_{model_name}_changelist")
        return self.client.post(
            url, {"action": action, "_selected_action": [str(pk) for pk in pks]}, follow=True
        )

    def test_post_journal_entries_action(self):
        draft = create_draft_entry(
            {"entry_date": d("2024-02-01"), "description": "Rent"},
            [dr(self.accounts["rent"], "50"), cr(self.accounts["cash"], "50")],
        )
        self.run_action("journalentry", "post_journal_entries", draft.pk)

        draft.refresh_from_db()
        self.assertEqual(draft.status, "posted")
        self.assertEqual(draft.created_by, self.admin)
        self.assertEqual(balance_of(self.accounts["cash"]), Decimal("-50.00"))

    def test_approve_expense_claims_action(self):
        claimant = User.objects.create_user("sam", password="pw-12345678")
        claim = ExpenseClaim.objects.create(
            claim_number="EXP-1", claimant=claimant, description="Taxi",
            amount=Decimal("12.00"), expense_date=d("2024-02-02"),
        )
        self.run_action("expenseclaim", "approve_expense_claims", claim.pk)

        claim.refresh_from_db()
        self.assertEqual(claim.status, "approved")
        self.assertEqual(claim.approved_by, self.admin)

    def test_reconcile_action_reports_failures(self):
        tx = record_bank_transaction({
            "bank_account_id": self.accounts["bank"].pk,
            "transaction_date": d("2024-02-03"),
            "description": "Deposit",
            "amount": "20.00",
            "tx_type": "credit",
        })
        self.run_action("banktransaction", "reconcile_bank_transactions", tx.pk)
        resp = self.run_action("banktransaction", "reconcile_bank_transactions", tx.pk)

        self.assertTrue(BankTransaction.objects.get(pk=tx.pk).is_reconciled)
        texts = [str(m) for m in resp.context["messages"]]
        self.assertTrue(any("0 done, 1 failed" in t for t in texts))

    def test_send_invoices_action(self):
        invoice = create_invoice(
            {"invoice_number": "INV-1", "client": Client.objects.create(name="Acme"),
             "issue_date": d("2024-02-01"), "due_date": d("2024-02-28")},
            [{"description": "Work", "quantity": 1, "rate": "100"}],
        )
        self.run_action("invoice", "send_invoices", invoice.pk)
        invoice.refresh_from_db()
        self.assertEqual(invoice.status, "sent")
        self.assertIsNotNone(invoice.ledger_entry_id)
