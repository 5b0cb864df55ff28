from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from ledger_core.exceptions import AlreadyReconciled
from ledger_core.models import AuditLog, BankAccount, BankTransaction
from ledger_core.services import (reconcile_transaction,
                                  record_bank_transaction)

from .helpers import d, make_chart


class BankTransactionTests(TestCase):

    def setUp(self):
        self.accounts = make_chart()
        self.bank = self.accounts["bank"]

    def _record(self, amount, tx_type, day="2024-05-01", bank=None):
        return record_bank_transaction({
            "bank_account_id": (bank or self.bank).pk,
            "transaction_date": d(day),
            "description": f"{tx_type} {amount}",
            "amount": amount,
            "tx_type": tx_type,
        })

    def test_credits_add_and_debits_subtract(self):
        first = self._record("250.00", "credit")
        second = self._record("75.25", "debit", day="2024-05-02")
        self.assertEqual(first.running_balance, Decimal("250.00"))
        self.assertEqual(second.running_balance, Decimal("174.75"))
        self.bank.refresh_from_db()
        self.assertEqual(self.bank.balance, Decimal("174.75"))

    def test_amount_must_be_positive(self):
        with self.assertRaises(ValidationError):
            self._record("0", "credit")
        self.bank.refresh_from_db()
        self.assertEqual(self.bank.balance, Decimal("0.00"))
        self.assertFalse(BankTransaction.objects.exists())

    """ Renaming a bank account loaded earlier keeps the recorded balance """
    def test_stale_bank_account_edit_keeps_balance(self):
        stale = BankAccount.objects.get(pk=self.bank.pk)
        self._record("40.00", "credit")

        stale.bank_name = "Renamed Bank"
        stale.save()

        self.bank.refresh_from_db()
        self.assertEqual(self.bank.bank_name, "Renamed Bank")
        self.assertEqual(self.bank.balance, Decimal("40.00"))
        self.assertEqual(stale.balance, Decimal("40.00"))

    def test_unknown_bank_account(self):
        with self.assertRaises(ValidationError):
            record_bank_transaction({"bank_account_id": 987654, "amount": "1", "tx_type": "credit"})


class ReconciliationTests(TestCase):

    def setUp(self):
        self.accounts = make_chart()
        self.tx = record_bank_transaction({
            "bank_account_id": self.accounts["bank"].pk,
            "transaction_date": d("2024-05-01"),
            "description": "Client deposit",
            "amount": "100.00",
            "tx_type": "credit",
        })

    """ A transaction reconciles exactly once """
    def test_second_reconcile_is_a_conflict(self):
        first = reconcile_transaction(self.tx.pk)
        self.assertTrue(first.is_reconciled)
        stamp = first.reconciled_at

        with self.assertRaises(AlreadyReconciled):
            reconcile_transaction(self.tx.pk)

        self.tx.refresh_from_db()
        self.assertEqual(self.tx.reconciled_at, stamp)
        self.assertEqual(AuditLog.objects.filter(action="reconcile").count(), 1)

    def test_match_to_transfer_leg(self):
        savings = BankAccount.objects.create(name="Savings", account_type="savings")
        other = record_bank_transaction({
            "bank_account_id": savings.pk,
            "transaction_date": d("2024-05-01"),
            "description": "Transfer in",
            "amount": "100.00",
            "tx_type": "debit",
        })
        tx = reconcile_transaction(self.tx.pk, matched_transaction_id=other.pk)
        self.assertEqual(tx.matched_transaction, other)

    def test_cannot_match_itself(self):
        with self.assertRaises(ValidationError):
            reconcile_transaction(self.tx.pk, matched_transaction_id=self.tx.pk)
        self.tx.refresh_from_db()
        self.assertFalse(self.tx.is_reconciled)

    def test_match_id_must_be_numeric(self):
        with self.assertRaises(ValidationError):
            reconcile_transaction(self.tx.pk, matched_transaction_id="abc")
        self.tx.refresh_from_db()
        self.assertFalse(self.tx.is_reconciled)

    def test_reconciled_flag_cannot_be_cleared(self):
        tx = reconcile_transaction(self.tx.pk)
        tx.is_reconciled = False
        with self.assertRaises(ValidationError):
            tx.save()
