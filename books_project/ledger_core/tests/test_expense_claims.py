from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from ledger_core.exceptions import InvalidStateError
from ledger_core.models import AuditLog, ExpenseClaim, User
from ledger_core.services import (approve_expense_claim, pay_expense_claim,
                                  reject_expense_claim)

from .helpers import balance_of, d, make_chart


class ExpenseClaimWorkflowTests(TestCase):

    def setUp(self):
        self.accounts = make_chart()
        self.employee = User.objects.create_user("sam", password="pw-12345678")
        self.manager = User.objects.create_user("kim", password="pw-12345678", role="approver")
        self.claim = ExpenseClaim.objects.create(
            claim_number="EXP-001",
            claimant=self.employee,
            description="Train to client site",
            amount=Decimal("45.50"),
            expense_date=d("2024-04-02"),
            category="travel",
            account=self.accounts["travel"],
        )

    def test_new_claims_start_submitted(self):
        self.assertEqual(self.claim.status, "submitted")

    """ submitted → approved → paid """
    def test_happy_path_books_the_reimbursement(self):
        approved = approve_expense_claim(self.claim.pk, self.manager.pk)
        self.assertEqual(approved.status, "approved")
        self.assertEqual(approved.approved_by, self.manager)
        self.assertIsNotNone(approved.approved_at)

        paid = pay_expense_claim(
            self.claim.pk, payment_account_id=self.accounts["cash"].pk,
            payment_date=d("2024-04-05"),
        )
        self.assertEqual(paid.status, "paid")
        self.assertEqual(paid.payment_entry.entry_date, d("2024-04-05"))
        self.assertEqual(balance_of(self.accounts["travel"]), Decimal("45.50"))
        self.assertEqual(balance_of(self.accounts["cash"]), Decimal("-45.50"))
        actions = set(AuditLog.objects.for_object(self.claim).values_list("action", flat=True))
        self.assertEqual(actions, {"approve", "pay"})

    def test_pay_without_ledger_account_only_moves_status(self):
        approve_expense_claim(self.claim.pk, self.manager.pk)
        paid = pay_expense_claim(self.claim.pk)
        self.assertEqual(paid.status, "paid")
        self.assertIsNone(paid.payment_entry)

    def test_reject_keeps_reason(self):
        rejected = reject_expense_claim(self.claim.pk, reason="No receipt")
        self.assertEqual(rejected.status, "rejected")
        self.assertIn("No receipt", rejected.notes)

    """ Refused transitions leave the claim untouched """
    def test_cannot_pay_before_approval(self):
        with self.assertRaises(InvalidStateError):
            pay_expense_claim(self.claim.pk, payment_account_id=self.accounts["cash"].pk)
        self.claim.refresh_from_db()
        self.assertEqual(self.claim.status, "submitted")
        self.assertIsNone(self.claim.payment_entry_id)
        self.assertEqual(balance_of(self.accounts["cash"]), Decimal("0.00"))

    def test_cannot_approve_twice(self):
        approve_expense_claim(self.claim.pk, self.manager.pk)
        first = ExpenseClaim.objects.get(pk=self.claim.pk).approved_at
        with self.assertRaises(InvalidStateError):
            approve_expense_claim(self.claim.pk, self.employee.pk)
        self.claim.refresh_from_db()
        self.assertEqual(self.claim.approved_by, self.manager)
        self.assertEqual(self.claim.approved_at, first)

    def test_rejected_is_terminal(self):
        reject_expense_claim(self.claim.pk)
        for move in (lambda: approve_expense_claim(self.claim.pk, self.manager.pk),
                     lambda: pay_expense_claim(self.claim.pk),
                     lambda: reject_expense_claim(self.claim.pk)):
            with self.assertRaises(InvalidStateError):
                move()
        self.claim.refresh_from_db()
        self.assertEqual(self.claim.status, "rejected")

    def test_paid_claim_cannot_be_approved_again(self):
        approve_expense_claim(self.claim.pk, self.manager.pk)
        pay_expense_claim(self.claim.pk)
        before = ExpenseClaim.objects.get(pk=self.claim.pk)

        with self.assertRaises(InvalidStateError):
            approve_expense_claim(self.claim.pk, self.employee.pk)

        self.claim.refresh_from_db()
        self.assertEqual(self.claim.status, "paid")
        self.assertEqual(self.claim.approved_by, self.manager)
        self.assertEqual(self.claim.approved_at, before.approved_at)

    def test_approver_id_must_be_numeric(self):
        with self.assertRaises(ValidationError):
            approve_expense_claim(self.claim.pk, "kim")
        self.claim.refresh_from_db()
        self.assertEqual(self.claim.status, "submitted")

    def test_unknown_approver_is_rejected(self):
        with self.assertRaises(ValidationError):
            approve_expense_claim(self.claim.pk, 987654)
        self.claim.refresh_from_db()
        self.assertEqual(self.claim.status, "submitted")

    def test_unknown_claim_raises_does_not_exist(self):
        with self.assertRaises(ExpenseClaim.DoesNotExist):
            approve_expense_claim(987654, self.manager.pk)

    def test_failed_payment_posting_rolls_back_status(self):
        approve_expense_claim(self.claim.pk, self.manager.pk)
        with self.assertRaises(ValidationError):
            pay_expense_claim(self.claim.pk, payment_account_id=987654)
        self.claim.refresh_from_db()
        self.assertEqual(self.claim.status, "approved")


class ExpenseClaimValidationTests(TestCase):

    def setUp(self):
        self.accounts = make_chart()
        self.employee = User.objects.create_user("sam", password="pw-12345678")

    def _claim(self, **overrides):
        fields = dict(
            claim_number="EXP-100", claimant=self.employee, description="Lunch",
            amount=Decimal("12.00"), expense_date=d("2024-04-02"),
        )
        fields.update(overrides)
        return ExpenseClaim.objects.create(**fields)

    def test_amount_must_be_positive(self):
        with self.assertRaises(ValidationError):
            self._claim(amount=Decimal("0.00"))

    def test_account_must_be_an_expense_account(self):
        with self.assertRaises(ValidationError):
            self._claim(account=self.accounts["revenue"])

    def test_approved_status_needs_approval_stamps(self):
        with self.assertRaises(ValidationError):
            self._claim(status="approved")
