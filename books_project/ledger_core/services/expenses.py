import logging
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from ..exceptions import InvalidStateError
from ..models import Account, ExpenseClaim, User
from ..models.expense import CLAIM_TRANSITIONS
from ..models.journal import to_pk
from .audit_helper import log_action
from .posting import post_entry

logger = logging.getLogger(__name__)


def _check_transition(claim, new_status):
    # checked before touching the instance so a refused call mutates nothing
    if new_status not in CLAIM_TRANSITIONS.get(claim.status, []):
        raise InvalidStateError(
            f"Expense claim {claim.claim_number} is {claim.status}; cannot move to {new_status}."
        )


# ----------------------------
# Expense claim workflows
# ----------------------------
def approve_expense_claim(claim_id, approver_id) -> ExpenseClaim:
    """submitted → approved, stamping approver and time."""
    with transaction.atomic():
        # Lock the row so two approvers cannot both win
        claim = ExpenseClaim.objects.select_for_update().get(pk=claim_id)
        _check_transition(claim, "approved")
        try:
            approver = User.objects.get(pk=to_pk(approver_id, "Approver"))
        except User.DoesNotExist:
            raise ValidationError(f"Approver {approver_id} does not exist.")

        claim.approved_by = approver
        claim.approved_at = timezone.now()
        claim.transition_to("approved")

        log_action(
            action="approve",
            instance=claim,
            user=approver,
            changes={"status": "approved", "amount": str(claim.amount)},
        )
    logger.info("Expense claim %s approved by %s", claim.claim_number, approver)
    return claim


def reject_expense_claim(claim_id, reason=None, user=None) -> ExpenseClaim:
    """submitted → rejected. The reason is appended to the claim notes."""
    with transaction.atomic():
        claim = ExpenseClaim.objects.select_for_update().get(pk=claim_id)
        _check_transition(claim, "rejected")
        if reason:
            claim.notes = f"{claim.notes}\n{reason}" if claim.notes else reason
        claim.transition_to("rejected")

        log_action(
            action="reject",
            instance=claim,
            user=user,
            changes={"status": "rejected", "reason": reason},
        )
    logger.info("Expense claim %s rejected", claim.claim_number)
    return claim


def pay_expense_claim(claim_id, payment_account_id=None, payment_date=None, user=None) -> ExpenseClaim:
    """
    approved → paid.
    With a payment account and an expense account on the claim, the
    reimbursement is posted (debit expense, credit payment account) in the
    same transaction as the status change.
    """
    with transaction.atomic():
        claim = ExpenseClaim.objects.select_for_update().get(pk=claim_id)
        _check_transition(claim, "paid")

        if payment_account_id is not None:
            if not claim.account_id:
                raise ValidationError(
                    "Claim has no expense account; cannot book the reimbursement."
                )
            payment_account_id = to_pk(payment_account_id, "Payment account")
            if not Account.objects.filter(pk=payment_account_id).exists():
                raise ValidationError(f"Payment account {payment_account_id} does not exist.")
            entry = post_entry(
                {
                    "entry_date": payment_date or timezone.localdate(),
                    "description": f"Reimbursement of expense claim {claim.claim_number}",
                    "reference": claim.claim_number,
                },
                [
                    {"account_id": claim.account_id, "debit_amount": claim.amount,
                     "description": claim.description},
                    {"account_id": payment_account_id, "credit_amount": claim.amount},
                ],
                user=user,
            )
            claim.payment_entry = entry

        claim.transition_to("paid")
        log_action(
            action="pay",
            instance=claim,
            user=user,
            changes={
                "status": "paid",
                "payment_entry": claim.payment_entry.entry_number if claim.payment_entry_id else None,
            },
        )
    logger.info("Expense claim %s paid", claim.claim_number)
    return claim
