from decimal import Decimal
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from ..exceptions import InvalidStateError
from .account import Account
from .journal import JournalEntry

CLAIM_STATUS_CHOICES = [
    ("submitted", "Submitted"),
    ("approved", "Approved"),
    ("rejected", "Rejected"),
    ("paid", "Paid"),
]

# Current state vs. allowed next states
CLAIM_TRANSITIONS = {
    "submitted": ["approved", "rejected"],
    "approved": ["paid"],
    "rejected": [],  # terminal
    "paid": [],  # terminal
}


# ---------- Expense claims ----------
class ExpenseClaim(models.Model):
    """
    Employee out-of-pocket expense waiting for reimbursement.
    Always created as `submitted`; status moves only through transition_to().
    """

    claim_number = models.CharField(max_length=64, unique=True)
    # Who spent the money
    claimant = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="expense_claims",
    )
    description = models.TextField()
    amount = models.DecimalField(max_digits=18, decimal_places=2)
    expense_date = models.DateField()
    status = models.CharField(
        max_length=20, choices=CLAIM_STATUS_CHOICES, default="submitted"
    )
    # e.g. "travel", "meals", "office"
    category = models.CharField(max_length=100, null=True, blank=True)
    # Expense account debited when the claim is paid
    account = models.ForeignKey(
        Account,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="expense_claims",
    )
    notes = models.TextField(null=True, blank=True)

    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="approved_claims",
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    # Reimbursement entry, when the payment was booked through the ledger
    payment_entry = models.ForeignKey(
        JournalEntry,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-expense_date", "-id")
        indexes = [
            models.Index(fields=["status"]),
            models.Index(fields=["expense_date"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name="claim_positive_amount",
            ),
        ]

    def __str__(self):
        return f"{self.claim_number} {self.amount} [{self.status}]"

    def clean(self):
        if self.amount is not None and self.amount <= Decimal("0"):
            raise ValidationError({"amount": "Claim amount must be > 0"})
        if self.account_id and self.account.ac_type != "expense":
            raise ValidationError({"account": "Claims must be booked to an expense account."})
        # approval stamps travel together
        if self.status in ("approved", "paid") and not (self.approved_by_id and self.approved_at):
            raise ValidationError("Approved claims need an approver and approval time.")

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)

    def transition_to(self, new_status):
        # Look up what states are allowed from current self.status
        if new_status not in CLAIM_TRANSITIONS.get(self.status, []):
            raise InvalidStateError(
                f"Cannot go from {self.status} to {new_status}")
        self.status = new_status
        self.save()
        return self
