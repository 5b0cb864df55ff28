from decimal import ROUND_HALF_UP, Decimal
from django.core.exceptions import ValidationError
from django.db import models
from ..conf import default_tax_rate, money_quantum
from ..exceptions import InvalidStateError
from .account import Account
from .client import Client
from .document import PayableDocument
from .journal import JournalEntry

INV_STATUS_CHOICES = [
    ("draft", "Draft"),
    ("sent", "Sent"),
    ("paid", "Paid"),
    ("overdue", "Overdue"),
    ("cancelled", "Cancelled"),
]

# Current state vs. allowed next states
INVOICE_TRANSITIONS = {
    "draft": ["sent", "cancelled"],
    "sent": ["paid", "overdue", "cancelled"],
    "overdue": ["paid", "cancelled"],
    "paid": [],  # terminal
    "cancelled": [],  # terminal
}


def _default_tax_rate():
    return default_tax_rate()


class Invoice(PayableDocument):  # Represents a client invoice
    """ Workflow:
        draft = not yet issued, lines editable.
        sent = issued, revenue recognized in the ledger.
        overdue = sent and past due_date.
        paid = fully settled.
        cancelled = voided (revenue reversed if it had been sent). """

    # human-readable (e.g. "INV-2025-001")
    invoice_number = models.CharField(max_length=64, unique=True)
    # prevent deleting a client who has an invoice
    client = models.ForeignKey(
        Client, on_delete=models.PROTECT, related_name="invoices"
    )
    issue_date = models.DateField()
    due_date = models.DateField()

    status = models.CharField(
        max_length=10, choices=INV_STATUS_CHOICES, default="draft"
    )
    # Applied to the line subtotal when totals are derived from lines
    tax_rate = models.DecimalField(
        max_digits=6, decimal_places=4, default=_default_tax_rate
    )
    terms = models.TextField(null=True, blank=True)

    # Revenue recognition entry, set when the invoice is sent
    ledger_entry = models.ForeignKey(
        JournalEntry,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="+",
    )

    class Meta:
        ordering = ("-issue_date", "-id")
        # Optimize for fast lookups by client or status
        indexes = [
            models.Index(fields=["client"]),
            models.Index(fields=["status", "due_date"]),
        ]

    def __str__(self):
        return f"Inv {self.invoice_number}"

    """ Ensure invoice's stored totals are always
    in sync with its lines """

    def recalc_totals(self):
        # guard if no pk: there are no lines yet
        if not getattr(self, "pk", None):
            return
        lines = self.lines.all()
        subtotal = sum((line.amount for line in lines), Decimal("0.00"))
        self.subtotal = subtotal
        self.tax_amount = (subtotal * self.tax_rate).quantize(
            money_quantum(), rounding=ROUND_HALF_UP
        )
        self.total_amount = self.subtotal + self.tax_amount

    def clean(self):
        super().clean()
        if self.due_date and self.issue_date and self.due_date < self.issue_date:
            raise ValidationError({"due_date": "Due date cannot be before issue date."})

        """Make paid invoices immutable in all code paths
        (admin, API, custom services)"""
        if self.pk:
            orig = Invoice.objects.filter(pk=self.pk).first()
            if orig and orig.status == "paid":
                changed_fields = []
                for field in ["invoice_number", "total_amount", "client_id", "paid_amount"]:
                    # Check for edits
                    if getattr(orig, field) != getattr(self, field):
                        changed_fields.append(field)
                if changed_fields:
                    raise ValidationError(
                        f"Cannot modify {changed_fields} on a paid invoice."
                    )

    """ Only unissued invoices may be deleted """

    def delete(self, *args, **kwargs):
        if self.paid_amount > 0:
            raise ValidationError("Cannot delete an invoice with applied payments.")
        if self.ledger_entry_id and self.status != "cancelled":
            # Cancel it instead, which reverses the ledger entry
            raise ValidationError("Cannot delete an issued invoice; cancel it instead.")
        return super().delete(*args, **kwargs)

    def can_transition_to(self, new_status):
        return new_status in INVOICE_TRANSITIONS.get(self.status, [])

    def transition_to(self, new_status):
        # Look up what states are allowed from current self.status
        if not self.can_transition_to(new_status):
            # If requested new_status isn’t allowed → block it
            raise InvalidStateError(
                f"Cannot go from {self.status} to {new_status}")

        # If valid, update self.status and persist with .save()
        self.status = new_status
        self.save()
        return self


class InvoiceLine(models.Model):  # Each line describes a service sold on the invoice

    invoice = models.ForeignKey(
        Invoice, on_delete=models.CASCADE, related_name="lines")
    description = models.TextField()

    # Core pricing logic: quantity × rate = amount
    quantity = models.DecimalField(
        max_digits=14, decimal_places=4, default=Decimal("1")
    )
    rate = models.DecimalField(
        max_digits=18, decimal_places=4, default=Decimal("0.00")
    )
    amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )

    # Post to the correct revenue GL account
    account = models.ForeignKey(
        Account,
        null=True,
        blank=True,
        # You can’t delete an account if lines still point to it
        on_delete=models.PROTECT,
        related_name="invoice_lines",
        help_text="Sales / revenue account for this line",
    )

    class Meta:
        ordering = ("id",)
        # Ensure quantity & rate are never negative
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=0) &
                models.Q(rate__gte=0),
                name="invl_non_negative_amounts",
            ),
        ]

    def __str__(self):
        return f"Invoice: {self.invoice_id} - {self.description} - Amount: {self.amount}"

    def compute_amount(self):
        return (
            (self.quantity or Decimal("0")) * (self.rate or Decimal("0"))
        ).quantize(money_quantum(), rounding=ROUND_HALF_UP)

    """ Ensure individual line amounts are valid """

    def clean(self):
        if self.quantity is not None and self.quantity < 0:
            raise ValidationError("Quantity must be >= 0")
        if self.rate is not None and self.rate < 0:
            raise ValidationError("Rate must be >= 0")

        if self.account_id and self.account.ac_type != "revenue":
            raise ValidationError({"account": "Invoice lines must use a revenue account."})

        # Lines are frozen once the invoice has been issued
        if self.invoice_id:
            status = (
                Invoice.objects.filter(pk=self.invoice_id)
                .values_list("status", flat=True)
                .first()
            )
            if status and status != "draft":
                raise ValidationError("Invoice lines can only change while the invoice is a draft.")

    def delete(self, *args, **kwargs):
        if Invoice.objects.filter(pk=self.invoice_id).exclude(status="draft").exists():
            raise ValidationError("Invoice lines can only change while the invoice is a draft.")
        return super().delete(*args, **kwargs)

    """ Ensure no inconsistent invoice line can ever be persisted """

    def save(self, *args, **kwargs):
        # compute amount always
        self.amount = self.compute_amount()
        # Run validation, this will call clean()
        self.full_clean()
        return super().save(*args, **kwargs)
