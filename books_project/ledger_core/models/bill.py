from django.core.exceptions import ValidationError
from django.db import models
from .document import PayableDocument
from .vendor import Vendor

BILL_STATUS_CHOICES = [
    ("pending", "Pending"),
    ("paid", "Paid"),
    ("overdue", "Overdue"),
]


# ---------- Bills ----------
# Header represents vendor bill (Accounts Payable document)
class Bill(PayableDocument):
    # Vendor’s bill/invoice number (e.g. "INV-4567"), not unique across vendors
    bill_number = models.CharField(max_length=64, null=True, blank=True)
    vendor = models.ForeignKey(
        Vendor,
        # prevent deleting a vendor who has a bill
        on_delete=models.PROTECT,
        related_name="bills",
    )
    issue_date = models.DateField()  # bill date
    # when payment is expected
    due_date = models.DateField()

    status = models.CharField(
        max_length=20, choices=BILL_STATUS_CHOICES, default="pending"
    )

    class Meta:
        ordering = ("-issue_date", "-id")
        # Optimize queries for “all bills for this vendor.”
        indexes = [
            models.Index(fields=["vendor"]),
            models.Index(fields=["status", "due_date"]),
        ]

    def __str__(self):
        # If no bill number, fall back to database ID
        return f"Bill: {self.bill_number or self.pk}"

    def clean(self):
        super().clean()
        if self.due_date and self.issue_date and self.due_date < self.issue_date:
            raise ValidationError({"due_date": "Due date cannot be before issue date."})
        if self.status == "paid" and self.paid_amount != self.total_amount:
            raise ValidationError({"status": "A paid bill must be fully settled."})
