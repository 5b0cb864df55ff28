from django.core.exceptions import ValidationError
from django.db import models
from ..exceptions import InvalidStateError
from .document import Document
from .vendor import Vendor

PO_STATUS_CHOICES = [
    ("pending", "Pending"),
    ("received", "Received"),
    ("cancelled", "Cancelled"),
]

PO_TRANSITIONS = {
    "pending": ["received", "cancelled"],
    "received": [],
    "cancelled": [],
}


class PurchaseOrder(Document):
    """Order placed with a vendor. Carries no payment; the bill does."""

    po_number = models.CharField(max_length=64, unique=True)
    vendor = models.ForeignKey(
        Vendor, on_delete=models.PROTECT, related_name="purchase_orders"
    )
    order_date = models.DateField()
    expected_date = models.DateField(null=True, blank=True)
    status = models.CharField(
        max_length=20, choices=PO_STATUS_CHOICES, default="pending"
    )

    class Meta:
        ordering = ("-order_date", "-id")
        indexes = [models.Index(fields=["vendor"])]

    def __str__(self):
        return f"PO {self.po_number}"

    def clean(self):
        super().clean()
        if self.expected_date and self.order_date and self.expected_date < self.order_date:
            raise ValidationError(
                {"expected_date": "Expected date cannot be before order date."}
            )

    def transition_to(self, new_status):
        if new_status not in PO_TRANSITIONS.get(self.status, []):
            raise InvalidStateError(
                f"Cannot go from {self.status} to {new_status}")
        self.status = new_status
        self.save(update_fields=["status"])
        return self
