from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models


class Document(models.Model):
    """
    Money header shared by invoices, bills and purchase orders.
    total_amount is always subtotal + tax_amount.
    """

    subtotal = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    tax_amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    total_amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    notes = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True

    def money_errors(self):
        errors = {}
        for field in ("subtotal", "tax_amount", "total_amount"):
            value = getattr(self, field)
            if value is not None and value < 0:
                errors[field] = "Amount must be >= 0"
        if not errors and self.total_amount != self.subtotal + self.tax_amount:
            errors["total_amount"] = (
                f"Total {self.total_amount} must equal subtotal {self.subtotal}"
                f" + tax {self.tax_amount}"
            )
        return errors

    def clean(self):
        errors = self.money_errors()
        if errors:
            raise ValidationError(errors)

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)


class PayableDocument(Document):
    """Document that can be settled (invoices and bills)."""

    # How much has been settled so far
    paid_amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )

    class Meta:
        abstract = True

    @property
    def outstanding_amount(self):
        return self.total_amount - self.paid_amount

    def money_errors(self):
        errors = super().money_errors()
        if self.paid_amount < 0:
            errors["paid_amount"] = "Paid amount must be >= 0"
        elif self.total_amount is not None and self.paid_amount > self.total_amount:
            # overpayment would leave a negative receivable/payable
            errors["paid_amount"] = "Paid amount cannot exceed total amount"
        return errors
