from django.db import models
from ..managers import ActiveManager


class Contact(models.Model):
    """Fields shared by clients (AR side) and vendors (AP side)."""

    # Legal or trade name
    name = models.CharField(max_length=200)

    email = models.EmailField(null=True, blank=True)
    phone = models.CharField(max_length=50, null=True, blank=True)
    address = models.TextField(null=True, blank=True)
    city = models.CharField(max_length=100, null=True, blank=True)
    state = models.CharField(max_length=100, null=True, blank=True)
    zip_code = models.CharField(max_length=20, null=True, blank=True)
    country = models.CharField(max_length=100, null=True, blank=True)
    tax_id = models.CharField(max_length=50, null=True, blank=True)

    # Standard credit terms
    payment_terms = models.IntegerField(default=30)
    """ Example: If terms = 30 → invoice due 30 days after issue. """

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = ActiveManager()

    class Meta:
        abstract = True
        ordering = ("name",)

    def __str__(self):
        return self.name


# ---------- Client ----------
# Represents a customer who receives invoices
class Client(Contact):

    class Meta(Contact.Meta):
        indexes = [models.Index(fields=["name"])]
