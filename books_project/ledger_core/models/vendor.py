from django.db import models
from .client import Contact


class Vendor(Contact):  # Mirrors Client but for Accounts Payable (AP)

    class Meta(Contact.Meta):
        indexes = [models.Index(fields=["name"])]
