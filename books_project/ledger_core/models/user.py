from django.contrib.auth.models import AbstractUser
from django.db import models
from ..managers import UserManager

ROLE_CHOICES = [
    ("user", "User"),
    ("approver", "Approver"),  # may approve expense claims
    ("admin", "Admin"),
]


# ---------- Custom User ----------
class User(AbstractUser):
    """
    Claimants and approvers of expense claims.
    Keep `AUTH_USER_MODEL = "ledger_core.User"` in settings.py
    """

    full_name = models.CharField(max_length=200, blank=True)
    # Name of the business the user keeps books for (display only)
    company_name = models.CharField(max_length=200, blank=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default="user")

    objects = UserManager()

    def __str__(self):
        # Fall back to username if no name is set
        return self.full_name or self.get_full_name() or self.username
