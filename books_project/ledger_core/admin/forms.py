from decimal import Decimal

from django import forms
from django.contrib.auth.forms import UserChangeForm as DjangoUserChangeForm
from django.contrib.auth.forms import \
    UserCreationForm as DjangoUserCreationForm
from django.core.exceptions import ValidationError

from ..models import Account, JournalLine, User

# -----------------------------
# Register custom admin forms
# ----------------------------


# Subclass `DjangoUserCreationForm` (form used when adding a new user)
class UserAdminCreationForm(DjangoUserCreationForm):
    class Meta(DjangoUserCreationForm.Meta):
        model = User  # Points `model` to custom User model
        fields = ("username", "email", "full_name", "role")


# Subclass `DjangoUserChangeForm` (form used when editing an existing user)
class UserAdminChangeForm(DjangoUserChangeForm):
    class Meta(DjangoUserChangeForm.Meta):
        model = User
        fields = (
            "username",
            "email",
            "full_name",
            "company_name",
            "role",
            "is_active",
            "is_staff",
            "is_superuser",
        )


# Inline form for JournalLine (admin)
class JournalLineInlineForm(forms.ModelForm):
    class Meta:
        model = JournalLine
        fields = ("account", "description", "debit_amount", "credit_amount")

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # only active accounts can take new postings
        if "account" in self.fields:
            self.fields["account"].queryset = Account.objects.active().order_by("code")

    def clean(self):
        cleaned = super().clean()
        debit = cleaned.get("debit_amount") or Decimal("0.00")
        credit = cleaned.get("credit_amount") or Decimal("0.00")
        if (debit == Decimal("0.00")) == (credit == Decimal("0.00")):
            raise ValidationError("Enter either a debit or a credit amount for each line.")
        return cleaned
