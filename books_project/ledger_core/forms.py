from django import forms
from django.forms.models import model_to_dict

from .models import (Account, BankAccount, BankTransaction, Bill, Client,
                     ExpenseClaim, Invoice, PurchaseOrder, User, Vendor)

# -----------------------------
# ModelForms validating API input
# -----------------------------

CONTACT_FIELDS = (
    "name", "email", "phone", "address", "city", "state", "zip_code",
    "country", "tax_id", "payment_terms", "is_active",
)


def bind(form_class, data, instance=None):
    """
    Bound form from API data.
    Missing keys keep the instance's (or a fresh model's) values, so PUT
    bodies may be partial; `<fk>_id` keys feed the `<fk>` form field.
    """
    fields = form_class.base_fields
    payload = model_to_dict(
        instance if instance is not None else form_class._meta.model(),
        fields=list(fields),
    )
    for key, value in data.items():
        name = key[:-3] if key.endswith("_id") and key[:-3] in fields else key
        if name in fields:
            payload[name] = value
    # None would be rendered as the string "None" by some widgets
    payload = {k: v for k, v in payload.items() if v is not None}
    return form_class(data=payload, instance=instance)


class ClientForm(forms.ModelForm):
    class Meta:
        model = Client
        fields = CONTACT_FIELDS


class VendorForm(forms.ModelForm):
    class Meta:
        model = Vendor
        fields = CONTACT_FIELDS


class AccountForm(forms.ModelForm):
    class Meta:
        model = Account
        fields = ("code", "name", "ac_type", "sub_type", "parent", "is_active", "description")


class BankAccountForm(forms.ModelForm):
    class Meta:
        model = BankAccount
        fields = (
            "name", "account_number", "bank_name", "account_type",
            "balance", "is_active", "ledger_account",
        )


class InvoiceForm(forms.ModelForm):
    """Header of a draft invoice."""

    class Meta:
        model = Invoice
        fields = (
            "invoice_number", "client", "issue_date", "due_date", "tax_rate",
            "subtotal", "tax_amount", "total_amount", "notes", "terms",
        )


class IssuedInvoiceForm(forms.ModelForm):
    """Once sent, only the paperwork around the money may change."""

    class Meta:
        model = Invoice
        fields = ("due_date", "notes", "terms")


class BillForm(forms.ModelForm):
    class Meta:
        model = Bill
        fields = (
            "bill_number", "vendor", "issue_date", "due_date", "status",
            "subtotal", "tax_amount", "total_amount", "paid_amount", "notes",
        )


class PurchaseOrderForm(forms.ModelForm):
    class Meta:
        model = PurchaseOrder
        fields = (
            "po_number", "vendor", "order_date", "expected_date",
            "subtotal", "tax_amount", "total_amount", "notes",
        )


class ExpenseClaimForm(forms.ModelForm):
    class Meta:
        model = ExpenseClaim
        fields = (
            "claim_number", "claimant", "description", "amount",
            "expense_date", "category", "account", "notes",
        )


class BankTransactionForm(forms.ModelForm):
    class Meta:
        model = BankTransaction
        fields = (
            "bank_account", "transaction_date", "description", "amount",
            "tx_type", "imported_from",
        )


class UserForm(forms.ModelForm):
    # write-only, stored hashed
    password = forms.CharField(required=False, strip=False)

    class Meta:
        model = User
        fields = ("username", "email", "full_name", "company_name", "role")

    def save(self, commit=True):
        user = super().save(commit=False)
        password = self.cleaned_data.get("password")
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        if commit:
            user.save()
        return user
