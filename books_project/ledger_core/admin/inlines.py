from django.contrib import admin

from ..models import InvoiceLine, JournalLine
from .forms import JournalLineInlineForm

# ---------- Helpful inline admin classes ----------


class JournalLineInline(admin.TabularInline):
    """Show JournalLine rows on JournalEntry page"""

    model = JournalLine
    form = JournalLineInlineForm
    extra = 0  # don't show "empty" rows by default
    fields = ("account", "description", "debit_amount", "credit_amount")
    ordering = ("id",)  # lines appear in creation order

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("account")

    def get_readonly_fields(self, request, obj=None):
        # Once journal is `posted`, all its lines become completely locked
        if obj and obj.status == "posted":
            return self.fields
        return ()

    def has_add_permission(self, request, obj=None):
        if obj and obj.status == "posted":
            return False
        return super().has_add_permission(request, obj)

    def has_delete_permission(self, request, obj=None):
        if obj and obj.status == "posted":
            return False
        return super().has_delete_permission(request, obj)


class InvoiceLineInline(admin.TabularInline):
    """Shows invoice lines under an Invoice page"""

    model = InvoiceLine
    extra = 0
    fields = ("description", "quantity", "rate", "amount", "account")
    readonly_fields = ("amount",)  # quantity × rate, computed on save

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("account")

    # lines are editable only while the invoice is a draft
    def has_add_permission(self, request, obj=None):
        if obj and obj.status != "draft":
            return False
        return super().has_add_permission(request, obj)

    def has_change_permission(self, request, obj=None):
        if obj and obj.status != "draft":
            return False
        return super().has_change_permission(request, obj)

    def has_delete_permission(self, request, obj=None):
        if obj and obj.status != "draft":
            return False
        return super().has_delete_permission(request, obj)
