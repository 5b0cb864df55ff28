from django.contrib import admin
from django.db.models import Prefetch

from ..models import Client, Invoice, InvoiceLine
from .actions import send_invoices
from .inlines import InvoiceLineInline


# Register `Invoice` model
@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "invoice_number",
        "client",
        "issue_date",
        "due_date",
        "status",
        "total_amount",
        "outstanding_amount",
    )
    list_filter = ("status", "issue_date")
    search_fields = ("invoice_number", "client__name")
    actions = [send_invoices]
    inlines = [InvoiceLineInline]
    # status moves only through the send / payment / cancel workflows
    readonly_fields = ("status", "subtotal", "tax_amount", "total_amount", "paid_amount", "ledger_entry")

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        line_qs = InvoiceLine.objects.select_related("account")
        return qs.select_related("client").prefetch_related(
            Prefetch("lines", queryset=line_qs)
        )

    """ Enforce immutability at admin level """
    def get_readonly_fields(self, request, obj=None):
        if obj and obj.status == "paid":
            return [f.name for f in self.model._meta.fields]
        if obj and obj.status != "draft":
            # issued: only the paperwork may change
            return [
                f.name for f in self.model._meta.fields
                if f.name not in ("due_date", "notes", "terms")
            ]
        return super().get_readonly_fields(request, obj)

    def has_delete_permission(self, request, obj=None):
        if obj and (obj.paid_amount > 0 or (obj.ledger_entry_id and obj.status != "cancelled")):
            return False
        return super().has_delete_permission(request, obj)


# Register `Client` model
@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "email", "phone", "payment_terms", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name", "email", "tax_id")
