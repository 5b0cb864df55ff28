from django.contrib import admin

from ..models import Bill, PurchaseOrder, Vendor
from .actions import receive_purchase_orders


# Register `Bill` model
@admin.register(Bill)
class BillAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "bill_number",
        "vendor",
        "issue_date",
        "due_date",
        "status",
        "total_amount",
        "outstanding_amount",
    )
    list_filter = ("status", "issue_date")
    search_fields = ("bill_number", "vendor__name")

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("vendor")

    """ Enforce immutability at admin level """
    def get_readonly_fields(self, request, obj=None):
        if obj and obj.status == "paid":
            return [f.name for f in self.model._meta.fields]
        return super().get_readonly_fields(request, obj)

    def has_delete_permission(self, request, obj=None):
        if obj and obj.status == "paid":
            return False
        return super().has_delete_permission(request, obj)


# Register `PurchaseOrder` model
@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(admin.ModelAdmin):
    list_display = ("id", "po_number", "vendor", "order_date", "expected_date", "status", "total_amount")
    list_filter = ("status", "order_date")
    search_fields = ("po_number", "vendor__name")
    readonly_fields = ("status",)
    actions = [receive_purchase_orders]

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("vendor")


# Register `Vendor` model
@admin.register(Vendor)
class VendorAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "email", "phone", "payment_terms", "is_active")
    list_filter = ("is_active",)
    search_fields = ("name", "email", "tax_id")
