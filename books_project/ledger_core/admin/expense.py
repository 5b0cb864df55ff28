from django.contrib import admin

from ..models import ExpenseClaim
from .actions import approve_expense_claims, reject_expense_claims


# Register `ExpenseClaim` model
@admin.register(ExpenseClaim)
class ExpenseClaimAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "claim_number",
        "claimant",
        "expense_date",
        "category",
        "amount",
        "status",
        "approved_by",
    )
    list_filter = ("status", "category", "expense_date")
    search_fields = ("claim_number", "description", "claimant__username")
    # approval stamps come from the approve action
    readonly_fields = ("status", "approved_by", "approved_at", "payment_entry")
    actions = [approve_expense_claims, reject_expense_claims]

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("claimant", "approved_by", "account")
