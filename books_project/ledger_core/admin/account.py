from django.contrib import admin

from ..models import Account


# Register `Account` model
@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    # show key accounting fields
    list_display = (
        "id",
        "code",
        "name",
        "ac_type",
        "sub_type",
        "normal_balance",
        "parent",
        "balance",
        "is_active",
    )
    list_filter = ("ac_type", "is_active")
    search_fields = ("code", "name")
    ordering = ("code",)
    # balance only moves through posting
    readonly_fields = ("balance", "created_at")
    fieldsets = (
        (
            None,
            {
                "fields": (
                    "code",
                    "name",
                    "ac_type",
                    "sub_type",
                    "parent",
                    "description",
                    "is_active",
                )
            },
        ),
        ("Ledger", {"fields": ("balance", "created_at")}),
    )

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("parent")

    # accounts with postings are PROTECTed by the lines, hide the button too
    def has_delete_permission(self, request, obj=None):
        if obj and obj.journal_lines.exists():
            return False
        return super().has_delete_permission(request, obj)
