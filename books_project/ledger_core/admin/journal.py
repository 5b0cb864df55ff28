from decimal import Decimal

from django.contrib import admin
from django.db.models import Prefetch
from django.utils.html import format_html

from ..models import JournalEntry, JournalLine
from .actions import post_journal_entries
from .inlines import JournalLineInline


# Register `JournalEntry` model
@admin.register(JournalEntry)
class JournalEntryAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "entry_number",
        "entry_date",
        "reference",
        "status",
        "posted_at",
        "created_by",
        "balanced",
    )
    list_filter = ("status", "entry_date")
    search_fields = ("entry_number", "reference", "description")
    # set by post(), never typed in
    readonly_fields = ("status", "total_amount", "posted_at", "created_by")
    exclude = ("posting_fingerprint",)
    inlines = [JournalLineInline]
    actions = [post_journal_entries]

    def get_queryset(self, request):
        """For each JournalEntry, prefetch its lines together with their accounts."""
        qs = super().get_queryset(request)
        line_qs = JournalLine.objects.select_related("account")
        return qs.select_related("created_by").prefetch_related(
            Prefetch("lines", queryset=line_qs)
        )

    @admin.display(description="Debits / Credits")
    def balanced(self, obj):
        debit, credit = obj.compute_totals()
        colour = "green" if debit == credit else "red"
        return format_html(
            '<span style="color:{}">{} / {}</span>',
            colour,
            debit or Decimal("0.00"),
            credit or Decimal("0.00"),
        )

    """ Make entries immutable once posted """
    def get_readonly_fields(self, request, obj=None):
        r = list(self.readonly_fields)
        if obj and obj.status == "posted":
            r += ["entry_number", "entry_date", "reference", "description"]
        return r

    def has_delete_permission(self, request, obj=None):
        if obj and obj.status == "posted":
            return False
        return super().has_delete_permission(request, obj)

    def has_change_permission(self, request, obj=None):
        if obj and obj.status == "posted":
            return False
        return super().has_change_permission(request, obj)


# Register `JournalLine` model, browse-only
@admin.register(JournalLine)
class JournalLineAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "journal",
        "account",
        "description",
        "debit_amount",
        "credit_amount",
    )
    list_filter = ("journal__status", "account__ac_type")
    search_fields = ("description", "journal__entry_number", "account__code")

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("journal", "account")

    # lines are created only through the JournalEntry inline
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        if obj and obj.journal.status == "posted":
            return False
        return super().has_change_permission(request, obj)

    def has_delete_permission(self, request, obj=None):
        if obj and obj.journal.status == "posted":
            return False
        return super().has_delete_permission(request, obj)
