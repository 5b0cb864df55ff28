from django.contrib import admin

from ..models import BankAccount, BankTransaction
from .actions import reconcile_bank_transactions


# Register `BankAccount` model
@admin.register(BankAccount)
class BankAccountAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "bank_name", "account_type", "balance", "ledger_account", "is_active")
    list_filter = ("account_type", "is_active")
    # moved only by recorded transactions
    readonly_fields = ("balance",)

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("ledger_account")


# Register `BankTransaction` model
@admin.register(BankTransaction)
class BankTransactionAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "bank_account",
        "transaction_date",
        "description",
        "tx_type",
        "amount",
        "running_balance",
        "is_reconciled",
    )
    list_filter = ("bank_account", "tx_type", "is_reconciled", "transaction_date")
    search_fields = ("description",)
    actions = [reconcile_bank_transactions]

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("bank_account", "matched_transaction")

    # recording goes through the service so the account balance moves with it,
    # rows are read-only here
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
