from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from ..managers import ActiveManager
from .account import Account

BANK_ACCOUNT_TYPES = [
    ("checking", "Checking"),
    ("savings", "Savings"),
    ("credit_card", "Credit card"),
]

TX_TYPES = [
    ("debit", "Debit"),  # money out of the bank account
    ("credit", "Credit"),  # money in
]

IMPORT_SOURCES = [
    ("manual", "Manual"),
    ("csv", "CSV"),
    ("api", "API"),
]


# ---------- Banking ----------
class BankAccount(models.Model):  # Represents a bank account the business maintains
    name = models.CharField(
        max_length=200
    )  # e.g. "Checking Account", "Savings Account"
    account_number = models.CharField(max_length=50, null=True, blank=True)
    bank_name = models.CharField(max_length=200, null=True, blank=True)
    account_type = models.CharField(
        max_length=20, choices=BANK_ACCOUNT_TYPES, default="checking"
    )
    # Statement balance, moved by recorded bank transactions
    balance = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    is_active = models.BooleanField(default=True)

    # The GL account mirroring this bank account.
    # Linked ledger accounts count as "cash" in the cash flow report.
    ledger_account = models.ForeignKey(
        Account,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="bank_accounts",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    objects = ActiveManager()

    class Meta:
        ordering = ("name",)
        constraints = [
            models.UniqueConstraint(
                fields=["name"], name="uq_bankaccount_name"
            ),
        ]

    def __str__(self):
        # Show name + last digits for clarity
        if self.account_number:
            return f"{self.name} (…{self.account_number[-4:]})"
        return self.name

    def clean(self):
        if self.ledger_account_id and self.ledger_account.ac_type not in ("asset", "liability"):
            # credit cards are liabilities, everything else an asset
            raise ValidationError(
                {"ledger_account": "Bank accounts map to asset or liability accounts."}
            )

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        if self._state.adding or "update_fields" in kwargs:
            return super().save(*args, **kwargs)
        # balance is moved by F() updates as transactions are recorded,
        # a stale copy loaded earlier must not be written back
        kwargs["update_fields"] = [
            f.name for f in self._meta.concrete_fields
            if not f.primary_key and f.name != "balance"
        ]
        super().save(*args, **kwargs)
        self.refresh_from_db(fields=["balance"])


class BankTransaction(models.Model):  # Represents single inflow/outflow in a bank account
    # prevent BankAccount deletion if transactions exist
    bank_account = models.ForeignKey(
        BankAccount, on_delete=models.PROTECT, related_name="transactions"
    )
    transaction_date = models.DateField()  # when it cleared
    description = models.TextField()
    # always positive, direction comes from tx_type
    amount = models.DecimalField(max_digits=18, decimal_places=2)
    tx_type = models.CharField(max_length=10, choices=TX_TYPES)
    # bank account balance right after this transaction
    running_balance = models.DecimalField(
        max_digits=18, decimal_places=2, null=True, blank=True
    )

    is_reconciled = models.BooleanField(default=False)
    reconciled_at = models.DateTimeField(null=True, blank=True)
    # e.g. the matching leg of a transfer between two bank accounts
    matched_transaction = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )
    imported_from = models.CharField(
        max_length=10, choices=IMPORT_SOURCES, default="manual"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-transaction_date", "-id")
        # Optimizes queries for reconciliation
        # (find all txns for a bank account or for a date)
        indexes = [
            models.Index(fields=["bank_account", "transaction_date"]),
            models.Index(fields=["is_reconciled"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name="bt_positive_amount",
            ),
        ]

    # Show something human-readable in Django Admin
    def __str__(self):
        flag = "R" if self.is_reconciled else "-"
        return f"{self.transaction_date} {self.tx_type} {self.amount} [{flag}]"

    @property
    def signed_amount(self):
        """Effect on the bank account balance."""
        return self.amount if self.tx_type == "credit" else -self.amount

    def clean(self):  # auto-runs when you call full_clean() before saving
        if self.amount is not None and self.amount <= 0:
            raise ValidationError({"amount": "Amount must be > 0"})
        if self.pk and self.matched_transaction_id == self.pk:
            raise ValidationError(
                {"matched_transaction": "A transaction cannot be matched to itself."}
            )
        if self.is_reconciled and not self.reconciled_at:
            raise ValidationError("Reconciled transactions need a reconciliation time.")

        # Reconciliation is irreversible
        if self.pk and not self.is_reconciled:
            if BankTransaction.objects.filter(pk=self.pk, is_reconciled=True).exists():
                raise ValidationError("Cannot un-reconcile a bank transaction.")

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)
