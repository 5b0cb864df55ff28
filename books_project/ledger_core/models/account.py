from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from ..managers import ActiveManager

# Choice Lists
AC_TYPES = [
    # Used in Account model to classify general ledger accounts
    ("asset", "Asset"),
    ("liability", "Liability"),
    ("equity", "Equity"),
    ("revenue", "Revenue"),
    ("expense", "Expense"),
]

# Side on which each account type increases
NORMAL_BALANCE = {
    "asset": "debit",
    "expense": "debit",
    "liability": "credit",
    "equity": "credit",
    "revenue": "credit",
}

# Finer classification allowed under each type
SUB_TYPES = {
    "asset": ("current_asset", "fixed_asset", "other_asset"),
    "liability": ("current_liability", "long_term_liability", "other_liability"),
    "equity": ("owner_equity", "retained_earnings"),
    "revenue": ("operating_revenue", "other_revenue"),
    "expense": ("operating_expense", "other_expense"),
}

# Cash flow classification of counterparties
NON_CURRENT_ASSET_SUB_TYPES = ("fixed_asset", "other_asset")
LONG_TERM_LIABILITY_SUB_TYPES = ("long_term_liability",)

BALANCE_SHEET_TYPES = ("asset", "liability", "equity")
INCOME_STATEMENT_TYPES = ("revenue", "expense")


def signed_amount(ac_type, debit, credit):
    """Effect of a debit/credit pair on an account of `ac_type`,
    positive when the account's balance grows."""
    if NORMAL_BALANCE[ac_type] == "debit":
        return debit - credit
    return credit - debit


class Account(models.Model):
    """
    Ledger account in the Chart of Accounts.
    - code is unique across the chart
    - ac_type: determines reporting - Balance Sheet vs P&L,
      and the side the balance grows on
    - balance: cached running total of posted lines,
      only ever changed by posting
    """

    # Every account has a code
    # which lets you sort/group accounts consistently in reports.
    code = models.CharField(max_length=32, unique=True)
    name = models.CharField(max_length=200)  # "Cash on Hand", "Accounts Payable"

    # One of the 5 basic accounting types
    ac_type = models.CharField(max_length=10, choices=AC_TYPES)
    # Finer classification, e.g. current_asset, fixed_asset, long_term_liability
    # (cash flow report uses it to split investing / financing)
    sub_type = models.CharField(max_length=50, null=True, blank=True)

    # Optional hierarchy:
    # (e.g. 1000 Cash, 1010 Petty Cash, 1020 Operating Bank)
    parent = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        related_name="children",
        on_delete=models.PROTECT,  # you can’t delete a parent if children exist
    )

    # “soft deactivate” accounts (stop new postings) without deleting history
    is_active = models.BooleanField(default=True)
    description = models.TextField(null=True, blank=True)

    balance = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    created_at = models.DateTimeField(auto_now_add=True)

    objects = ActiveManager()

    class Meta:
        ordering = ("code",)
        indexes = [
            # For reports grouped by ac_type
            models.Index(fields=["ac_type"]),
            models.Index(fields=["parent"]),  # Sub-accounts by parent account
        ]

    def __str__(self):
        return f"{self.code} – {self.name}"  # Example: "1000 – Cash on Hand"

    @property
    def normal_balance(self):
        return NORMAL_BALANCE[self.ac_type]

    def balance_delta(self, debit, credit):
        return signed_amount(self.ac_type, debit, credit)

    def ancestor_ids(self):
        """Walk parent links by id lookup, nearest first."""
        ids = []
        parent_id = self.parent_id
        while parent_id is not None and parent_id not in ids:
            ids.append(parent_id)
            parent_id = (
                Account.objects.filter(pk=parent_id)
                .values_list("parent_id", flat=True)
                .first()
            )
        return ids

    def clean(self):
        """Keep the account tree acyclic and the type stable."""
        if self.sub_type and self.sub_type not in SUB_TYPES.get(self.ac_type, ()):
            raise ValidationError(
                {"sub_type": f"'{self.sub_type}' is not a valid {self.ac_type} sub-type."}
            )

        if self.pk and self.parent_id == self.pk:
            raise ValidationError({"parent": "An account cannot be its own parent."})

        if self.pk and self.pk in self.ancestor_ids():
            raise ValidationError(
                {"parent": "Parent link would create a cycle in the account tree."}
            )

        if self.pk:
            old_type = (
                Account.objects.filter(pk=self.pk)
                .values_list("ac_type", flat=True)
                .first()
            )
            # Prior postings were signed with the old type
            if old_type and old_type != self.ac_type and self.journal_lines.exists():
                raise ValidationError(
                    {"ac_type": "Cannot change the type of an account used in journal lines."}
                )

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        if self._state.adding or "update_fields" in kwargs:
            return super().save(*args, **kwargs)
        # balance is moved by F() updates when posting; a row loaded before
        # that posting must not write its stale copy back
        kwargs["update_fields"] = [
            f.name for f in self._meta.concrete_fields
            if not f.primary_key and f.name != "balance"
        ]
        super().save(*args, **kwargs)
        self.refresh_from_db(fields=["balance"])
