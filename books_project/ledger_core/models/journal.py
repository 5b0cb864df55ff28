import hashlib
import json
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models, transaction
from django.utils import timezone
from ..conf import money_quantum
from ..exceptions import AlreadyPostedDifferentPayload, UnbalancedJournalError
from ..managers import JournalLineManager
from .account import Account

JOURNAL_STATUS = [
    ("draft", "Draft"),  # still editable, need not balance
    ("posted", "Posted"),  # finalized, balances applied
]

# Header fields that may not change once an entry is posted
FROZEN_FIELDS = ("entry_number", "entry_date", "description", "reference", "total_amount")


def to_money(value):
    """Coerce str/int/float/Decimal to a Decimal at currency precision."""
    if value in (None, ""):
        return Decimal("0").quantize(money_quantum())
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"{value!r} is not a valid amount.")
    if not amount.is_finite():
        raise ValidationError(f"{value!r} is not a valid amount.")
    return amount.quantize(money_quantum(), rounding=ROUND_HALF_UP)


def to_pk(value, label="id"):
    """Coerce an id taken from JSON or a query string; booleans and fractions are refused."""
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise ValidationError(f"{label} {value!r} is not a valid id.")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{label} {value!r} is not a valid id.")


# ---------- Journal (Header) & JournalLine ----------
class JournalEntry(models.Model):  # Represents one accounting transaction
    # Caller-visible identifier, also the idempotency key for posting
    entry_number = models.CharField(max_length=64, unique=True)
    entry_date = models.DateField()
    description = models.TextField()
    # e.g. invoice number, bill number
    reference = models.CharField(max_length=200, null=True, blank=True)
    # Sum of the debit side once posted
    total_amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )
    status = models.CharField(
        max_length=10,
        choices=JOURNAL_STATUS,
        default="draft",
    )
    posted_at = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True, on_delete=models.SET_NULL
    )
    # Fingerprint-based idempotency (safe to post twice if nothing has changed)
    posting_fingerprint = models.CharField(max_length=64, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-entry_date", "-id")
        verbose_name_plural = "journal entries"
        # Speed up listing & filtering
        # (e.g. all posted entries this month)
        indexes = [
            models.Index(fields=["entry_date"]),
            models.Index(fields=["status", "entry_date"]),
        ]

    def __str__(self):
        return f"{self.entry_number} {self.entry_date} [{self.status}]"

    # Aggregate all debit and credit amounts across entry’s lines
    def compute_totals(self):
        """Return debits, credits sums for lines"""
        return self.lines.totals()

    # True if double-entry rule holds: total debits = total credits
    def is_balanced(self):
        debit, credit = self.compute_totals()
        return debit == credit

    def _posting_payload(self):
        """Deterministic JSON snapshot of what matters for posting.

        Same data → same string, so a re-post can tell whether the
        persisted lines are the ones that were posted.
        """
        lines = [
            {
                "acct": line.account_id,
                "debit": str(line.debit_amount),
                "credit": str(line.credit_amount),
                "desc": line.description or "",
            }
            # always in the same order (id ascending)
            for line in self.lines.order_by("id")
        ]
        payload = {
            "number": self.entry_number,
            "date": self.entry_date.isoformat(),
            "lines": lines,
        }
        return json.dumps(payload, separators=(",", ":"), sort_keys=True)

    def _fingerprint(self):
        return hashlib.sha256(self._posting_payload().encode()).hexdigest()

    @transaction.atomic
    def post(self, user=None):
        """
        Post the entry: validate, apply balances to the referenced accounts,
        freeze. All-or-nothing; re-posting an unchanged entry is a no-op.
        """
        # lazy import to avoid circular import at module load time
        from ..services.balances import apply_posting_to_balances

        # Lock the header row so two posts of the same draft serialize
        je = JournalEntry.objects.select_for_update().get(pk=self.pk)
        lines = list(je.lines.select_related("account").order_by("id"))

        if not lines:  # Prevent posting an empty entry
            raise ValidationError("JournalEntry must have at least one JournalLine.")

        fp = je._fingerprint()

        """ Idempotency & immutability """
        if je.status == "posted":
            if je.posting_fingerprint == fp:
                return je
            raise AlreadyPostedDifferentPayload(
                "Journal already posted with different payload."
            )

        inactive = sorted({line.account.code for line in lines if not line.account.is_active})
        if inactive:
            raise ValidationError(
                f"Cannot post to inactive account(s): {', '.join(inactive)}",
                code="inactive_account",
            )

        # Enforce double-entry rule: debits = credits
        total_debit = sum((line.debit_amount for line in lines), Decimal("0.00"))
        total_credit = sum((line.credit_amount for line in lines), Decimal("0.00"))
        if total_debit != total_credit:
            raise UnbalancedJournalError(
                f"Journal not balanced: debits={total_debit}, credits={total_credit}"
            )

        # Cached balances move inside the same transaction as the status flip
        apply_posting_to_balances(lines)

        """ Update state """
        je.status = "posted"
        je.posted_at = timezone.now()
        je.total_amount = total_debit
        je.posting_fingerprint = fp
        if getattr(user, "pk", None) and not je.created_by_id:
            je.created_by = user
        je.save(update_fields=[
            "status", "posted_at", "total_amount", "posting_fingerprint", "created_by"
        ])

        # keep the caller's instance in sync
        for field in ("status", "posted_at", "total_amount", "posting_fingerprint", "created_by_id"):
            setattr(self, field, getattr(je, field))
        return je

    def save(self, *args, **kwargs):
        if self.pk:  # Does this row already exist in DB?
            orig = JournalEntry.objects.filter(pk=self.pk).first()
            if orig and orig.status == "posted":
                if self.status != "posted":
                    raise ValidationError("Cannot unpost a posted journal")
                changed = [f for f in FROZEN_FIELDS if getattr(orig, f) != getattr(self, f)]
                if changed:
                    raise ValidationError(
                        f"Cannot modify {changed} on a posted JournalEntry. It is immutable."
                    )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if self.pk and JournalEntry.objects.filter(pk=self.pk, status="posted").exists():
            raise ValidationError("Cannot delete a posted JournalEntry.")
        return super().delete(*args, **kwargs)


class JournalLine(models.Model):  # Stores Lines ( credits / debits )
    """
    One debit or credit leg of a journal entry against a ledger account.
    Exactly one of debit_amount / credit_amount is non-zero.
    """

    journal = models.ForeignKey(
        JournalEntry,
        on_delete=models.CASCADE,  # entry owns its lines
        related_name="lines",
    )

    # can’t delete account if lines exist → PROTECT
    account = models.ForeignKey(
        Account, on_delete=models.PROTECT, related_name="journal_lines"
    )
    description = models.CharField(max_length=400, null=True, blank=True)

    debit_amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))
    credit_amount = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00"))

    objects = JournalLineManager()

    class Meta:
        ordering = ("id",)
        indexes = [
            models.Index(fields=["account"]),
            models.Index(fields=["journal"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(debit_amount__gte=0) &
                    models.Q(credit_amount__gte=0)
                ),
                name="jl_non_negative_amounts",
            ),
            models.CheckConstraint(
                condition=~(models.Q(debit_amount=0) &
                            models.Q(credit_amount=0)),
                name="jl_debit_or_credit_nonzero",
            ),
            models.CheckConstraint(
                condition=(models.Q(debit_amount=0) |
                           models.Q(credit_amount=0)),
                name="jl_not_both_debit_and_credit",
            ),
        ]

    def __str__(self):
        return f"{self.journal_id} | {self.account.code} {self.account.name} | D:{self.debit_amount} C:{self.credit_amount}"

    def clean(self):
        # Ensure no negative values sneak in
        # (redundant with CheckConstraint but gives a readable message)
        if self.debit_amount < 0 or self.credit_amount < 0:
            raise ValidationError("Debit and credit must be >= 0")
        if self.debit_amount > 0 and self.credit_amount > 0:
            raise ValidationError("JournalLine should not have both debit and credit > 0")
        if self.debit_amount == 0 and self.credit_amount == 0:
            raise ValidationError("JournalLine requires a non-0 amount on either debit or credit")

        # Posted journals are frozen
        if self.journal_id and JournalEntry.objects.filter(
            pk=self.journal_id, status="posted"
        ).exists():
            if not self.pk:
                raise ValidationError("Cannot add JournalLine: parent journal is posted.")
            orig = JournalLine.objects.filter(pk=self.pk).first()
            if orig is None or (
                orig.debit_amount != self.debit_amount
                or orig.credit_amount != self.credit_amount
                or orig.account_id != self.account_id
                or (orig.description or "") != (self.description or "")
            ):
                raise ValidationError("Cannot modify JournalLine: parent JournalEntry is posted.")

    def delete(self, *args, **kwargs):
        # Prevent deletion if parent journal is posted
        if self.journal_id and JournalEntry.objects.filter(
            pk=self.journal_id, status="posted"
        ).exists():
            raise ValidationError("Cannot delete JournalLine: parent JournalEntry is posted.")
        return super().delete(*args, **kwargs)

    def save(self, *args, **kwargs):
        # round to currency precision before validation
        self.debit_amount = to_money(self.debit_amount)
        self.credit_amount = to_money(self.credit_amount)
        self.full_clean()
        return super().save(*args, **kwargs)
