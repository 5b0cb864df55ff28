import logging
import uuid

from django.core.exceptions import ValidationError
from django.db import DatabaseError, IntegrityError, transaction

# Import models
from ..exceptions import DuplicateEntryNumber, PersistenceError
from ..models import Account, JournalEntry, JournalLine
from ..models.journal import to_money, to_pk
from .audit_helper import log_action

logger = logging.getLogger(__name__)


def generate_entry_number(entry_date):
    """JE-YYYYMMDD-<8 hex>"""
    return f"JE-{entry_date:%Y%m%d}-{uuid.uuid4().hex[:8]}"


def _parse_amount(value, line_no, side):
    try:
        return to_money(value)
    except ValidationError:
        raise ValidationError(f"Line {line_no}: {side} amount {value!r} is not a number.")


def _clean_line_items(line_items):
    """
    Validate line shape and account references before anything is written.
    Returns a list of dicts with quantized amounts.
    """
    if not line_items:
        raise ValidationError("A journal entry needs at least one line.")

    cleaned = []
    for line_no, item in enumerate(line_items, start=1):
        account_id = item.get("account_id")
        if account_id in (None, ""):
            raise ValidationError(f"Line {line_no}: account is required.")
        account_id = to_pk(account_id, f"Line {line_no}: account")
        debit = _parse_amount(item.get("debit_amount"), line_no, "debit")
        credit = _parse_amount(item.get("credit_amount"), line_no, "credit")
        if debit < 0 or credit < 0:
            raise ValidationError(f"Line {line_no}: amounts must be >= 0.")
        # exactly one side carries the amount
        if (debit == 0) == (credit == 0):
            raise ValidationError(
                f"Line {line_no}: exactly one of debit or credit must be non-zero."
            )
        cleaned.append({
            "account_id": account_id,
            "description": item.get("description"),
            "debit_amount": debit,
            "credit_amount": credit,
        })

    wanted = {c["account_id"] for c in cleaned}
    found = dict(
        Account.objects.filter(pk__in=wanted).values_list("pk", "is_active")
    )
    missing = sorted(wanted - found.keys())
    if missing:
        raise ValidationError(f"Unknown account(s): {missing}", code="unknown_account")
    inactive = sorted(pk for pk, active in found.items() if not active)
    if inactive:
        raise ValidationError(
            f"Cannot post to inactive account(s): {inactive}", code="inactive_account"
        )
    return cleaned


def _create_entry(entry_data, line_items, user=None):
    cleaned = _clean_line_items(line_items)

    entry = JournalEntry(
        entry_number=entry_data.get("entry_number") or "",
        entry_date=entry_data.get("entry_date"),
        description=entry_data.get("description"),
        reference=entry_data.get("reference") or None,
        status="draft",
        created_by=user if getattr(user, "pk", None) else None,
    )
    # Coerces the date; the number is checked separately
    entry.full_clean(exclude=["entry_number"])
    if not entry.entry_number:
        entry.entry_number = generate_entry_number(entry.entry_date)
    elif JournalEntry.objects.filter(entry_number=entry.entry_number).exists():
        raise DuplicateEntryNumber(
            f"Journal entry number {entry.entry_number} already exists."
        )
    entry.save()

    for item in cleaned:
        JournalLine.objects.create(journal=entry, **item)
    return entry


def _run_write(operation, entry_number=None):
    """Map storage failures onto the ledger error taxonomy."""
    try:
        return operation()
    except IntegrityError as exc:
        # entry_number is the only unique column written here
        if "entry_number" in str(exc):
            raise DuplicateEntryNumber(
                f"Journal entry number {entry_number} already exists."
            ) from exc
        raise ValidationError(f"Journal entry rejected by the database: {exc}") from exc
    except DatabaseError as exc:
        logger.exception("Journal write failed")
        raise PersistenceError("Journal entry could not be persisted.") from exc


# ----------------------------
# Journal-related workflows
# ----------------------------
def post_entry(entry_data, line_items, user=None) -> JournalEntry:
    """
    Create and post a journal entry in one transaction.

    entry_data: entry_date, description, optional entry_number and reference
    line_items: [{"account_id", "debit_amount", "credit_amount", "description"}]

    Everything (header, lines, cached balances, audit row) commits together
    or not at all.
    """
    def operation():
        with transaction.atomic():
            entry = _create_entry(entry_data, line_items, user=user)
            entry.post(user=user)
            log_action(
                action="post",
                instance=entry,
                user=user,
                changes={
                    "entry_number": entry.entry_number,
                    "total_amount": str(entry.total_amount),
                },
            )
        return entry

    entry = _run_write(operation, entry_data.get("entry_number"))
    logger.info(
        "Posted journal entry %s dated %s, total %s",
        entry.entry_number, entry.entry_date, entry.total_amount,
    )
    return entry


def create_draft_entry(entry_data, line_items, user=None) -> JournalEntry:
    """Store an entry as a draft. Lines are validated, balance is not."""
    def operation():
        with transaction.atomic():
            return _create_entry(entry_data, line_items, user=user)

    entry = _run_write(operation, entry_data.get("entry_number"))
    logger.info("Saved draft journal entry %s", entry.entry_number)
    return entry


def post_draft_entry(entry_id, user=None) -> JournalEntry:
    """
    Post a stored draft. Re-posting an unchanged posted entry returns it
    untouched; a posted entry whose lines no longer match raises
    AlreadyPostedDifferentPayload.
    """
    def operation():
        with transaction.atomic():
            entry = JournalEntry.objects.get(pk=entry_id)
            was_posted = entry.status == "posted"
            entry = entry.post(user=user)
            if not was_posted:
                log_action(
                    action="post",
                    instance=entry,
                    user=user,
                    changes={"total_amount": str(entry.total_amount)},
                )
        return entry, was_posted

    entry, was_posted = _run_write(operation)
    if not was_posted:
        logger.info("Posted draft journal entry %s", entry.entry_number)
    return entry
