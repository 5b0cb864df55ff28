import logging
from collections import defaultdict
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Tuple

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from ..conf import account_code, default_tax_rate, money_quantum
from ..exceptions import InvalidStateError
from ..models import Account, Invoice, InvoiceLine
from ..models.journal import to_money
from .audit_helper import log_action
from .posting import post_entry

logger = logging.getLogger(__name__)

# Header fields a caller may set when creating an invoice
INVOICE_FIELDS = (
    "invoice_number", "client", "client_id", "issue_date", "due_date",
    "notes", "terms", "subtotal", "tax_amount", "total_amount",
)


@dataclass(frozen=True)
class DocumentTotals:
    line_amounts: Tuple[Decimal, ...]
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal


def _quantity(value, default="1"):
    try:
        return Decimal(str(value if value not in (None, "") else default))
    except ArithmeticError:
        raise ValidationError(f"{value!r} is not a valid number.")


def _tax_rate(value):
    """Explicit rate, or the configured default when none is given."""
    if value in (None, ""):
        return default_tax_rate()
    try:
        rate = Decimal(str(value))
    except ArithmeticError:
        raise ValidationError(f"Tax rate {value!r} is not a valid number.")
    if not rate.is_finite() or rate < 0:
        raise ValidationError("Tax rate must be a number >= 0.")
    return rate


def calculate_document_totals(line_items, tax_rate=None) -> DocumentTotals:
    """
    amount = quantity × rate per line (2 dp), subtotal = Σ amounts,
    tax = subtotal × tax_rate (2 dp), total = subtotal + tax.
    """
    rate_of_tax = _tax_rate(tax_rate)
    amounts = []
    for item in line_items:
        quantity = _quantity(item.get("quantity"))
        rate = _quantity(item.get("rate"), default="0")
        if quantity < 0 or rate < 0:
            raise ValidationError("Quantity and rate must be >= 0")
        amounts.append(
            (quantity * rate).quantize(money_quantum(), rounding=ROUND_HALF_UP)
        )
    subtotal = sum(amounts, Decimal("0.00"))
    tax = (subtotal * rate_of_tax).quantize(money_quantum(), rounding=ROUND_HALF_UP)
    return DocumentTotals(
        line_amounts=tuple(amounts),
        subtotal=subtotal,
        tax_amount=tax,
        total_amount=subtotal + tax,
    )


def _ledger_account(role):
    code = account_code(role)
    try:
        return Account.objects.get(code=code)
    except Account.DoesNotExist:
        raise ValidationError(f"No {role} account with code {code} in the chart of accounts.")


def _locked_invoice(invoice_id):
    return Invoice.objects.select_for_update().get(pk=invoice_id)


# ----------------------------------------------
# Invoice workflows
# ----------------------------------------------
def create_invoice(invoice_data, line_items=None, tax_rate=None) -> Invoice:
    """
    Create a draft invoice. With line items the money fields are derived
    from the lines; without, the given subtotal/tax/total must agree.
    """
    with transaction.atomic():
        fields = {k: v for k, v in invoice_data.items() if k in INVOICE_FIELDS}
        invoice = Invoice(status="draft", **fields)
        if tax_rate not in (None, ""):
            invoice.tax_rate = _tax_rate(tax_rate)

        if line_items:
            totals = calculate_document_totals(line_items, invoice.tax_rate)
            invoice.subtotal = totals.subtotal
            invoice.tax_amount = totals.tax_amount
            invoice.total_amount = totals.total_amount
        invoice.save()  # parent first, lines need the pk

        for item in line_items or []:
            InvoiceLine.objects.create(
                invoice=invoice,
                description=item.get("description") or "",
                quantity=_quantity(item.get("quantity")),
                rate=_quantity(item.get("rate"), default="0"),
                account_id=item.get("account_id") or None,
            )
        # line signals keep the header totals in sync
        invoice.refresh_from_db()
    logger.info("Created invoice %s, total %s", invoice.invoice_number, invoice.total_amount)
    return invoice


def send_invoice(invoice_id, user=None) -> Invoice:
    """
    draft → sent, recognizing revenue:
      Debit: receivable = total
      Credit: revenue per line account (default revenue account) = line amounts
      Credit: tax payable = tax
    """
    with transaction.atomic():
        invoice = _locked_invoice(invoice_id)
        if not invoice.can_transition_to("sent"):
            raise InvalidStateError(
                f"Invoice {invoice.invoice_number} is {invoice.status}; cannot send it."
            )
        if invoice.total_amount <= 0:
            raise ValidationError("Invoice total must be > 0 to recognize revenue")

        receivable = _ledger_account("receivable")
        credits = defaultdict(lambda: Decimal("0.00"))
        lines = list(invoice.lines.all())
        if lines:
            default_revenue = None
            for line in lines:
                if line.account_id:
                    credits[line.account_id] += line.amount
                    continue
                default_revenue = default_revenue or _ledger_account("revenue")
                credits[default_revenue.pk] += line.amount
        else:
            credits[_ledger_account("revenue").pk] += invoice.subtotal

        journal_lines = [{
            "account_id": receivable.pk,
            "debit_amount": invoice.total_amount,
            "description": f"AR for Invoice {invoice.invoice_number}",
        }]
        for account_id, amount in credits.items():
            if amount:
                journal_lines.append({
                    "account_id": account_id,
                    "credit_amount": amount,
                    "description": f"Revenue: invoice {invoice.invoice_number}",
                })
        if invoice.tax_amount:
            journal_lines.append({
                "account_id": _ledger_account("tax_payable").pk,
                "credit_amount": invoice.tax_amount,
                "description": f"Tax on invoice {invoice.invoice_number}",
            })

        entry = post_entry(
            {
                "entry_date": invoice.issue_date,
                "description": f"Invoice {invoice.invoice_number}",
                "reference": invoice.invoice_number,
            },
            journal_lines,
            user=user,
        )
        invoice.ledger_entry = entry
        invoice.transition_to("sent")
        log_action(
            action="send",
            instance=invoice,
            user=user,
            changes={"total_amount": str(invoice.total_amount), "entry": entry.entry_number},
        )
    logger.info("Sent invoice %s", invoice.invoice_number)
    return invoice


def record_invoice_payment(invoice_id, amount, deposit_account_id, payment_date=None, user=None) -> Invoice:
    """
    Apply a payment to a sent/overdue invoice:
      Debit: deposit account, Credit: receivable.
    The invoice becomes paid once paid_amount reaches total_amount.
    """
    with transaction.atomic():
        invoice = _locked_invoice(invoice_id)
        if invoice.status not in ("sent", "overdue"):
            raise InvalidStateError(
                f"Invoice {invoice.invoice_number} is {invoice.status}; it cannot take payments."
            )
        amount = to_money(amount)
        if amount <= 0:
            raise ValidationError("Payment amount must be positive")
        # prevent overpayment, receivables never go negative
        if amount > invoice.outstanding_amount:
            raise ValidationError("Payment exceeds invoice outstanding amount")

        receivable = _ledger_account("receivable")
        entry = post_entry(
            {
                "entry_date": payment_date or timezone.localdate(),
                "description": f"Payment for invoice {invoice.invoice_number}",
                "reference": invoice.invoice_number,
            },
            [
                {"account_id": deposit_account_id, "debit_amount": amount,
                 "description": f"Receipt for invoice {invoice.invoice_number}"},
                {"account_id": receivable.pk, "credit_amount": amount,
                 "description": f"Clear AR for invoice {invoice.invoice_number}"},
            ],
            user=user,
        )

        invoice.paid_amount += amount
        if invoice.paid_amount == invoice.total_amount:
            invoice.transition_to("paid")
        else:
            invoice.save()

        log_action(
            action="apply_payment",
            instance=invoice,
            user=user,
            changes={
                "amount": str(amount),
                "paid_amount": str(invoice.paid_amount),
                "status": invoice.status,
                "entry": entry.entry_number,
            },
        )
    logger.info(
        "Recorded payment of %s on invoice %s (%s outstanding)",
        amount, invoice.invoice_number, invoice.outstanding_amount,
    )
    return invoice


def cancel_invoice(invoice_id, user=None) -> Invoice:
    """Void an unpaid invoice; revenue already recognized is reversed."""
    with transaction.atomic():
        invoice = _locked_invoice(invoice_id)
        if not invoice.can_transition_to("cancelled"):
            raise InvalidStateError(
                f"Invoice {invoice.invoice_number} is {invoice.status}; cannot cancel it."
            )
        if invoice.paid_amount > 0:
            raise InvalidStateError(
                f"Invoice {invoice.invoice_number} has payments applied; cannot cancel it."
            )

        if invoice.ledger_entry_id:
            # mirror every line onto the opposite side
            reversal = [
                {
                    "account_id": line.account_id,
                    "debit_amount": line.credit_amount,
                    "credit_amount": line.debit_amount,
                    "description": line.description,
                }
                for line in invoice.ledger_entry.lines.all()
            ]
            post_entry(
                {
                    "entry_date": timezone.localdate(),
                    "description": f"Cancellation of invoice {invoice.invoice_number}",
                    "reference": invoice.invoice_number,
                },
                reversal,
                user=user,
            )

        invoice.transition_to("cancelled")
        log_action(action="cancel", instance=invoice, user=user)
    logger.info("Cancelled invoice %s", invoice.invoice_number)
    return invoice


def mark_overdue_invoices(today=None) -> int:
    """Flag sent invoices whose due date has passed; returns how many moved."""
    today = today or timezone.localdate()
    moved = 0
    with transaction.atomic():
        overdue = Invoice.objects.select_for_update().filter(status="sent", due_date__lt=today)
        for invoice in overdue:
            invoice.transition_to("overdue")
            moved += 1
    if moved:
        logger.info("Marked %s invoice(s) overdue", moved)
    return moved
