import logging
from django.db import transaction

from ..models import Bill, PurchaseOrder
from ..models.journal import to_money
from .audit_helper import log_action

logger = logging.getLogger(__name__)

BILL_FIELDS = (
    "bill_number", "vendor", "vendor_id", "issue_date", "due_date", "status",
    "subtotal", "tax_amount", "total_amount", "paid_amount", "notes",
)
PO_FIELDS = (
    "po_number", "vendor", "vendor_id", "order_date", "expected_date",
    "subtotal", "tax_amount", "total_amount", "notes",
)


def with_total(data):
    """Fill total_amount from subtotal + tax when the caller left it out."""
    data = dict(data)
    subtotal = to_money(data.get("subtotal"))
    tax = to_money(data.get("tax_amount"))
    data["subtotal"], data["tax_amount"] = subtotal, tax
    if data.get("total_amount") in (None, ""):
        data["total_amount"] = subtotal + tax
    else:
        data["total_amount"] = to_money(data["total_amount"])
    return data


# ------------------------------------
# Bill workflows
# ------------------------------------
def create_bill(bill_data) -> Bill:
    data = with_total(bill_data)
    bill = Bill(**{k: v for k, v in data.items() if k in BILL_FIELDS})
    bill.save()  # full_clean checks total == subtotal + tax and paid <= total
    logger.info("Created bill %s, total %s", bill.bill_number or bill.pk, bill.total_amount)
    return bill


# ------------------------------------
# Purchase order workflows
# ------------------------------------
def create_purchase_order(po_data) -> PurchaseOrder:
    data = with_total(po_data)
    po = PurchaseOrder(
        status="pending",
        **{k: v for k, v in data.items() if k in PO_FIELDS},
    )
    po.save()
    logger.info("Created purchase order %s, total %s", po.po_number, po.total_amount)
    return po


def _move_purchase_order(po_id, new_status, user=None):
    with transaction.atomic():
        po = PurchaseOrder.objects.select_for_update().get(pk=po_id)
        old_status = po.status
        po.transition_to(new_status)
        log_action(
            action=new_status,
            instance=po,
            user=user,
            changes={"status": [old_status, new_status]},
        )
    logger.info("Purchase order %s %s", po.po_number, new_status)
    return po


def receive_purchase_order(po_id, user=None) -> PurchaseOrder:
    """pending → received"""
    return _move_purchase_order(po_id, "received", user=user)


def cancel_purchase_order(po_id, user=None) -> PurchaseOrder:
    """pending → cancelled"""
    return _move_purchase_order(po_id, "cancelled", user=user)
