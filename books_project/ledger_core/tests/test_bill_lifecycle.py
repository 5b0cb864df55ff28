from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from ledger_core.exceptions import InvalidStateError
from ledger_core.models import AuditLog, Vendor
from ledger_core.services import (cancel_purchase_order, create_bill,
                                  create_purchase_order,
                                  receive_purchase_order)

from .helpers import d


class BillTests(TestCase):

    def setUp(self):
        self.vendor = Vendor.objects.create(name="Paper Supplies Co")

    def test_total_defaults_to_subtotal_plus_tax(self):
        bill = create_bill({
            "vendor": self.vendor, "bill_number": "B-1",
            "issue_date": d("2024-07-01"), "due_date": d("2024-07-31"),
            "subtotal": "200", "tax_amount": "20",
        })
        self.assertEqual(bill.total_amount, Decimal("220.00"))
        self.assertEqual(bill.status, "pending")
        self.assertEqual(bill.outstanding_amount, Decimal("220.00"))

    def test_inconsistent_total_is_rejected(self):
        with self.assertRaises(ValidationError):
            create_bill({
                "vendor": self.vendor,
                "issue_date": d("2024-07-01"), "due_date": d("2024-07-31"),
                "subtotal": "200", "tax_amount": "20", "total_amount": "250",
            })

    def test_paid_amount_cannot_exceed_total(self):
        with self.assertRaises(ValidationError):
            create_bill({
                "vendor": self.vendor,
                "issue_date": d("2024-07-01"), "due_date": d("2024-07-31"),
                "subtotal": "100", "paid_amount": "150",
            })

    def test_paid_bill_must_be_settled(self):
        with self.assertRaises(ValidationError):
            create_bill({
                "vendor": self.vendor, "status": "paid",
                "issue_date": d("2024-07-01"), "due_date": d("2024-07-31"),
                "subtotal": "100", "paid_amount": "40",
            })


class PurchaseOrderTests(TestCase):

    def setUp(self):
        self.vendor = Vendor.objects.create(name="Paper Supplies Co")
        self.po = create_purchase_order({
            "vendor": self.vendor, "po_number": "PO-1",
            "order_date": d("2024-07-01"), "expected_date": d("2024-07-10"),
            "subtotal": "80", "tax_amount": "8",
        })

    def test_created_pending_with_total(self):
        self.assertEqual(self.po.status, "pending")
        self.assertEqual(self.po.total_amount, Decimal("88.00"))

    def test_receive_then_cancel_is_refused(self):
        received = receive_purchase_order(self.po.pk)
        self.assertEqual(received.status, "received")
        with self.assertRaises(InvalidStateError):
            cancel_purchase_order(self.po.pk)
        self.po.refresh_from_db()
        self.assertEqual(self.po.status, "received")
        self.assertEqual(AuditLog.objects.for_object(self.po).count(), 1)

    def test_cancel_pending(self):
        self.assertEqual(cancel_purchase_order(self.po.pk).status, "cancelled")

    def test_expected_date_not_before_order_date(self):
        with self.assertRaises(ValidationError):
            create_purchase_order({
                "vendor": self.vendor, "po_number": "PO-2",
                "order_date": d("2024-07-10"), "expected_date": d("2024-07-01"),
            })
