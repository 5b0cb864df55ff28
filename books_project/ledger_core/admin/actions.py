from django.contrib import admin, messages
from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _

from ..exceptions import ConflictError
from ..services import (approve_expense_claim, post_draft_entry,
                        receive_purchase_order, reconcile_transaction,
                        reject_expense_claim, send_invoice)

# ---------- Admin actions ----------
# Every action goes through the service layer so admins follow the same
# rules (locks, state machines, audit log) as API callers.


def _run_each(modeladmin, request, queryset, operation, label):
    """Apply `operation` to every selected row, one transaction per row."""
    success = 0
    failures = 0
    for obj in queryset:
        try:
            operation(obj)
            success += 1
        except (ValidationError, ConflictError) as exc:
            failures += 1
            modeladmin.message_user(
                request,
                _("Could not %(label)s %(obj)s: %(err)s") % {"label": label, "obj": obj, "err": exc},
                level=messages.ERROR,
            )

    modeladmin.message_user(
        request,
        _("%(label)s: %(success)d done, %(failures)d failed.") % {
            "label": label.capitalize(),
            "success": success,
            "failures": failures,
        },
        level=messages.SUCCESS if failures == 0 else messages.WARNING,
    )


@admin.action(description=_("Post selected journal entries (make immutable)"))
def post_journal_entries(modeladmin, request, queryset):
    # posted entries are skipped, re-posting them is a no-op anyway
    _run_each(
        modeladmin, request, queryset.filter(status="draft"),
        lambda je: post_draft_entry(je.pk, user=request.user),
        "post",
    )


@admin.action(description=_("Approve selected expense claims"))
def approve_expense_claims(modeladmin, request, queryset):
    _run_each(
        modeladmin, request, queryset,
        lambda claim: approve_expense_claim(claim.pk, request.user.pk),
        "approve",
    )


@admin.action(description=_("Reject selected expense claims"))
def reject_expense_claims(modeladmin, request, queryset):
    _run_each(
        modeladmin, request, queryset,
        lambda claim: reject_expense_claim(claim.pk, user=request.user),
        "reject",
    )


@admin.action(description=_("Mark selected bank transactions as reconciled"))
def reconcile_bank_transactions(modeladmin, request, queryset):
    _run_each(
        modeladmin, request, queryset,
        lambda tx: reconcile_transaction(tx.pk, user=request.user),
        "reconcile",
    )


@admin.action(description=_("Send selected invoices"))
def send_invoices(modeladmin, request, queryset):
    """draft → sent, recognizing the receivable in the ledger"""
    _run_each(
        modeladmin, request, queryset,
        lambda inv: send_invoice(inv.pk, user=request.user),
        "send",
    )


@admin.action(description=_("Mark selected purchase orders as received"))
def receive_purchase_orders(modeladmin, request, queryset):
    _run_each(
        modeladmin, request, queryset,
        lambda po: receive_purchase_order(po.pk, user=request.user),
        "receive",
    )
