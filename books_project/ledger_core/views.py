import json
import logging
from functools import wraps

from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.db import transaction
from django.http import Http404, JsonResponse
from django.shortcuts import get_object_or_404
from django.utils.dateparse import parse_date
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from . import forms, services
from .exceptions import (ConflictError, InvalidStateError, NotFoundError,
                         PersistenceError, UnbalancedJournalError)
from .models import (Account, BankAccount, BankTransaction, Bill, Client,
                     ExpenseClaim, Invoice, JournalEntry, PurchaseOrder, User,
                     Vendor)
from .models.journal import to_pk
from .serializers import (from_wire, serialize_account, serialize_bill,
                          serialize_dataclass, serialize_expense_claim,
                          serialize_instance, serialize_invoice,
                          serialize_journal_entry, serialize_purchase_order,
                          serialize_user, to_camel)
from .services.purchasing import with_total

logger = logging.getLogger(__name__)


# ----------------------------------------
# Error translation at the HTTP boundary
# ----------------------------------------
def _validation_payload(exc):
    if hasattr(exc, "error_dict"):
        errors = {to_camel(field): msgs for field, msgs in exc.message_dict.items()}
        message = "; ".join(
            f"{field}: {' '.join(msgs)}" if field != "__all__" else " ".join(msgs)
            for field, msgs in exc.message_dict.items()
        )
        return {"message": message, "errors": errors}
    return {"message": " ".join(exc.messages)}


def error_response(exc):
    """Map ledger exceptions onto {"message", "kind"} + status."""
    if isinstance(exc, ValidationError):
        payload = _validation_payload(exc)
        if isinstance(exc, UnbalancedJournalError):
            payload["kind"] = "unbalanced_entry"
        elif isinstance(exc, InvalidStateError):
            payload["kind"] = "invalid_state"
        else:
            payload["kind"] = "validation"
        return JsonResponse(payload, status=400)
    if isinstance(exc, ConflictError):
        return JsonResponse({"message": str(exc), "kind": exc.kind}, status=400)
    if isinstance(exc, NotFoundError):
        return JsonResponse({"message": str(exc), "kind": exc.kind}, status=404)
    if isinstance(exc, (ObjectDoesNotExist, Http404)):
        return JsonResponse({"message": str(exc) or "Not found", "kind": "not_found"}, status=404)
    if isinstance(exc, PersistenceError):
        return JsonResponse({"message": str(exc), "kind": exc.kind}, status=500)
    return JsonResponse({"message": "Internal server error", "kind": "internal"}, status=500)


def api_view(*methods):
    """JSON endpoint: method check, no CSRF (token-less API), errors → JSON."""
    def decorator(view):
        @wraps(view)
        def wrapper(request, *args, **kwargs):
            try:
                return view(request, *args, **kwargs)
            except (ValidationError, ConflictError, NotFoundError,
                    ObjectDoesNotExist, Http404) as exc:
                return error_response(exc)
            except PersistenceError as exc:
                logger.error("Persistence failure in %s: %s", view.__name__, exc)
                return error_response(exc)
            except Exception as exc:
                logger.exception("Unhandled error in %s", view.__name__)
                return error_response(exc)
        return csrf_exempt(require_http_methods(list(methods))(wrapper))
    return decorator


# ----------------------------------------
# Request helpers
# ----------------------------------------
def read_json(request, model_name=""):
    """Request body → snake_case dict (with per-model wire renames)."""
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except ValueError:
        raise ValidationError("Request body is not valid JSON.")
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object.")
    return from_wire(model_name, data)


def query_date(request, name, required=True):
    raw = request.GET.get(name)
    if not raw:
        if required:
            raise ValidationError(f"Query parameter '{name}' is required.")
        return None
    try:
        value = parse_date(raw)
    except ValueError:
        value = None
    if value is None:
        raise ValidationError(f"Query parameter '{name}' must be a YYYY-MM-DD date.")
    return value


def acting_user(request):
    """Authenticated user for audit stamps, else None (system action)."""
    user = getattr(request, "user", None)
    return user if user is not None and user.is_authenticated else None


def validated(form):
    if not form.is_valid():
        raise ValidationError(form.errors.as_data())
    return form


def as_list(items, serializer=serialize_instance):
    return JsonResponse([serializer(item) for item in items], safe=False)


def _crud_list(request, model, form_class, serializer, queryset):
    if request.method == "GET":
        return as_list(queryset, serializer)
    form = validated(forms.bind(form_class, read_json(request, model.__name__)))
    return JsonResponse(serializer(form.save()))


def _crud_detail(request, pk, model, form_class, serializer, soft_delete=False):
    obj = get_object_or_404(model, pk=pk)
    if request.method == "GET":
        return JsonResponse(serializer(obj))
    if request.method == "PUT":
        form = validated(forms.bind(form_class, read_json(request, model.__name__), instance=obj))
        return JsonResponse(serializer(form.save()))
    # DELETE
    label = model._meta.verbose_name.capitalize()
    if soft_delete:
        # Deactivate, keep history
        obj.is_active = False
        obj.save()
    else:
        obj.delete()
    return JsonResponse({"message": f"{label} deleted successfully"})


# ----------------------------------------
# Dashboard & users
# ----------------------------------------
@api_view("GET")
def dashboard_metrics_view(request):
    metrics = services.dashboard_metrics()
    return JsonResponse(serialize_dataclass(metrics))


@api_view("POST")
def users_view(request):
    form = validated(forms.bind(forms.UserForm, read_json(request, "User")))
    return JsonResponse(serialize_user(form.save()))


@api_view("GET")
def user_detail_view(request, pk):
    return JsonResponse(serialize_user(get_object_or_404(User, pk=pk)))


# ----------------------------------------
# Clients, vendors, chart of accounts
# ----------------------------------------
@api_view("GET", "POST")
def clients_view(request):
    return _crud_list(request, Client, forms.ClientForm, serialize_instance,
                      Client.objects.active())


@api_view("GET", "PUT", "DELETE")
def client_detail_view(request, pk):
    return _crud_detail(request, pk, Client, forms.ClientForm, serialize_instance,
                        soft_delete=True)


@api_view("GET", "POST")
def vendors_view(request):
    return _crud_list(request, Vendor, forms.VendorForm, serialize_instance,
                      Vendor.objects.active())


@api_view("GET", "PUT", "DELETE")
def vendor_detail_view(request, pk):
    return _crud_detail(request, pk, Vendor, forms.VendorForm, serialize_instance,
                        soft_delete=True)


@api_view("GET", "POST")
def accounts_view(request):
    return _crud_list(request, Account, forms.AccountForm, serialize_account,
                      Account.objects.active())


@api_view("GET", "PUT", "DELETE")
def account_detail_view(request, pk):
    return _crud_detail(request, pk, Account, forms.AccountForm, serialize_account,
                        soft_delete=True)


@api_view("GET")
def account_balance_view(request, pk):
    as_of = query_date(request, "asOf", required=False)
    include_children = request.GET.get("includeChildren", "").lower() in ("1", "true", "yes")
    balance = services.get_account_balance(pk, as_of=as_of, include_children=include_children)
    return JsonResponse({
        "accountId": pk,
        "asOf": as_of.isoformat() if as_of else None,
        "includeChildren": include_children,
        "balance": f"{balance:.2f}",
    })


# ----------------------------------------
# Banking
# ----------------------------------------
@api_view("GET", "POST")
def bank_accounts_view(request):
    return _crud_list(request, BankAccount, forms.BankAccountForm, serialize_instance,
                      BankAccount.objects.active())


@api_view("GET", "POST")
def bank_transactions_view(request):
    if request.method == "GET":
        txs = BankTransaction.objects.all()
        bank_account_id = request.GET.get("bankAccountId")
        if bank_account_id:
            txs = txs.filter(bank_account_id=to_pk(bank_account_id, "bankAccountId"))
        return as_list(txs)
    form = validated(forms.bind(forms.BankTransactionForm, read_json(request, "BankTransaction")))
    data = dict(form.cleaned_data, bank_account_id=form.cleaned_data["bank_account"].pk)
    return JsonResponse(serialize_instance(services.record_bank_transaction(data, user=acting_user(request))))


@api_view("PUT")
def reconcile_view(request, pk):
    data = read_json(request)
    tx = services.reconcile_transaction(
        pk, matched_transaction_id=data.get("matched_transaction_id"), user=acting_user(request)
    )
    return JsonResponse(serialize_instance(tx))


# ----------------------------------------
# Invoices
# ----------------------------------------
@api_view("GET", "POST")
def invoices_view(request):
    if request.method == "GET":
        invoices = Invoice.objects.select_related("client").prefetch_related("lines")
        return as_list(invoices, serialize_invoice)

    data = read_json(request, "Invoice")
    line_items = data.pop("line_items", None) or []
    if line_items:
        # totals come from the lines
        totals = services.calculate_document_totals(line_items, data.get("tax_rate"))
        data.update(subtotal=totals.subtotal, tax_amount=totals.tax_amount,
                    total_amount=totals.total_amount)
    else:
        data = with_total(data)
    form = validated(forms.bind(forms.InvoiceForm, data))
    invoice = services.create_invoice(
        form.cleaned_data, line_items, tax_rate=form.cleaned_data.get("tax_rate")
    )
    return JsonResponse(serialize_invoice(invoice))


@api_view("GET", "PUT", "DELETE")
def invoice_detail_view(request, pk):
    invoice = get_object_or_404(Invoice, pk=pk)
    if request.method == "GET":
        return JsonResponse(serialize_invoice(invoice))
    if request.method == "PUT":
        form_class = forms.InvoiceForm if invoice.status == "draft" else forms.IssuedInvoiceForm
        data = read_json(request, "Invoice")
        data.pop("line_items", None)
        form = validated(forms.bind(form_class, data, instance=invoice))
        with transaction.atomic():
            invoice = form.save()
            if invoice.status == "draft" and invoice.lines.exists():
                # line totals win over a hand-edited header
                invoice.recalc_totals()
                invoice.save()
        return JsonResponse(serialize_invoice(invoice))
    invoice.delete()
    return JsonResponse({"message": "Invoice deleted successfully"})


@api_view("PUT")
def send_invoice_view(request, pk):
    return JsonResponse(serialize_invoice(services.send_invoice(pk, user=acting_user(request))))


@api_view("PUT")
def cancel_invoice_view(request, pk):
    return JsonResponse(serialize_invoice(services.cancel_invoice(pk, user=acting_user(request))))


@api_view("PUT")
def invoice_payment_view(request, pk):
    data = read_json(request)
    if data.get("amount") in (None, ""):
        raise ValidationError("Payment amount is required.")
    if not data.get("deposit_account_id"):
        raise ValidationError("Deposit account is required.")
    payment_date = parse_date(data["payment_date"]) if data.get("payment_date") else None
    invoice = services.record_invoice_payment(
        pk, data["amount"], data["deposit_account_id"],
        payment_date=payment_date, user=acting_user(request),
    )
    return JsonResponse(serialize_invoice(invoice))


# ----------------------------------------
# Bills & purchase orders
# ----------------------------------------
@api_view("GET", "POST")
def bills_view(request):
    if request.method == "GET":
        return as_list(Bill.objects.select_related("vendor"), serialize_bill)
    form = validated(forms.bind(forms.BillForm, with_total(read_json(request, "Bill"))))
    return JsonResponse(serialize_bill(services.create_bill(form.cleaned_data)))


@api_view("GET", "POST")
def purchase_orders_view(request):
    if request.method == "GET":
        return as_list(PurchaseOrder.objects.select_related("vendor"), serialize_purchase_order)
    data = with_total(read_json(request, "PurchaseOrder"))
    form = validated(forms.bind(forms.PurchaseOrderForm, data))
    return JsonResponse(serialize_purchase_order(services.create_purchase_order(form.cleaned_data)))


@api_view("PUT")
def receive_purchase_order_view(request, pk):
    po = services.receive_purchase_order(pk, user=acting_user(request))
    return JsonResponse(serialize_purchase_order(po))


@api_view("PUT")
def cancel_purchase_order_view(request, pk):
    po = services.cancel_purchase_order(pk, user=acting_user(request))
    return JsonResponse(serialize_purchase_order(po))


# ----------------------------------------
# Expense claims
# ----------------------------------------
@api_view("GET", "POST")
def expense_claims_view(request):
    if request.method == "GET":
        claims = ExpenseClaim.objects.select_related("claimant", "account")
        return as_list(claims, serialize_expense_claim)
    form = validated(forms.bind(forms.ExpenseClaimForm, read_json(request, "ExpenseClaim")))
    return JsonResponse(serialize_expense_claim(form.save()))


@api_view("PUT")
def approve_expense_claim_view(request, pk):
    approver_id = read_json(request).get("approver_id")
    if not approver_id:
        raise ValidationError("Approver ID is required")
    return JsonResponse(serialize_expense_claim(services.approve_expense_claim(pk, approver_id)))


@api_view("PUT")
def reject_expense_claim_view(request, pk):
    reason = read_json(request).get("reason")
    claim = services.reject_expense_claim(pk, reason=reason, user=acting_user(request))
    return JsonResponse(serialize_expense_claim(claim))


@api_view("PUT")
def pay_expense_claim_view(request, pk):
    data = read_json(request)
    payment_date = parse_date(data["payment_date"]) if data.get("payment_date") else None
    claim = services.pay_expense_claim(
        pk, payment_account_id=data.get("payment_account_id"),
        payment_date=payment_date, user=acting_user(request),
    )
    return JsonResponse(serialize_expense_claim(claim))


# ----------------------------------------
# Journal entries
# ----------------------------------------
@api_view("GET", "POST")
def journal_entries_view(request):
    if request.method == "GET":
        entries = JournalEntry.objects.prefetch_related("lines")
        status = request.GET.get("status")
        if status:
            entries = entries.filter(status=status)
        return as_list(entries, serialize_journal_entry)

    data = read_json(request, "JournalEntry")
    line_items = data.pop("lines", None) or data.pop("line_items", None) or []
    if data.get("status") == "draft":
        entry = services.create_draft_entry(data, line_items, user=acting_user(request))
    else:
        entry = services.post_entry(data, line_items, user=acting_user(request))
    return JsonResponse(serialize_journal_entry(entry))


@api_view("GET")
def journal_entry_detail_view(request, pk):
    return JsonResponse(serialize_journal_entry(get_object_or_404(JournalEntry, pk=pk)))


@api_view("PUT")
def post_journal_entry_view(request, pk):
    return JsonResponse(serialize_journal_entry(services.post_draft_entry(pk, user=acting_user(request))))


# ----------------------------------------
# Reports
# ----------------------------------------
@api_view("GET")
def profit_loss_view(request):
    report = services.profit_and_loss(
        query_date(request, "startDate"), query_date(request, "endDate")
    )
    return JsonResponse(serialize_dataclass(report))


@api_view("GET")
def balance_sheet_view(request):
    return JsonResponse(serialize_dataclass(services.balance_sheet(query_date(request, "date"))))


@api_view("GET")
def cash_flow_view(request):
    report = services.cash_flow(
        query_date(request, "startDate"), query_date(request, "endDate")
    )
    return JsonResponse(serialize_dataclass(report))


@api_view("GET")
def trial_balance_view(request):
    return JsonResponse(serialize_dataclass(services.trial_balance(query_date(request, "date"))))
