"""
Wire format for the JSON API.

Python code speaks snake_case model field names; the wire speaks camelCase.
Decimal fields leave as fixed-point strings at the field's precision, so
money is always e.g. "137.50".
"""
import dataclasses
import datetime
import re
from decimal import Decimal

from django.db import models

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

# Model field → wire key, where the wire name differs from camelCase(field)
WIRE_RENAMES = {
    "Account": {"ac_type": "type"},
    "BankTransaction": {"tx_type": "type", "running_balance": "balance"},
    "ExpenseClaim": {"claimant_id": "userId"},
}

# Never leave the server
HIDDEN_FIELDS = {"password", "posting_fingerprint"}


def to_camel(name):
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_snake(name):
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def snake_keys(data):
    """Recursively convert incoming camelCase keys."""
    if isinstance(data, dict):
        return {to_snake(k): snake_keys(v) for k, v in data.items()}
    if isinstance(data, list):
        return [snake_keys(v) for v in data]
    return data


def wire_value(value, places=None):
    if isinstance(value, Decimal):
        if places is not None:
            return f"{value:.{places}f}"
        return str(value)
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return serialize_dataclass(value)
    if isinstance(value, (list, tuple)):
        return [wire_value(v) for v in value]
    if isinstance(value, dict):
        return {to_camel(k): wire_value(v) for k, v in value.items()}
    return value


def serialize_dataclass(obj):
    """Report structs → camelCase dicts; money stays 2 dp."""
    out = {}
    for f in dataclasses.fields(obj):
        value = getattr(obj, f.name)
        out[to_camel(f.name)] = wire_value(value, 2 if isinstance(value, Decimal) else None)
    # expose derived flags too
    if hasattr(obj, "is_balanced"):
        out["isBalanced"] = obj.is_balanced
    return out


def serialize_instance(instance, extra=None):
    """Concrete fields of a model instance, FKs as <name>Id."""
    renames = WIRE_RENAMES.get(instance.__class__.__name__, {})
    out = {}
    for field in instance._meta.concrete_fields:
        if field.name in HIDDEN_FIELDS:
            continue
        value = getattr(instance, field.attname)
        places = field.decimal_places if isinstance(field, models.DecimalField) else None
        key = renames.get(field.attname) or renames.get(field.name) or to_camel(field.attname)
        out[key] = wire_value(value, places)
    for key, value in (extra or {}).items():
        out[to_camel(key)] = value
    return out


# ----------------------------------------
# Per-resource shapes with nested objects
# ----------------------------------------
def serialize_user(user):
    data = serialize_instance(user)
    for key in ("isSuperuser", "isStaff", "lastLogin"):
        data.pop(key, None)
    return data


def serialize_account(account):
    return serialize_instance(account, extra={"normal_balance": account.normal_balance})


def serialize_invoice(invoice):
    return serialize_instance(invoice, extra={
        "outstanding_amount": wire_value(invoice.outstanding_amount, 2),
        "client": serialize_instance(invoice.client),
        "line_items": [serialize_instance(line) for line in invoice.lines.all()],
    })


def serialize_bill(bill):
    return serialize_instance(bill, extra={"vendor": serialize_instance(bill.vendor)})


def serialize_purchase_order(po):
    return serialize_instance(po, extra={"vendor": serialize_instance(po.vendor)})


def serialize_expense_claim(claim):
    return serialize_instance(claim, extra={
        "user": serialize_user(claim.claimant),
        "account": serialize_account(claim.account) if claim.account_id else None,
    })


def serialize_journal_entry(entry):
    return serialize_instance(entry, extra={
        "lines": [serialize_instance(line) for line in entry.lines.all()],
    })


def from_wire(model_name, data):
    """camelCase request body → model field names for `model_name`."""
    reverse = {to_snake(wire): field for field, wire in WIRE_RENAMES.get(model_name, {}).items()}
    converted = snake_keys(data)
    return {reverse.get(k, k): v for k, v in converted.items()}
