import logging
from collections import defaultdict
from decimal import Decimal
from django.db import transaction
from django.db.models import F

from ..exceptions import AccountNotFound
from ..models import Account, JournalLine

logger = logging.getLogger(__name__)


# ----------------------------
# Cached balance maintenance
# ----------------------------
def apply_posting_to_balances(lines):
    """
    Move cached balances for a set of journal lines being posted.
    Must run inside the posting transaction. Lines need `account` loaded.
    """
    deltas = defaultdict(lambda: Decimal("0.00"))
    for line in lines:
        deltas[line.account_id] += line.account.balance_delta(
            line.debit_amount, line.credit_amount
        )

    # Lock in primary-key order so concurrent postings touching
    # overlapping accounts always queue in the same order
    list(
        Account.objects.select_for_update()
        .filter(pk__in=deltas.keys())
        .order_by("pk")
        .values_list("pk", flat=True)
    )
    for account_id in sorted(deltas):
        # F() keeps the increment in the database, never read-modify-write
        Account.objects.filter(pk=account_id).update(
            balance=F("balance") + deltas[account_id]
        )


def compute_balance(account, as_of=None):
    """Full recomputation from posted lines, in the account's own sign convention."""
    lines = JournalLine.objects.filter(account_id=account.pk)
    lines = lines.as_of(as_of) if as_of is not None else lines.posted()
    debit, credit = lines.totals()
    return account.balance_delta(debit, credit)


def descendant_ids(account_id):
    """All ids below `account_id` in the account tree, walked level by level."""
    found = []
    frontier = [account_id]
    while frontier:
        children = list(
            Account.objects.filter(parent_id__in=frontier)
            .exclude(pk__in=found + [account_id])
            .values_list("pk", flat=True)
        )
        found.extend(children)
        frontier = children
    return found


# ----------------------------
# Balance queries
# ----------------------------
def get_account_balance(account_id, as_of=None, include_children=False) -> Decimal:
    """
    Balance of one account in its normal-balance sign convention.

    as_of=None          → cached running balance
    as_of=date          → recomputed from posted lines dated on or before `as_of`
    include_children    → add the subtree; a child whose normal side differs
                          from the root's is subtracted (contra accounts)
    """
    try:
        account = Account.objects.get(pk=account_id)
    except (Account.DoesNotExist, ValueError, TypeError):
        raise AccountNotFound(f"Account {account_id} not found")

    def own_balance(acc):
        if as_of is None:
            return acc.balance
        return compute_balance(acc, as_of)

    total = own_balance(account)
    if include_children:
        for child in Account.objects.filter(pk__in=descendant_ids(account.pk)):
            child_balance = own_balance(child)
            if child.normal_balance == account.normal_balance:
                total += child_balance
            else:
                total -= child_balance
    return total


# ----------------------------
# Repair
# ----------------------------
def recompute_balance(account) -> Decimal:
    """Reset the cached balance of `account` from its posted lines."""
    with transaction.atomic():
        locked = Account.objects.select_for_update().get(pk=account.pk)
        expected = compute_balance(locked)
        if locked.balance != expected:
            logger.warning(
                "Cached balance drift on account %s: cached=%s recomputed=%s",
                locked.code, locked.balance, expected,
            )
            Account.objects.filter(pk=locked.pk).update(balance=expected)
    account.balance = expected
    return expected


def recompute_all_balances():
    """Rebuild every cached balance; returns the number of corrected accounts."""
    corrected = 0
    for account in Account.objects.order_by("pk"):
        before = account.balance
        if recompute_balance(account) != before:
            corrected += 1
    logger.info("Recomputed account balances, %s corrected", corrected)
    return corrected
