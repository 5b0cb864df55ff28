import logging
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from ..exceptions import AlreadyReconciled
from ..models import BankAccount, BankTransaction
from ..models.journal import to_money, to_pk
from .audit_helper import log_action

logger = logging.getLogger(__name__)


# ----------------------------
# Bank transaction workflows
# ----------------------------
def record_bank_transaction(data, user=None) -> BankTransaction:
    """
    Store a bank statement line and move the bank account balance
    (credit adds, debit subtracts). The transaction keeps the resulting
    running balance.
    """
    with transaction.atomic():
        try:
            bank_account = BankAccount.objects.select_for_update().get(
                pk=data.get("bank_account_id")
            )
        except (BankAccount.DoesNotExist, ValueError, TypeError):
            raise ValidationError(f"Bank account {data.get('bank_account_id')} does not exist.")

        tx = BankTransaction(
            bank_account=bank_account,
            transaction_date=data.get("transaction_date"),
            description=data.get("description"),
            amount=to_money(data.get("amount")),
            tx_type=data.get("tx_type"),
            imported_from=data.get("imported_from") or "manual",
        )
        # validate before the balance moves
        tx.full_clean(exclude=["running_balance"])

        BankAccount.objects.filter(pk=bank_account.pk).update(
            balance=F("balance") + tx.signed_amount
        )
        bank_account.refresh_from_db(fields=["balance"])
        tx.running_balance = bank_account.balance
        tx.save()

    logger.info(
        "Recorded %s of %s on bank account %s, balance now %s",
        tx.tx_type, tx.amount, bank_account.name, tx.running_balance,
    )
    return tx


def reconcile_transaction(transaction_id, matched_transaction_id=None, user=None) -> BankTransaction:
    """
    Mark a bank transaction reconciled, exactly once.
    A second call raises AlreadyReconciled and leaves reconciled_at alone.
    """
    with transaction.atomic():
        tx = BankTransaction.objects.select_for_update().get(pk=transaction_id)
        if tx.is_reconciled:
            raise AlreadyReconciled(
                f"Bank transaction {tx.pk} was already reconciled at {tx.reconciled_at:%Y-%m-%d %H:%M}."
            )

        if matched_transaction_id is not None:
            matched_transaction_id = to_pk(matched_transaction_id, "Matched transaction")
            if matched_transaction_id == tx.pk:
                raise ValidationError("A transaction cannot be matched to itself.")
            if not BankTransaction.objects.filter(pk=matched_transaction_id).exists():
                raise ValidationError(
                    f"Matched transaction {matched_transaction_id} does not exist."
                )
            tx.matched_transaction_id = matched_transaction_id

        tx.is_reconciled = True
        tx.reconciled_at = timezone.now()
        tx.save()

        log_action(
            action="reconcile",
            instance=tx,
            user=user,
            changes={"matched_transaction_id": tx.matched_transaction_id},
        )
    logger.info("Reconciled bank transaction %s", tx.pk)
    return tx
