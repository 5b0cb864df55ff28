from celery import shared_task


@shared_task  # register this function as a Celery task
def recompute_account_balances():
    """Rebuild every cached Account.balance from posted journal lines."""
    # import services lazily to avoid circular imports at module import time
    from .services.balances import recompute_all_balances

    return recompute_all_balances()


@shared_task
def flag_overdue_invoices():
    """Move sent invoices past their due date to overdue."""
    from .services.invoicing import mark_overdue_invoices

    return mark_overdue_invoices()
