from .balances import (get_account_balance, recompute_all_balances,
                       recompute_balance)
from .banking import reconcile_transaction, record_bank_transaction
from .dashboard import dashboard_metrics
from .expenses import (approve_expense_claim, pay_expense_claim,
                       reject_expense_claim)
from .invoicing import (calculate_document_totals, cancel_invoice,
                        create_invoice, mark_overdue_invoices,
                        record_invoice_payment, send_invoice)
from .posting import create_draft_entry, post_draft_entry, post_entry
from .purchasing import (cancel_purchase_order, create_bill,
                         create_purchase_order, receive_purchase_order)
from .reports import balance_sheet, cash_flow, profit_and_loss, trial_balance
