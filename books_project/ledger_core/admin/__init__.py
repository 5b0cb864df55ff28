from .account import AccountAdmin
from .actions import (approve_expense_claims, post_journal_entries,
                      receive_purchase_orders, reconcile_bank_transactions,
                      reject_expense_claims, send_invoices)
from .auditlog import AuditLogAdmin
from .banking import BankAccountAdmin, BankTransactionAdmin
from .bill import BillAdmin, PurchaseOrderAdmin, VendorAdmin
from .expense import ExpenseClaimAdmin
from .forms import (JournalLineInlineForm, UserAdminChangeForm,
                    UserAdminCreationForm)
from .inlines import InvoiceLineInline, JournalLineInline
from .invoice import ClientAdmin, InvoiceAdmin
from .journal import JournalEntryAdmin, JournalLineAdmin
from .user import UserAdmin
