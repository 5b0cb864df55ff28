from .account import Account
from .auditlog import AuditLog
from .banking import BankAccount, BankTransaction
from .bill import Bill
from .client import Client
from .expense import ExpenseClaim
from .invoice import Invoice, InvoiceLine
from .journal import JournalEntry, JournalLine
from .purchase_order import PurchaseOrder
from .user import User
from .vendor import Vendor
