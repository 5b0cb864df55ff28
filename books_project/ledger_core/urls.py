from django.urls import path

from . import views

# Mounted under /api/
urlpatterns = [
    path("dashboard/metrics", views.dashboard_metrics_view, name="dashboard-metrics"),

    path("users", views.users_view, name="users"),
    path("users/<int:pk>", views.user_detail_view, name="user-detail"),

    path("clients", views.clients_view, name="clients"),
    path("clients/<int:pk>", views.client_detail_view, name="client-detail"),
    path("vendors", views.vendors_view, name="vendors"),
    path("vendors/<int:pk>", views.vendor_detail_view, name="vendor-detail"),

    path("accounts", views.accounts_view, name="accounts"),
    path("accounts/<int:pk>", views.account_detail_view, name="account-detail"),
    path("accounts/<int:pk>/balance", views.account_balance_view, name="account-balance"),

    path("bank-accounts", views.bank_accounts_view, name="bank-accounts"),
    path("bank-transactions", views.bank_transactions_view, name="bank-transactions"),
    path("bank-transactions/<int:pk>/reconcile", views.reconcile_view, name="bank-transaction-reconcile"),

    path("invoices", views.invoices_view, name="invoices"),
    path("invoices/<int:pk>", views.invoice_detail_view, name="invoice-detail"),
    path("invoices/<int:pk>/send", views.send_invoice_view, name="invoice-send"),
    path("invoices/<int:pk>/cancel", views.cancel_invoice_view, name="invoice-cancel"),
    path("invoices/<int:pk>/payments", views.invoice_payment_view, name="invoice-payments"),

    path("bills", views.bills_view, name="bills"),
    path("purchase-orders", views.purchase_orders_view, name="purchase-orders"),
    path("purchase-orders/<int:pk>/receive", views.receive_purchase_order_view, name="purchase-order-receive"),
    path("purchase-orders/<int:pk>/cancel", views.cancel_purchase_order_view, name="purchase-order-cancel"),

    path("expense-claims", views.expense_claims_view, name="expense-claims"),
    path("expense-claims/<int:pk>/approve", views.approve_expense_claim_view, name="expense-claim-approve"),
    path("expense-claims/<int:pk>/reject", views.reject_expense_claim_view, name="expense-claim-reject"),
    path("expense-claims/<int:pk>/pay", views.pay_expense_claim_view, name="expense-claim-pay"),

    path("journal-entries", views.journal_entries_view, name="journal-entries"),
    path("journal-entries/<int:pk>", views.journal_entry_detail_view, name="journal-entry-detail"),
    path("journal-entries/<int:pk>/post", views.post_journal_entry_view, name="journal-entry-post"),

    path("reports/profit-loss", views.profit_loss_view, name="report-profit-loss"),
    path("reports/balance-sheet", views.balance_sheet_view, name="report-balance-sheet"),
    path("reports/cash-flow", views.cash_flow_view, name="report-cash-flow"),
    path("reports/trial-balance", views.trial_balance_view, name="report-trial-balance"),
]
