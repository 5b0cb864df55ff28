import datetime
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from ledger_core.models import Account, BankAccount, Client, JournalEntry
from ledger_core.services import create_invoice, post_entry, send_invoice

User = get_user_model()

# code, name, type, sub type
DEMO_CHART = [
    ("1000", "Cash at Bank", "asset", "current_asset"),
    ("1200", "Accounts Receivable", "asset", "current_asset"),
    ("1500", "Office Equipment", "asset", "fixed_asset"),
    ("2000", "Accounts Payable", "liability", "current_liability"),
    ("2200", "Sales Tax Payable", "liability", "current_liability"),
    ("2500", "Bank Loan", "liability", "long_term_liability"),
    ("3000", "Owner's Capital", "equity", "owner_equity"),
    ("4000", "Service Revenue", "revenue", "operating_revenue"),
    ("5000", "Rent Expense", "expense", "operating_expense"),
    ("5100", "Travel Expense", "expense", "operating_expense"),
]


class Command(BaseCommand):
    help = "Seed a demo chart of accounts, bank account, client and a few posted entries."

    # Define command-line arguments
    def add_arguments(self, parser):
        parser.add_argument(
            "--username", default="demo", help="Username for the demo user."
        )
        parser.add_argument(
            "--password", default="demo123", help="Password for the demo user."
        )

    @transaction.atomic
    def handle(self, *args, **options):
        username = options["username"]
        password = options["password"]

        # 1. Create user
        user, created = User.objects.get_or_create(
            username=username,
            defaults={"email": f"{username}@example.com", "role": "approver"},
        )
        if created:
            user.set_password(password)
            user.save()
        self.stdout.write(self.style.SUCCESS(f"Demo user: {user.username}"))

        # 2. Chart of accounts
        accounts = {}
        for code, name, ac_type, sub_type in DEMO_CHART:
            accounts[code], _ = Account.objects.get_or_create(
                code=code,
                defaults={"name": name, "ac_type": ac_type, "sub_type": sub_type},
            )
        self.stdout.write(self.style.SUCCESS(f"Chart of accounts: {len(accounts)} accounts"))

        # 3. Bank account mirrored by the cash ledger account
        BankAccount.objects.get_or_create(
            name="Operating Account",
            defaults={
                "bank_name": "Demo Bank",
                "account_number": "000123456789",
                "ledger_account": accounts["1000"],
            },
        )

        # Posted entries are never edited, so only seed them once
        if JournalEntry.objects.filter(reference="demo-seed").exists():
            self.stdout.write(self.style.WARNING("Demo entries already present, skipping."))
            return

        # 4. Opening entries
        today = datetime.date.today()
        month_start = today.replace(day=1)
        seeds = [
            ("Owner investment", [
                {"account_id": accounts["1000"].pk, "debit_amount": "10000.00"},
                {"account_id": accounts["3000"].pk, "credit_amount": "10000.00"},
            ]),
            ("Bank loan drawn", [
                {"account_id": accounts["1000"].pk, "debit_amount": "5000.00"},
                {"account_id": accounts["2500"].pk, "credit_amount": "5000.00"},
            ]),
            ("Laptop purchase", [
                {"account_id": accounts["1500"].pk, "debit_amount": "1800.00"},
                {"account_id": accounts["1000"].pk, "credit_amount": "1800.00"},
            ]),
            ("Office rent", [
                {"account_id": accounts["5000"].pk, "debit_amount": "1200.00"},
                {"account_id": accounts["1000"].pk, "credit_amount": "1200.00"},
            ]),
            ("Cash sale", [
                {"account_id": accounts["1000"].pk, "debit_amount": "2500.00"},
                {"account_id": accounts["4000"].pk, "credit_amount": "2500.00"},
            ]),
        ]
        for description, lines in seeds:
            post_entry(
                {"entry_date": month_start, "description": description, "reference": "demo-seed"},
                lines,
                user=user,
            )
        self.stdout.write(self.style.SUCCESS(f"Posted {len(seeds)} journal entries"))

        # 5. Client with a sent invoice
        client, _ = Client.objects.get_or_create(
            name="Acme Pty Ltd", defaults={"email": "accounts@acme.example"}
        )
        invoice = create_invoice(
            {
                "invoice_number": f"INV-{today:%Y%m}-001",
                "client": client,
                "issue_date": today,
                "due_date": today + datetime.timedelta(days=client.payment_terms),
            },
            [
                {"description": "Consulting", "quantity": 2, "rate": Decimal("50.00")},
                {"description": "Support", "quantity": 1, "rate": Decimal("25.00")},
            ],
        )
        send_invoice(invoice.pk, user=user)
        self.stdout.write(self.style.SUCCESS(f"Sent invoice {invoice.invoice_number}"))
