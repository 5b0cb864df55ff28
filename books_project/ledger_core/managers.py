from decimal import Decimal

from django.contrib.auth.base_user import BaseUserManager
from django.db import models


# -----------------------------------------
# Soft-delete filtering shared by
# accounts, contacts and bank accounts
# -----------------------------------------
class ActiveQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)  # only fetch active records


class ActiveManager(models.Manager.from_queryset(ActiveQuerySet)):
    pass
    # every model using ActiveManager can call:
    # Account.objects.active()


# -----------------------------------------
# Journal line scoping used by every
# balance and report query
# -----------------------------------------
class JournalLineQuerySet(models.QuerySet):
    def posted(self):
        # only lines whose parent entry is final count towards balances
        return self.filter(journal__status="posted")

    def as_of(self, date):
        return self.posted().filter(journal__entry_date__lte=date)

    def between(self, start_date, end_date):
        return self.posted().filter(
            journal__entry_date__gte=start_date,
            journal__entry_date__lte=end_date,
        )

    def totals(self):
        """Return (debit, credit) sums, zero when there are no rows"""
        aggs = self.aggregate(
            total_debit=models.Sum("debit_amount"),
            total_credit=models.Sum("credit_amount"),
        )
        return (
            aggs["total_debit"] or Decimal("0.00"),
            aggs["total_credit"] or Decimal("0.00"),
        )


class JournalLineManager(models.Manager.from_queryset(JournalLineQuerySet)):
    pass


# -----------------------------------------
# Audit trail lookups
# -----------------------------------------
class AuditLogQuerySet(models.QuerySet):
    def for_object(self, instance):
        """History of one model instance, newest first."""
        return self.filter(
            object_type=instance.__class__.__name__, object_id=str(instance.pk)
        )


class AuditLogManager(models.Manager.from_queryset(AuditLogQuerySet)):
    pass


class UserManager(BaseUserManager):
    """ Enforce rules around how users are created """

    use_in_migrations = True  # Allow Django to serialize this manager in migrations

    # Private helper method used by both `create_user` and `create_superuser`
    def _create_user(self, username, email, password, **extra_fields):
        if not username:  # Username is required
            raise ValueError("The given username must be set")
        email = self.normalize_email(email)  # lowercase the domain part
        user = self.model(username=username, email=email, **extra_fields)
        user.set_password(password)  # Password is hashed
        user.save(using=self._db)
        return user

    # Used when you call User.objects.create_user(...)
    def create_user(self, username, email=None, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(username, email, password, **extra_fields)

    # Used by Django when running `createsuperuser`
    def create_superuser(self, username, email=None, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        # You cannot pass conflicting values
        if extra_fields.get("is_staff") is not True or extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_staff=True and is_superuser=True")
        return self._create_user(username, email, password, **extra_fields)
