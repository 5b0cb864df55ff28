from django.core.exceptions import ValidationError
from django.db.models.signals import post_delete, post_save, pre_delete
from django.dispatch import receiver

from .models import Invoice, InvoiceLine, JournalEntry, JournalLine

"""
    Recalculate invoice totals when a line is added/updated/removed.
    Use update via model methods to keep validation/consistency.
"""


@receiver((post_save, post_delete), sender=InvoiceLine)
def invoice_line_changed(sender, instance, **kwargs):
    # Only drafts carry editable lines
    inv = Invoice.objects.filter(pk=instance.invoice_id, status="draft").first()
    if inv is None:
        return
    inv.recalc_totals()
    # save totals, no need to revalidate lines here
    inv.save(update_fields=["subtotal", "tax_amount", "total_amount"])


"""Block deletion of posted journal entries and their lines.
Accounts with lines are already protected by the PROTECT foreign key."""


# pre_delete signal auto-fires just before Django deletes a model instance,
# including queryset and cascade deletes that skip Model.delete()
@receiver(pre_delete, sender=JournalEntry)
def prevent_delete_posted_journal(sender, instance, **kwargs):
    if JournalEntry.objects.filter(pk=instance.pk, status="posted").exists():
        raise ValidationError("Cannot delete a posted JournalEntry.")


@receiver(pre_delete, sender=JournalLine)
def prevent_delete_posted_journal_line(sender, instance, **kwargs):
    if JournalEntry.objects.filter(pk=instance.journal_id, status="posted").exists():
        raise ValidationError("Cannot delete JournalLine: parent JournalEntry is posted.")
