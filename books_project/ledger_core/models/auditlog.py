from django.conf import settings
from django.db import models

from ..managers import AuditLogManager


class AuditLog(models.Model):
    """
    Append-only trail of state changes made through the service layer:
    postings, approvals, payments, reconciliations, invoice sends.
    Rows are written in the same transaction as the change they record.
    """

    # Null for system actions (Celery sweeps, management commands)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True, blank=True, on_delete=models.SET_NULL
    )
    action = models.CharField(max_length=50)  # post, approve, reject, pay, reconcile, send
    # Model class name and pk of the row that changed
    object_type = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    # {"field": [old, new]} or a free-form payload
    changes = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = AuditLogManager()

    class Meta:
        ordering = ("-created_at", "-id")
        indexes = [
            models.Index(fields=["object_type", "object_id"]),
            models.Index(fields=["created_at"]),
        ]

    def __str__(self):
        who = self.user or "system"
        return f"{who} {self.action} {self.object_type}#{self.object_id}"
