from ..models import AuditLog


def log_action(
    *,
    action: str,
    instance,
    user=None,
    changes: dict | None = None,
):
    """
    Central audit logger.
    Call inside the caller's transaction so the audit row commits (or rolls
    back) together with the change it describes.
    """
    if user is not None and not getattr(user, "pk", None):
        # AnonymousUser and unsaved users are recorded as system actions
        user = None

    return AuditLog.objects.create(
        user=user,
        action=action,
        object_type=instance.__class__.__name__,
        object_id=str(instance.pk),
        changes=changes,
    )
