from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from ..models import AuditLog
from .ReadOnly import ReadOnlyAdmin


@admin.register(AuditLog)
class AuditLogAdmin(ReadOnlyAdmin):
    list_display = ("created_at", "actor", "action", "object_type", "object_id")
    list_filter = ("action", "object_type")
    date_hierarchy = "created_at"
    search_fields = ("object_type", "object_id", "user__username")

    @admin.display(description=_("User"), ordering="user__username")
    def actor(self, obj):
        return obj.user or _("system")

    def get_queryset(self, request):
        return super().get_queryset(request).select_related("user")
