from django.contrib import admin
from django.core.exceptions import PermissionDenied


class ReadOnlyAdmin(admin.ModelAdmin):
    """
    Browse-only admin for append-only tables such as the audit trail.
    Rows are written by the service layer, never through this UI.
    """

    list_per_page = 50

    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    def save_model(self, request, obj, form, change):
        raise PermissionDenied("Append-only rows cannot be edited.")

    def get_actions(self, request):
        # no bulk delete either
        return {}
