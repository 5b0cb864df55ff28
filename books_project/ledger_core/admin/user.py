from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin
from django.db.models import Count, Q
from django.utils.translation import gettext_lazy as _

from ..models import User
from .forms import UserAdminChangeForm, UserAdminCreationForm


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    add_form = UserAdminCreationForm
    form = UserAdminChangeForm
    model = User

    list_display = ("username", "full_name", "role", "open_claims", "is_staff")
    list_filter = ("role", "is_staff", "is_active")
    search_fields = ("username", "email", "full_name", "company_name")
    ordering = ("username",)

    # stock layout, with first/last name replaced by full_name
    # and the approval role next to permissions
    fieldsets = (
        (None, {"fields": ("username", "password")}),
        (_("Profile"), {"fields": ("full_name", "email", "company_name")}),
        (_("Access"), {"fields": ("role", "is_active", "is_staff", "is_superuser",
                                  "groups", "user_permissions")}),
        (_("Important dates"), {"fields": ("last_login", "date_joined")}),
    )
    add_fieldsets = (
        (None, {
            "classes": ("wide",),
            "fields": ("username", "email", "full_name", "role", "password1", "password2"),
        }),
    )

    def get_queryset(self, request):
        # claims still waiting for a decision or a payout
        return super().get_queryset(request).annotate(
            _open_claims=Count(
                "expense_claims",
                filter=Q(expense_claims__status__in=("submitted", "approved")),
            )
        )

    @admin.display(description=_("Open claims"), ordering="_open_claims")
    def open_claims(self, obj):
        return obj._open_claims
