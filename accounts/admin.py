from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User


# ───────────────────────────────
#  User
# ───────────────────────────────
@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("username", "email", "name", "role", "leader", "is_staff", "date_joined")
    list_filter  = ("role", "is_staff", "is_superuser", "is_active")
    search_fields = ("username", "email", "name")
    autocomplete_fields = ["leader"]
    ordering = ("-date_joined",)
    fieldsets = (
        (None,            {"fields": ("username", "email", "password")}),
        ("Personal info", {"fields": ("first_name", "last_name", "name", "position")}),
        ("Reporting",     {"fields": ("role", "leader")}),
        ("Permissions",   {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")}),
        ("Dates",         {"fields": ("last_login", "date_joined")}),
    )
