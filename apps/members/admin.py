from django.contrib import admin
from .models import Member


@admin.register(Member)
class MemberAdmin(admin.ModelAdmin):
    """Admin interface for the member directory."""

    list_display = ['mahal_id', 'name', 'phone', 'is_active', 'updated_at']
    list_filter = ['is_active']
    search_fields = ['mahal_id', 'name', 'phone']
    readonly_fields = ['created_at', 'updated_at']
    ordering = ['mahal_id']
