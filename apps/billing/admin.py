from django.contrib import admin
from django.utils.html import format_html
from .models import Bill, BillStatus, Counter


@admin.register(Bill)
class BillAdmin(admin.ModelAdmin):
    """
    Admin interface for bills.

    Receipt number and amount are read-only; bills are cancelled or
    soft-deleted rather than edited.
    """

    list_display = [
        'receipt_no',
        'member_id',
        'member_name',
        'amount',
        'category',
        'account_type',
        'payment_method',
        'status_badge',
        'payment_date',
        'is_active',
    ]

    list_filter = [
        'category',
        'status',
        'payment_method',
        'financial_year',
        'is_active',
    ]

    search_fields = [
        'receipt_no',
        'member_id',
        'member_name',
    ]

    ordering = ['-receipt_no']
    date_hierarchy = 'payment_date'

    fieldsets = (
        ('Receipt', {
            'fields': ('receipt_no', 'amount', 'amount_in_words', 'category', 'account_type', 'payment_method', 'status')
        }),
        ('Member', {
            'fields': ('member_id', 'member_name', 'member_address'),
        }),
        ('Dates', {
            'fields': ('payment_date', 'year', 'month', 'financial_year'),
        }),
        ('Audit', {
            'fields': ('notes', 'created_by', 'cancelled_at', 'cancelled_by', 'cancel_reason',
                       'is_active', 'deleted_at', 'deleted_by', 'created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    readonly_fields = [
        'receipt_no',
        'amount',
        'amount_in_words',
        'year',
        'month',
        'financial_year',
        'created_by',
        'cancelled_at',
        'cancelled_by',
        'deleted_at',
        'deleted_by',
        'created_at',
        'updated_at',
    ]

    def status_badge(self, obj):
        colors = {
            BillStatus.PAID: '#2E7D32',
            BillStatus.PENDING: '#F9A825',
            BillStatus.CANCELLED: '#B85C5C',
        }
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            colors.get(obj.status, '#999'), obj.get_status_display()
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'

    def has_add_permission(self, request):
        # Receipt numbers are only issued through the billing service
        return False

    def has_delete_permission(self, request, obj=None):
        # Bills leave the books through cancel or soft delete
        return request.user.is_superuser


@admin.register(Counter)
class CounterAdmin(admin.ModelAdmin):
    list_display = ['name', 'count', 'last_updated']
    readonly_fields = ['name', 'count', 'last_updated']

    def has_add_permission(self, request):
        return False
