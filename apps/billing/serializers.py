from rest_framework import serializers
from .models import Bill, BillCategory, BillStatus, PaymentMethod
from .constants import NOTES_MAX_LENGTH


SORT_CHOICES = {
    'receiptNo': 'receipt_no',
    'paymentDate': 'payment_date',
    'amount': 'amount',
    'createdAt': 'created_at',
}


# =============================================================================
# Input Serializers
# =============================================================================

class BillCreateSerializer(serializers.Serializer):
    """
    Validate the shape of a bill creation request.

    Values stay raw strings; category/type/amount rules live in the billing
    service so the same checks apply to every caller.
    """

    memberId = serializers.CharField(required=False, allow_blank=True)
    amount = serializers.CharField()
    category = serializers.CharField(required=False, allow_blank=True)
    accountType = serializers.CharField()
    paymentMethod = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=NOTES_MAX_LENGTH)


class BillFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for bill listing.

    Query Parameters:
        memberId (str): Mahal ID (admins only; households always see their own)
        category, accountType, paymentMethod, status, financialYear
        startDate, endDate (date): Inclusive payment date range
        minAmount, maxAmount (decimal): Inclusive amount range
        page, limit (int): Offset pagination
        sortBy, sortOrder: Ordering
    """

    memberId = serializers.RegexField(r'^\d+/\d+$', required=False)
    category = serializers.ChoiceField(choices=BillCategory.choices, required=False)
    accountType = serializers.CharField(required=False)
    paymentMethod = serializers.ChoiceField(choices=PaymentMethod.choices, required=False)
    status = serializers.ChoiceField(choices=BillStatus.choices, required=False)
    financialYear = serializers.RegexField(r'^\d{4}-\d{2}$', required=False)
    startDate = serializers.DateField(required=False)
    endDate = serializers.DateField(required=False)
    minAmount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    maxAmount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, required=False)
    sortBy = serializers.ChoiceField(choices=list(SORT_CHOICES), required=False, default='createdAt')
    sortOrder = serializers.ChoiceField(choices=['asc', 'desc'], required=False, default='desc')

    def validate(self, attrs):
        """Validate date and amount ranges."""
        start, end = attrs.get('startDate'), attrs.get('endDate')
        if start and end and start > end:
            raise serializers.ValidationError({
                'endDate': 'End date must be after start date'
            })

        low, high = attrs.get('minAmount'), attrs.get('maxAmount')
        if low is not None and high is not None and low > high:
            raise serializers.ValidationError({
                'maxAmount': 'Maximum amount must be at least the minimum amount'
            })

        return attrs

    def to_filters(self):
        """Map validated camelCase params to service filter keys."""
        data = self.validated_data
        mapping = {
            'memberId': 'member_id',
            'category': 'category',
            'accountType': 'account_type',
            'paymentMethod': 'payment_method',
            'status': 'status',
            'financialYear': 'financial_year',
            'startDate': 'start_date',
            'endDate': 'end_date',
            'minAmount': 'min_amount',
            'maxAmount': 'max_amount',
        }
        return {key: data[param] for param, key in mapping.items() if param in data}


class StatsQuerySerializer(BillFilterSerializer):
    """Query parameters for statistics (no pagination or ordering)."""

    page = None
    limit = None
    sortBy = None
    sortOrder = None
    status = None


class MonthlyRevenueQuerySerializer(serializers.Serializer):
    year = serializers.IntegerField(min_value=2000, max_value=2100, required=False)
    category = serializers.ChoiceField(choices=BillCategory.choices, required=False)


class MemberBillsQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, required=False, default=5)


class BillUpdateSerializer(serializers.Serializer):
    """
    Editable bill fields.

    receiptNo and amount are accepted here only so the view can reject
    them with a clear message.
    """

    notes = serializers.CharField(required=False, allow_blank=True, max_length=NOTES_MAX_LENGTH)
    paymentMethod = serializers.ChoiceField(choices=PaymentMethod.choices, required=False)
    receiptNo = serializers.IntegerField(required=False)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)


class CancelBillSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=NOTES_MAX_LENGTH)


# =============================================================================
# Output Serializers
# =============================================================================

class BillSerializer(serializers.ModelSerializer):
    """Full bill record."""

    receiptNo = serializers.IntegerField(source='receipt_no', read_only=True)
    memberId = serializers.CharField(source='member_id', read_only=True)
    memberName = serializers.CharField(source='member_name', read_only=True)
    memberAddress = serializers.CharField(source='member_address', read_only=True)
    amountInWords = serializers.CharField(source='amount_in_words', read_only=True)
    accountType = serializers.CharField(source='account_type', read_only=True)
    paymentMethod = serializers.CharField(source='payment_method', read_only=True)
    paymentDate = serializers.DateTimeField(source='payment_date', read_only=True)
    financialYear = serializers.CharField(source='financial_year', read_only=True)
    createdBy = serializers.SerializerMethodField()
    cancelledAt = serializers.DateTimeField(source='cancelled_at', read_only=True)
    cancelReason = serializers.CharField(source='cancel_reason', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Bill
        fields = [
            'id',
            'receiptNo',
            'memberId',
            'memberName',
            'memberAddress',
            'amount',
            'amountInWords',
            'category',
            'accountType',
            'status',
            'paymentMethod',
            'paymentDate',
            'year',
            'month',
            'financialYear',
            'notes',
            'createdBy',
            'cancelledAt',
            'cancelReason',
            'createdAt',
            'updatedAt',
        ]
        read_only_fields = fields

    def get_createdBy(self, obj):
        return obj.created_by.member_id if obj.created_by_id else None


class PaginationSerializer(serializers.Serializer):
    currentPage = serializers.IntegerField(source='current_page')
    totalPages = serializers.IntegerField(source='total_pages')
    totalBills = serializers.IntegerField(source='total_bills')
    billsPerPage = serializers.IntegerField(source='bills_per_page')
    hasNextPage = serializers.BooleanField(source='has_next_page')
    hasPrevPage = serializers.BooleanField(source='has_prev_page')


class BillListResponseSerializer(serializers.Serializer):
    bills = BillSerializer(many=True)
    pagination = PaginationSerializer()


class MemberBillsResponseSerializer(BillListResponseSerializer):
    memberId = serializers.CharField(source='member_id')
    totalAmountPaid = serializers.DecimalField(
        source='total_amount_paid', max_digits=14, decimal_places=2
    )


class RevenueByAccountSerializer(serializers.Serializer):
    accountType = serializers.CharField(source='account_type')
    category = serializers.CharField()
    count = serializers.IntegerField()
    revenue = serializers.DecimalField(max_digits=14, decimal_places=2)


class BillStatsSerializer(serializers.Serializer):
    """Dashboard statistics."""

    totalBills = serializers.IntegerField(source='total_bills')
    totalRevenue = serializers.DecimalField(source='total_revenue', max_digits=14, decimal_places=2)
    avgBillAmount = serializers.DecimalField(source='avg_bill_amount', max_digits=14, decimal_places=2)
    todayAmount = serializers.DecimalField(source='today_amount', max_digits=14, decimal_places=2)
    monthAmount = serializers.DecimalField(source='month_amount', max_digits=14, decimal_places=2)
    revenueByAccount = RevenueByAccountSerializer(source='revenue_by_account', many=True)


class MonthlyRevenueSerializer(serializers.Serializer):
    month = serializers.IntegerField()
    name = serializers.CharField()
    count = serializers.IntegerField()
    revenue = serializers.DecimalField(max_digits=14, decimal_places=2)


class ReceiptSerializer(serializers.Serializer):
    """Printable receipt data."""

    organizationName = serializers.CharField(source='organization_name')
    organizationAddress = serializers.CharField(source='organization_address')
    receiptNo = serializers.IntegerField(source='receipt_no')
    date = serializers.CharField()
    time = serializers.CharField()
    memberId = serializers.CharField(source='member_id')
    memberName = serializers.CharField(source='member_name')
    memberAddress = serializers.CharField(source='member_address')
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    amountInWords = serializers.CharField(source='amount_in_words')
    category = serializers.CharField()
    accountType = serializers.CharField(source='account_type')
    paymentMethod = serializers.CharField(source='payment_method')
    status = serializers.CharField()
    notes = serializers.CharField(allow_blank=True)
    financialYear = serializers.CharField(source='financial_year')
