from django.utils import timezone
from rest_framework import status, serializers as drf_serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.accounts.permissions import IsAdminRole
from apps.accounts.views import MessageResponseSerializer
from .serializers import (
    SORT_CHOICES,
    # Input serializers
    BillCreateSerializer,
    BillFilterSerializer,
    StatsQuerySerializer,
    MonthlyRevenueQuerySerializer,
    MemberBillsQuerySerializer,
    BillUpdateSerializer,
    CancelBillSerializer,
    # Output serializers
    BillSerializer,
    BillListResponseSerializer,
    MemberBillsResponseSerializer,
    BillStatsSerializer,
    MonthlyRevenueSerializer,
    ReceiptSerializer,
)
from .services import (
    create_bill,
    get_bill,
    get_bill_by_receipt_no,
    get_member_bills,
    list_bills,
    update_bill,
    cancel_bill,
    delete_bill,
    build_receipt,
    get_stats,
    get_monthly_revenue,
    # Exceptions
    BillValidationError,
    BillNotFoundError,
    MemberNotFoundError,
    NotBillOwnerError,
    ImmutableFieldError,
    InvalidStatusTransitionError,
    StorageError,
    ReceiptGapError,
)


# Response serializers for API documentation
class ValidationErrorResponseSerializer(MessageResponseSerializer):
    errors = drf_serializers.DictField(required=False)


class BillResponseSerializer(drf_serializers.Serializer):
    message = drf_serializers.CharField(required=False)
    bill = BillSerializer()


def _validation_error(e: BillValidationError) -> Response:
    body = {'message': str(e)}
    if e.field:
        body['errors'] = {e.field: [str(e)]}
    return Response(body, status=status.HTTP_400_BAD_REQUEST)


def _message(e: Exception, code: int) -> Response:
    return Response({'message': str(e)}, status=code)


# =============================================================================
# Collection
# =============================================================================

@extend_schema(
    methods=['POST'],
    request=BillCreateSerializer,
    responses={
        201: BillResponseSerializer,
        400: ValidationErrorResponseSerializer,
        403: MessageResponseSerializer,
        404: MessageResponseSerializer,
        503: MessageResponseSerializer,
    },
    description="Issue a bill. Households may only pay for their own Mahal ID.",
    tags=['bills'],
)
@extend_schema(
    methods=['GET'],
    parameters=[BillFilterSerializer],
    responses={200: BillListResponseSerializer, 400: ValidationErrorResponseSerializer},
    description="List bills. Admins see every household, users only their own.",
    tags=['bills'],
)
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def bill_collection(request):
    """List or create bills - thin HTTP handler."""
    if request.method == 'POST':
        return _create_bill(request)

    query = BillFilterSerializer(data=request.query_params)
    query.is_valid(raise_exception=True)
    params = query.validated_data

    result = list_bills(
        filters=query.to_filters(),
        user=request.user,
        page=params['page'],
        limit=params.get('limit'),
        sort_by=SORT_CHOICES[params['sortBy']],
        sort_order=params['sortOrder'],
    )
    return Response(BillListResponseSerializer(result).data)


def _create_bill(request):
    serializer = BillCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    try:
        bill = create_bill(
            member_id=data.get('memberId') or request.user.member_id,
            amount=data['amount'],
            category=data.get('category'),
            account_type=data['accountType'],
            payment_method=data.get('paymentMethod'),
            notes=data.get('notes', ''),
            created_by=request.user,
        )
    except BillValidationError as e:
        return _validation_error(e)
    except NotBillOwnerError as e:
        return _message(e, status.HTTP_403_FORBIDDEN)
    except MemberNotFoundError as e:
        return _message(e, status.HTTP_404_NOT_FOUND)
    except StorageError:
        return Response(
            {'message': 'Billing is temporarily unavailable. Please try again.'},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    except ReceiptGapError:
        # The reserved number is never shown to the user
        return Response(
            {'message': 'Bill could not be saved. Please try again.'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    return Response(
        {'message': 'Amount Credited Successfully', 'bill': BillSerializer(bill).data},
        status=status.HTTP_201_CREATED,
    )


# =============================================================================
# Admin reports
# =============================================================================

@extend_schema(
    parameters=[StatsQuerySerializer],
    responses={200: BillStatsSerializer, 403: MessageResponseSerializer},
    description="Collection totals, today's and this month's collection, revenue per account type.",
    tags=['bills'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def bill_stats(request):
    """Billing statistics (admin only)."""
    query = StatsQuerySerializer(data=request.query_params)
    query.is_valid(raise_exception=True)

    stats = get_stats(filters=query.to_filters())
    return Response(BillStatsSerializer(stats).data)


@extend_schema(
    parameters=[MonthlyRevenueQuerySerializer],
    responses={200: MonthlyRevenueSerializer(many=True), 403: MessageResponseSerializer},
    description="Paid collection per month of a calendar year (default: current year).",
    tags=['bills'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def monthly_revenue(request):
    """Monthly revenue chart data (admin only)."""
    query = MonthlyRevenueQuerySerializer(data=request.query_params)
    query.is_valid(raise_exception=True)
    params = query.validated_data

    year = params.get('year') or timezone.localdate().year
    filters = {'category': params['category']} if params.get('category') else None
    months = get_monthly_revenue(year=year, filters=filters)
    return Response({'year': year, 'months': MonthlyRevenueSerializer(months, many=True).data})


# =============================================================================
# Lookups
# =============================================================================

@extend_schema(
    responses={200: BillResponseSerializer, 403: MessageResponseSerializer, 404: MessageResponseSerializer},
    description="Find a bill by its receipt number.",
    tags=['bills'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def bill_by_receipt_no(request, receipt_no):
    try:
        bill = get_bill_by_receipt_no(receipt_no=receipt_no, user=request.user)
    except BillNotFoundError as e:
        return _message(e, status.HTTP_404_NOT_FOUND)
    except NotBillOwnerError as e:
        return _message(e, status.HTTP_403_FORBIDDEN)

    return Response({'bill': BillSerializer(bill).data})


@extend_schema(
    parameters=[MemberBillsQuerySerializer],
    responses={200: MemberBillsResponseSerializer, 403: MessageResponseSerializer},
    description="A household's bills, newest first, with the total amount paid.",
    tags=['bills'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def member_bills(request, ward, house):
    query = MemberBillsQuerySerializer(data=request.query_params)
    query.is_valid(raise_exception=True)

    try:
        result = get_member_bills(
            member_id=f"{ward}/{house}",
            user=request.user,
            page=query.validated_data['page'],
            limit=query.validated_data['limit'],
        )
    except NotBillOwnerError as e:
        return _message(e, status.HTTP_403_FORBIDDEN)

    return Response(MemberBillsResponseSerializer(result).data)


# =============================================================================
# Single bill
# =============================================================================

@extend_schema(
    methods=['GET'],
    responses={200: BillResponseSerializer, 403: MessageResponseSerializer, 404: MessageResponseSerializer},
    description="Get a bill.",
    tags=['bills'],
)
@extend_schema(
    methods=['PATCH'],
    request=BillUpdateSerializer,
    responses={200: BillResponseSerializer, 400: ValidationErrorResponseSerializer, 404: MessageResponseSerializer},
    description="Update notes or payment method (admin only). Receipt number and amount cannot change.",
    tags=['bills'],
)
@extend_schema(
    methods=['DELETE'],
    parameters=[OpenApiParameter('hard', OpenApiTypes.BOOL, description='Remove the row permanently')],
    responses={200: MessageResponseSerializer, 404: MessageResponseSerializer},
    description="Delete a bill (admin only). Soft delete unless hard=true.",
    tags=['bills'],
)
@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def bill_detail(request, bill_id):
    """Get, update or delete a bill - thin HTTP handler."""
    if request.method != 'GET' and not IsAdminRole().has_permission(request, None):
        return Response({'message': IsAdminRole.message}, status=status.HTTP_403_FORBIDDEN)

    if request.method == 'PATCH':
        return _update_bill(request, bill_id)
    if request.method == 'DELETE':
        return _delete_bill(request, bill_id)

    try:
        bill = get_bill(bill_id=bill_id, user=request.user)
    except BillNotFoundError as e:
        return _message(e, status.HTTP_404_NOT_FOUND)
    except NotBillOwnerError as e:
        return _message(e, status.HTTP_403_FORBIDDEN)

    return Response({'bill': BillSerializer(bill).data})


def _update_bill(request, bill_id):
    serializer = BillUpdateSerializer(data=request.data, partial=True)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    changes = {}
    if 'receiptNo' in data:
        changes['receipt_no'] = data['receiptNo']
    if 'amount' in data:
        changes['amount'] = data['amount']
    if 'notes' in data:
        changes['notes'] = data['notes']
    if 'paymentMethod' in data:
        changes['payment_method'] = data['paymentMethod']

    try:
        bill = update_bill(bill_id=bill_id, user=request.user, **changes)
    except BillNotFoundError as e:
        return _message(e, status.HTTP_404_NOT_FOUND)
    except ImmutableFieldError as e:
        return _message(e, status.HTTP_400_BAD_REQUEST)
    except BillValidationError as e:
        return _validation_error(e)

    return Response({'message': 'Bill updated successfully', 'bill': BillSerializer(bill).data})


def _delete_bill(request, bill_id):
    hard = request.query_params.get('hard', '').lower() in ('1', 'true', 'yes')

    try:
        delete_bill(bill_id=bill_id, user=request.user, hard=hard)
    except BillNotFoundError as e:
        return _message(e, status.HTTP_404_NOT_FOUND)

    return Response({'message': 'Bill deleted successfully'})


@extend_schema(
    request=CancelBillSerializer,
    responses={200: BillResponseSerializer, 400: MessageResponseSerializer, 404: MessageResponseSerializer},
    description="Cancel a Paid or Pending bill (admin only). The receipt number is not reused.",
    tags=['bills'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def cancel(request, bill_id):
    serializer = CancelBillSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        bill = cancel_bill(
            bill_id=bill_id,
            user=request.user,
            reason=serializer.validated_data.get('reason', ''),
        )
    except BillNotFoundError as e:
        return _message(e, status.HTTP_404_NOT_FOUND)
    except InvalidStatusTransitionError as e:
        return _message(e, status.HTTP_400_BAD_REQUEST)

    return Response({'message': 'Bill cancelled', 'bill': BillSerializer(bill).data})


@extend_schema(
    responses={200: ReceiptSerializer, 403: MessageResponseSerializer, 404: MessageResponseSerializer},
    description="Receipt data for printing.",
    tags=['bills'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def receipt(request, bill_id):
    try:
        bill = get_bill(bill_id=bill_id, user=request.user)
    except BillNotFoundError as e:
        return _message(e, status.HTTP_404_NOT_FOUND)
    except NotBillOwnerError as e:
        return _message(e, status.HTTP_403_FORBIDDEN)

    return Response({'receipt': ReceiptSerializer(build_receipt(bill)).data})
