from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.views import MessageResponseSerializer
from .serializers import MemberSerializer
from .services import get_member, MemberNotFoundError


@extend_schema(
    responses={
        200: MemberSerializer,
        403: MessageResponseSerializer,
        404: MessageResponseSerializer,
    },
    description="Look up a household by ward and house number. Users may only read their own household.",
    tags=['members'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def member_detail(request, ward, house):
    """Get member by Mahal ID - thin HTTP handler."""
    mahal_id = f"{ward}/{house}"

    if not request.user.is_admin and request.user.member_id != mahal_id:
        return Response(
            {'message': 'Not authorized to view this member'},
            status=status.HTTP_403_FORBIDDEN,
        )

    try:
        member = get_member(mahal_id=mahal_id)
    except MemberNotFoundError as e:
        return Response({'message': str(e)}, status=status.HTTP_404_NOT_FOUND)

    return Response({'member': MemberSerializer(member).data})
