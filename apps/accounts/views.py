from rest_framework import status, serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from .serializers import (
    UserSerializer,
    UserLoginSerializer,
    RefreshTokenSerializer,
)
from .services import (
    authenticate_user,
    issue_tokens,
    refresh_session,
    InvalidCredentialsError,
    InactiveAccountError,
    InvalidTokenError,
)


# Response serializers for API documentation
class TokensResponseSerializer(serializers.Serializer):
    token = serializers.CharField()
    refreshToken = serializers.CharField()


class AuthResponseSerializer(TokensResponseSerializer):
    message = serializers.CharField()
    user = UserSerializer()


class MessageResponseSerializer(serializers.Serializer):
    message = serializers.CharField()


@extend_schema(
    request=UserLoginSerializer,
    responses={
        200: AuthResponseSerializer,
        400: MessageResponseSerializer,
        401: MessageResponseSerializer,
        403: MessageResponseSerializer,
    },
    description="Authenticate with Mahal ID and password to receive JWT tokens.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    """Login with Mahal ID and password."""
    serializer = UserLoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        user = authenticate_user(
            member_id=serializer.validated_data['memberId'],
            password=serializer.validated_data['password'],
        )
    except InvalidCredentialsError as e:
        return Response({'message': str(e)}, status=status.HTTP_401_UNAUTHORIZED)
    except InactiveAccountError as e:
        return Response({'message': str(e)}, status=status.HTTP_403_FORBIDDEN)

    return Response({
        'message': 'Login successful',
        'user': UserSerializer(user).data,
        **issue_tokens(user),
    })


@extend_schema(
    request=RefreshTokenSerializer,
    responses={
        200: TokensResponseSerializer,
        401: MessageResponseSerializer,
    },
    description="Exchange a refresh token for a new access/refresh token pair.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def refresh_token(request):
    """Rotate the session tokens."""
    serializer = RefreshTokenSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        tokens = refresh_session(refresh_token=serializer.validated_data['refreshToken'])
    except InvalidTokenError as e:
        return Response({'message': str(e)}, status=status.HTTP_401_UNAUTHORIZED)

    return Response(tokens)


@extend_schema(
    request=None,
    responses={200: MessageResponseSerializer},
    description="Logout. Tokens are stateless; the client discards them.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout(request):
    """Logout."""
    return Response({'message': 'Logged out successfully'})


@extend_schema(
    responses={200: UserSerializer},
    description="Get the current authenticated user's profile.",
    tags=['auth'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_current_user(request):
    """Get current authenticated user profile."""
    return Response({'user': UserSerializer(request.user).data})
