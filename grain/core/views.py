import logging

from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, IsAdminUser, AllowAny
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError, AuthenticationFailed
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from .filters import AuditLogFilter
from .models import UserSettings, AuditLog
from .serializers import (
    UserSerializer, UserCreateSerializer, ChangePasswordSerializer,
    UserSettingsSerializer, AuditLogSerializer
)
from .utils import create_audit_log, is_truthy

User = get_user_model()

logger = logging.getLogger('grain.core')


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        if self.user.is_deleted:
            raise AuthenticationFailed('User account has been deleted.')
        data['user'] = UserSerializer(self.user).data
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh that reports deleted users as an invalid token"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except (ObjectDoesNotExist, User.DoesNotExist):
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    serializer_class = CustomTokenRefreshSerializer


def issue_tokens(user):
    refresh = CustomTokenObtainPairSerializer.get_token(user)
    return {
        'access': str(refresh.access_token),
        'refresh': str(refresh),
    }


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """User registration endpoint"""
    serializer = UserCreateSerializer(data=request.data)
    if serializer.is_valid():
        user = serializer.save()
        logger.info(f"Registered new user {user.username} (ID: {user.id})")
        create_audit_log(request, 'register', 'User', user.id, user=user, object_name=user.username)
        return Response({
            'user': UserSerializer(user).data,
            **issue_tokens(user),
        }, status=status.HTTP_201_CREATED)
    logger.warning(f"Registration validation failed: {serializer.errors}")
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PATCH', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Get, update or soft delete the current user"""
    user = request.user

    if request.method == 'GET':
        return Response(UserSerializer(user).data)

    if request.method in ('PATCH', 'PUT'):
        serializer = UserSerializer(user, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            logger.info(f"User {user.username} updated their profile")
            create_audit_log(request, 'update', 'User', user.id, object_name=user.username,
                             changes={'fields': sorted(serializer.validated_data.keys())})
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    user.soft_delete()
    logger.info(f"User {user.username} deleted their account")
    create_audit_log(request, 'delete', 'User', user.id, user=user, object_name=user.username)
    return Response(UserSerializer(user).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def change_password(request):
    """Change the current user's password"""
    serializer = ChangePasswordSerializer(data=request.data, context={'request': request})
    if serializer.is_valid():
        request.user.set_password(serializer.validated_data['new_password'])
        request.user.save(update_fields=['password', 'updated_at'])
        logger.info(f"User {request.user.username} changed their password")
        create_audit_log(request, 'password_change', 'User', request.user.id, object_name=request.user.username)
        return Response({'success': True})
    logger.warning(f"Password change failed for {request.user.username}")
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# User views
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def user_list(request):
    """List users, soft-deleted ones only with ?include_deleted=true"""
    users = User.objects.all().order_by('username')
    if not is_truthy(request.query_params.get('include_deleted')):
        users = users.filter(is_deleted=False)
    return Response(UserSerializer(users, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_detail(request, pk):
    """Retrieve a user (yourself, or anyone for staff)"""
    user = get_object_or_404(User, pk=pk)
    if user.pk != request.user.pk and not request.user.is_staff:
        logger.warning(f"User {request.user.username} attempted to view user {pk}")
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)
    return Response(UserSerializer(user).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminUser])
def user_restore(request, pk):
    """Restore a soft-deleted user account"""
    user = get_object_or_404(User, pk=pk)
    user.restore()
    logger.info(f"User {request.user.username} restored account {user.username}")
    create_audit_log(request, 'restore', 'User', user.id, object_name=user.username)
    return Response(UserSerializer(user).data)


# Settings views
@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def user_settings(request):
    """Get or update the current user's settings"""
    settings_obj, created = UserSettings.objects.get_or_create(user=request.user)
    if created:
        logger.debug(f"Created default settings for {request.user.username}")

    if request.method == 'GET':
        return Response(UserSettingsSerializer(settings_obj).data)

    serializer = UserSettingsSerializer(settings_obj, data=request.data, partial=True)
    if serializer.is_valid():
        serializer.save()
        create_audit_log(request, 'settings_update', 'UserSettings', settings_obj.id,
                         object_name=request.user.username, changes=dict(serializer.validated_data))
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# AuditLog views (read-only)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_list(request):
    """List audit logs with filtering"""
    queryset = AuditLog.objects.select_related('user')

    # Filter by user if not admin
    if not request.user.is_staff:
        queryset = queryset.filter(user=request.user)

    filterset = AuditLogFilter(request.query_params, queryset=queryset, request=request)
    if not filterset.is_valid():
        return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)

    queryset = filterset.qs.order_by('-created_at')
    serializer = AuditLogSerializer(queryset, many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_detail(request, pk):
    """Retrieve an audit log"""
    audit_log = get_object_or_404(AuditLog, pk=pk)

    if not request.user.is_staff and audit_log.user != request.user:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    serializer = AuditLogSerializer(audit_log)
    return Response(serializer.data)
