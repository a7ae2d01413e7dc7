"""
Owned-resource endpoints shared by every soft-deletable entity.

Lumber, finishes, sheet goods, consumables, tools and projects all expose
the same operations: list (optionally including soft-deleted rows), create,
retrieve, update, soft delete, restore and hard delete. ``OwnedResource``
builds that set of function views once per model so the ownership and
soft-delete rules live in a single place.
"""
import logging

from django.db.models import ProtectedError
from django.urls import path
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound, PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .utils import create_audit_log, is_truthy


def get_owned_object(queryset, pk, user, label):
    """
    Fetch ``pk`` from ``queryset`` and make sure ``user`` owns it.

    Raises NotFound (404) for a missing row and PermissionDenied (403) for a
    row that belongs to somebody else.
    """
    obj = queryset.filter(pk=pk).first()
    if obj is None:
        raise NotFound(f'{label} not found')
    if obj.user_id != user.id:
        raise PermissionDenied(f'You do not have access to this {label.lower()}')
    return obj


class OwnedResource:
    """Function views for one ``SoftDeleteModel`` subclass"""

    def __init__(self, model, serializer_class, label, basename, filterset_class=None,
                 ordering=('-created_at', '-id'), queryset=None, logger=None):
        self.model = model
        self.serializer_class = serializer_class
        self.label = label
        self.basename = basename
        self.filterset_class = filterset_class
        self.ordering = ordering
        self._queryset = queryset
        self.logger = logger or logging.getLogger(__name__)

        self.list_create = self._build_list_create()
        self.detail = self._build_detail()
        self.restore = self._build_restore()
        self.hard_delete = self._build_hard_delete()

    def get_queryset(self):
        if self._queryset is not None:
            return self._queryset()
        return self.model.objects.all()

    def get_object(self, request, pk):
        return get_owned_object(self.get_queryset(), pk, request.user, self.label)

    def serialize(self, request, instance, many=False):
        return self.serializer_class(instance, many=many, context={'request': request}).data

    def urlpatterns(self, prefix):
        return [
            path(f'{prefix}/', self.list_create, name=f'{self.basename}-list-create'),
            path(f'{prefix}/<int:pk>/', self.detail, name=f'{self.basename}-detail'),
            path(f'{prefix}/<int:pk>/restore/', self.restore, name=f'{self.basename}-restore'),
            path(f'{prefix}/<int:pk>/hard-delete/', self.hard_delete, name=f'{self.basename}-hard-delete'),
        ]

    def _build_list_create(self):
        resource = self

        @api_view(['GET', 'POST'])
        @permission_classes([IsAuthenticated])
        def list_create(request):
            """List the user's rows or create a new one"""
            if request.method == 'GET':
                queryset = resource.get_queryset().filter(user=request.user)
                if not is_truthy(request.query_params.get('include_deleted')):
                    queryset = queryset.filter(is_deleted=False)
                if resource.filterset_class is not None:
                    queryset = resource.filterset_class(request.query_params, queryset=queryset, request=request).qs
                queryset = queryset.order_by(*resource.ordering)
                return Response(resource.serialize(request, queryset, many=True))

            serializer = resource.serializer_class(data=request.data, context={'request': request})
            if serializer.is_valid():
                instance = serializer.save(user=request.user)
                resource.logger.info(f"User {request.user.username} created {resource.label} {instance.pk} ({instance})")
                create_audit_log(request, 'create', resource.model.__name__, instance.pk, object_name=str(instance))
                instance = resource.get_queryset().get(pk=instance.pk)
                return Response(resource.serialize(request, instance), status=status.HTTP_201_CREATED)
            resource.logger.warning(f"{resource.label} creation validation failed: {serializer.errors}")
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        return list_create

    def _build_detail(self):
        resource = self

        @api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
        @permission_classes([IsAuthenticated])
        def detail(request, pk):
            """Retrieve, update or soft delete a row"""
            instance = resource.get_object(request, pk)

            if request.method == 'GET':
                return Response(resource.serialize(request, instance))

            if request.method in ('PUT', 'PATCH'):
                serializer = resource.serializer_class(
                    instance, data=request.data, partial=request.method == 'PATCH',
                    context={'request': request},
                )
                if serializer.is_valid():
                    serializer.save()
                    resource.logger.info(f"User {request.user.username} updated {resource.label} {pk}")
                    create_audit_log(
                        request, 'update', resource.model.__name__, pk, object_name=str(instance),
                        changes={'fields': sorted(serializer.validated_data.keys())},
                    )
                    instance = resource.get_queryset().get(pk=pk)
                    return Response(resource.serialize(request, instance))
                resource.logger.warning(f"{resource.label} {pk} update validation failed: {serializer.errors}")
                return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

            instance.soft_delete()
            resource.logger.info(f"User {request.user.username} soft deleted {resource.label} {pk}")
            create_audit_log(request, 'delete', resource.model.__name__, pk, object_name=str(instance))
            return Response(resource.serialize(request, instance))

        return detail

    def _build_restore(self):
        resource = self

        @api_view(['POST'])
        @permission_classes([IsAuthenticated])
        def restore(request, pk):
            """Bring a soft-deleted row back"""
            instance = resource.get_object(request, pk)
            instance.restore()
            resource.logger.info(f"User {request.user.username} restored {resource.label} {pk}")
            create_audit_log(request, 'restore', resource.model.__name__, pk, object_name=str(instance))
            return Response(resource.serialize(request, instance))

        return restore

    def _build_hard_delete(self):
        resource = self

        @api_view(['DELETE'])
        @permission_classes([IsAuthenticated])
        def hard_delete(request, pk):
            """Remove a row permanently"""
            instance = resource.get_object(request, pk)
            name = str(instance)
            try:
                instance.delete()
            except ProtectedError:
                resource.logger.warning(f"Refused hard delete of {resource.label} {pk}: still referenced by projects")
                return Response(
                    {'error': f'{resource.label} is used by one or more projects and cannot be permanently deleted'},
                    status=status.HTTP_400_BAD_REQUEST,
                )
            resource.logger.info(f"User {request.user.username} permanently deleted {resource.label} {pk} ({name})")
            create_audit_log(request, 'hard_delete', resource.model.__name__, pk, object_name=name)
            return Response(status=status.HTTP_204_NO_CONTENT)

        return hard_delete
