import logging

from django.db.models import Case, When, Value, IntegerField
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound, PermissionDenied
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response

from grain.core.resources import OwnedResource, get_owned_object
from grain.core.utils import create_audit_log
from .models import Project, CutList, LINE_ITEM_PREFETCH
from .serializers import ProjectSerializer, SharedProjectSerializer, CutListSerializer

logger = logging.getLogger('grain.projects')


def project_queryset():
    """Projects with line items prefetched, ranked by status declaration order"""
    status_rank = Case(
        *[When(status=code, then=Value(rank)) for rank, (code, _) in enumerate(Project.STATUS_CHOICES)],
        output_field=IntegerField(),
    )
    return Project.objects.annotate(status_rank=status_rank).prefetch_related(*LINE_ITEM_PREFETCH)


projects = OwnedResource(
    Project, ProjectSerializer, label='Project', basename='project',
    ordering=('status_rank', '-updated_at', '-id'), queryset=project_queryset, logger=logger,
)


@api_view(['GET'])
@permission_classes([AllowAny])
def shared_project(request, token):
    """Public, read-only view of a project through its share link"""
    project = (
        Project.objects.select_related('user')
        .prefetch_related(*LINE_ITEM_PREFETCH)
        .filter(share_token=token, is_deleted=False)
        .first()
    )
    if project is None:
        logger.info(f"Shared project lookup failed for token {token}")
        raise NotFound('Project not found')
    return Response(SharedProjectSerializer(project).data)


# Cut list views
def get_owned_cut_list(request, pk):
    cut_list = CutList.objects.select_related('project').filter(pk=pk).first()
    if cut_list is None:
        raise NotFound('Cut list item not found')
    if cut_list.project.user_id != request.user.id:
        raise PermissionDenied('You do not have access to this cut list item')
    return cut_list


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def project_cut_lists(request, pk):
    """List a project's cut list, incomplete pieces first, or add a piece"""
    project = get_owned_object(Project.objects.all(), pk, request.user, 'Project')

    if request.method == 'GET':
        cut_lists = project.cut_lists.order_by('is_completed', '-created_at', '-id')
        return Response(CutListSerializer(cut_lists, many=True).data)

    serializer = CutListSerializer(data=request.data)
    if serializer.is_valid():
        cut_list = serializer.save(project=project)
        logger.info(f"User {request.user.username} added cut list item {cut_list.id} to project {project.id}")
        create_audit_log(request, 'create', 'CutList', cut_list.id, object_name=project.name)
        return Response(CutListSerializer(cut_list).data, status=status.HTTP_201_CREATED)
    logger.warning(f"Cut list validation failed for project {project.id}: {serializer.errors}")
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def cut_list_detail(request, pk):
    """Retrieve, update or delete a cut list item"""
    cut_list = get_owned_cut_list(request, pk)

    if request.method == 'GET':
        return Response(CutListSerializer(cut_list).data)

    if request.method in ('PUT', 'PATCH'):
        serializer = CutListSerializer(cut_list, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request, 'update', 'CutList', cut_list.id, object_name=cut_list.project.name,
                             changes={'fields': sorted(serializer.validated_data.keys())})
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    project_name = cut_list.project.name
    cut_list.delete()
    logger.info(f"User {request.user.username} deleted cut list item {pk}")
    create_audit_log(request, 'hard_delete', 'CutList', pk, object_name=project_name)
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def cut_list_toggle_complete(request, pk):
    """Flip a cut list item between done and pending"""
    cut_list = get_owned_cut_list(request, pk)
    cut_list.is_completed = not cut_list.is_completed
    cut_list.save(update_fields=['is_completed', 'updated_at'])
    create_audit_log(request, 'cut_list_toggle', 'CutList', cut_list.id, object_name=cut_list.project.name,
                     changes={'is_completed': cut_list.is_completed})
    return Response(CutListSerializer(cut_list).data)
