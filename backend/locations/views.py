import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from django.db.models import Q, ProtectedError
from django.core.cache import cache
from backend.core.permissions import is_admin_user, IsStaffMember
from .models import Branch
from .serializers import BranchSerializer

logger = logging.getLogger('backend.locations')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffMember])
def branch_list_create(request):
    """List branches or create a new branch (create requires admin)"""
    if request.method == 'GET':
        search = request.query_params.get('search', '').strip()
        branch_status = request.query_params.get('status', '').strip()

        from backend.core.model_cache import get_branch_list_cache_key, BRANCH_LIST_CACHE_TTL
        cache_key = get_branch_list_cache_key(search, branch_status)
        cached_data = cache.get(cache_key)
        if cached_data is not None:
            logger.debug(f"Cache hit for branch list ({cache_key})")
            return Response(cached_data)

        branches = Branch.objects.all()
        if search:
            branches = branches.filter(
                Q(name__icontains=search) | Q(location__icontains=search) |
                Q(manager_name__icontains=search) | Q(code__icontains=search)
            )
        if branch_status:
            branches = branches.filter(status=branch_status)

        response_data = BranchSerializer(branches, many=True).data
        cache.set(cache_key, response_data, BRANCH_LIST_CACHE_TTL)
        return Response(response_data)
    else:
        if not is_admin_user(request.user):
            logger.warning(f"User {request.user.username} attempted to create branch without admin privileges")
            return Response({'error': 'Only administrators can create branches'}, status=status.HTTP_403_FORBIDDEN)

        serializer = BranchSerializer(data=request.data)
        if serializer.is_valid():
            branch = serializer.save()
            logger.info(f"Branch '{branch.name}' created by {request.user.username}")
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaffMember])
def branch_detail(request, pk):
    """Retrieve, update or delete a branch (update/delete requires admin)"""
    branch = get_object_or_404(Branch, pk=pk)

    if request.method == 'GET':
        return Response(BranchSerializer(branch).data)

    if not is_admin_user(request.user):
        return Response({'error': 'Only administrators can modify branches'}, status=status.HTTP_403_FORBIDDEN)

    if request.method in ('PUT', 'PATCH'):
        serializer = BranchSerializer(branch, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        try:
            branch.delete()
        except ProtectedError:
            return Response(
                {'error': 'Branch has transfers and cannot be deleted; set it inactive instead'},
                status=status.HTTP_400_BAD_REQUEST
            )
        logger.info(f"Branch '{branch.name}' deleted by {request.user.username}")
        return Response(status=status.HTTP_204_NO_CONTENT)
