from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError, AuthenticationFailed
from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.shortcuts import get_object_or_404
from django.db.models import Q
from .models import Setting, AuditLog
from .permissions import is_admin_user, is_staff_member
from .serializers import (
    UserSerializer, UserCreateSerializer, UserRoleSerializer,
    SettingSerializer, AuditLogSerializer
)
from .utils import create_audit_log

User = get_user_model()


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')
        # First login assigns the default role
        self.user.ensure_role()
        data['role'] = self.user.role
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['role'] = user.role or 'customer'
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Custom token refresh serializer that handles deleted users gracefully"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except (ObjectDoesNotExist, User.DoesNotExist):
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    serializer_class = CustomTokenRefreshSerializer


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """Self-service registration; always creates a customer"""
    data = request.data.copy()
    data['role'] = 'customer'
    serializer = UserCreateSerializer(data=data)
    if serializer.is_valid():
        user = serializer.save()
        token = CustomTokenObtainPairSerializer.get_token(user)
        return Response({
            'user': UserSerializer(user).data,
            'access': str(token.access_token),
            'refresh': str(token),
        }, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# User views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def user_list_create(request):
    """List all users or create a new user (Admin only)"""
    if not is_admin_user(request.user):
        return Response({'error': 'Only Admin users can manage users'}, status=status.HTTP_403_FORBIDDEN)
    if request.method == 'GET':
        users = User.objects.all().order_by('username')
        role = request.query_params.get('role', None)
        if role:
            users = users.filter(role=role)
        serializer = UserSerializer(users, many=True)
        return Response(serializer.data)
    else:
        serializer = UserCreateSerializer(data=request.data)
        if serializer.is_valid():
            user = serializer.save()
            return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def user_detail(request, pk):
    """Retrieve, update or delete a user (Admin only)"""
    if not is_admin_user(request.user):
        return Response({'error': 'Only Admin users can manage users'}, status=status.HTTP_403_FORBIDDEN)
    user = get_object_or_404(User, pk=pk)

    if request.method == 'GET':
        serializer = UserSerializer(user)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = UserSerializer(user, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if user.pk == request.user.pk:
            return Response({'error': 'You cannot delete your own account'}, status=status.HTTP_400_BAD_REQUEST)
        user.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def user_set_role(request, pk):
    """Change a user's role (Admin only)"""
    if not is_admin_user(request.user):
        return Response({'error': 'Only Admin users can change roles'}, status=status.HTTP_403_FORBIDDEN)
    user = get_object_or_404(User, pk=pk)
    serializer = UserRoleSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    old_role = user.role
    user.role = serializer.validated_data['role']
    user.save(update_fields=['role', 'updated_at'])
    create_audit_log(
        request=request,
        action='role_change',
        model_name='User',
        object_id=user.pk,
        object_name=user.username,
        changes={'role': {'old': old_role, 'new': user.role}},
    )
    return Response(UserSerializer(user).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Get current user with role-based capabilities"""
    user = request.user
    user.ensure_role()
    user_data = UserSerializer(user).data

    is_admin = is_admin_user(user)
    is_staff = is_staff_member(user)
    user_data['is_admin'] = is_admin
    user_data['can_access_operations'] = is_staff
    user_data['can_access_finance'] = is_admin
    user_data['can_manage_users'] = is_admin
    user_data['can_track_own_shipments'] = True
    return Response(user_data)


# Setting views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def setting_list_create(request):
    """List all settings or create a new setting (Admin only)"""
    if not is_admin_user(request.user):
        return Response({'error': 'Only Admin users can manage settings'}, status=status.HTTP_403_FORBIDDEN)
    if request.method == 'GET':
        settings = Setting.objects.all().order_by('key')
        serializer = SettingSerializer(settings, many=True)
        return Response(serializer.data)
    else:
        serializer = SettingSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def setting_detail(request, pk):
    """Retrieve, update or delete a setting (Admin only)"""
    if not is_admin_user(request.user):
        return Response({'error': 'Only Admin users can manage settings'}, status=status.HTTP_403_FORBIDDEN)
    setting = get_object_or_404(Setting, pk=pk)

    if request.method == 'GET':
        serializer = SettingSerializer(setting)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = SettingSerializer(setting, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        setting.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# AuditLog views (read-only)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_list(request):
    """List audit logs with filtering; non-admins only see their own"""
    queryset = AuditLog.objects.select_related('user').all()

    if not is_admin_user(request.user):
        queryset = queryset.filter(user=request.user)

    action_filter = request.query_params.get('action', None)
    if action_filter:
        queryset = queryset.filter(action=action_filter)

    model_filter = request.query_params.get('model', None)
    if model_filter:
        queryset = queryset.filter(model_name=model_filter)

    reference = request.query_params.get('reference', None)
    if reference:
        queryset = queryset.filter(object_reference__icontains=reference)

    date_from = request.query_params.get('date_from', None)
    date_to = request.query_params.get('date_to', None)
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)

    queryset = queryset.order_by('-created_at')
    serializer = AuditLogSerializer(queryset, many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_detail(request, pk):
    """Retrieve an audit log"""
    audit_log = get_object_or_404(AuditLog, pk=pk)

    if not is_admin_user(request.user) and audit_log.user != request.user:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    serializer = AuditLogSerializer(audit_log)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def global_search(request):
    """Global search across shipments, trips, customers, branch entries and vehicles"""
    if not is_staff_member(request.user):
        return Response({'error': 'Only admin and employee users can search'}, status=status.HTTP_403_FORBIDDEN)

    query = request.query_params.get('q', '').strip()

    if not query:
        return Response({
            'shipments': [],
            'trips': [],
            'customers': [],
            'branch_entries': [],
            'vehicles': [],
        })

    from backend.shipments.models import Shipment
    from backend.shipments.filters import ShipmentFilter
    from backend.shipments.serializers import ShipmentSerializer
    from backend.trips.models import Trip
    from backend.trips.serializers import TripListSerializer
    from backend.parties.models import Customer
    from backend.parties.serializers import CustomerSerializer
    from backend.inventory.models import BranchEntry
    from backend.inventory.serializers import BranchEntrySerializer
    from backend.fleet.models import Vehicle
    from backend.fleet.serializers import VehicleSerializer

    results = {}

    shipments = ShipmentFilter({'search': query}, queryset=Shipment.objects.all()).qs[:20]
    results['shipments'] = ShipmentSerializer(shipments, many=True).data

    trips = Trip.objects.filter(
        Q(trip_name__icontains=query) |
        Q(destination__icontains=query) |
        Q(vehicle_number__icontains=query) |
        Q(owner_name__icontains=query)
    )[:20]
    results['trips'] = TripListSerializer(trips, many=True).data

    customers = Customer.objects.filter(
        Q(name__icontains=query) |
        Q(phone__icontains=query) |
        Q(email__icontains=query)
    )[:20]
    results['customers'] = CustomerSerializer(customers, many=True).data

    entries = BranchEntry.objects.prefetch_related('items').filter(
        Q(bol_number__icontains=query) |
        Q(branch_name__icontains=query) |
        Q(sender_name__icontains=query) |
        Q(items__item_description__icontains=query)
    ).distinct()[:20]
    results['branch_entries'] = BranchEntrySerializer(entries, many=True).data

    vehicles = Vehicle.objects.filter(
        Q(vehicle_number__icontains=query) |
        Q(owner_name__icontains=query)
    )[:20]
    results['vehicles'] = VehicleSerializer(vehicles, many=True).data

    return Response(results)
