import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from django.db.models import Q, Count
from backend.core.permissions import IsStaffMember
from .models import Vehicle, Driver
from .serializers import VehicleSerializer, DriverSerializer

logger = logging.getLogger('backend.fleet')


def _driver_queryset():
    return Driver.objects.annotate(
        total_trips=Count('stations__trip', distinct=True),
        total_shipments=Count('stations__shipments', distinct=True),
    )


# Vehicle views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffMember])
def vehicle_list_create(request):
    """List all vehicles or create a new vehicle"""
    if request.method == 'GET':
        queryset = Vehicle.objects.all()
        search = request.query_params.get('search', None)
        vehicle_status = request.query_params.get('status', None)
        if search:
            queryset = queryset.filter(
                Q(vehicle_number__icontains=search) |
                Q(owner_name__icontains=search) |
                Q(owner_phone__icontains=search) |
                Q(vehicle_type__icontains=search)
            )
        if vehicle_status:
            queryset = queryset.filter(status=vehicle_status)
        serializer = VehicleSerializer(queryset, many=True)
        return Response(serializer.data)
    else:
        serializer = VehicleSerializer(data=request.data)
        if serializer.is_valid():
            vehicle = serializer.save()
            logger.info(f"Vehicle {vehicle.vehicle_number} created by {request.user.username}")
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaffMember])
def vehicle_detail(request, pk):
    """Retrieve, update or delete a vehicle"""
    vehicle = get_object_or_404(Vehicle, pk=pk)

    if request.method == 'GET':
        return Response(VehicleSerializer(vehicle).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = VehicleSerializer(vehicle, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        vehicle.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


# Driver views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffMember])
def driver_list_create(request):
    """List drivers with trip/shipment counts or create a new driver"""
    if request.method == 'GET':
        queryset = _driver_queryset()
        search = request.query_params.get('search', None)
        driver_status = request.query_params.get('status', None)
        if search:
            queryset = queryset.filter(
                Q(driver_name__icontains=search) |
                Q(driver_phone__icontains=search) |
                Q(location__icontains=search)
            )
        if driver_status:
            queryset = queryset.filter(status=driver_status)
        serializer = DriverSerializer(queryset, many=True)
        return Response(serializer.data)
    else:
        serializer = DriverSerializer(data=request.data)
        if serializer.is_valid():
            driver = serializer.save()
            logger.info(f"Driver {driver.driver_name} created by {request.user.username}")
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaffMember])
def driver_detail(request, pk):
    """Retrieve, update or delete a driver"""
    driver = get_object_or_404(_driver_queryset(), pk=pk)

    if request.method == 'GET':
        return Response(DriverSerializer(driver).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = DriverSerializer(driver, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        driver.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)
