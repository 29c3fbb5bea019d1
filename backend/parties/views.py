import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q
from django.shortcuts import get_object_or_404
from django.core.cache import cache
from backend.core.currency import aggregate_by_currency, subtract_totals, totals_to_strings
from backend.core.permissions import IsStaffMember
from .models import Customer
from .serializers import CustomerSerializer
from .utils import sync_customers_from_shipments

logger = logging.getLogger('backend.parties')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffMember])
def customer_list_create(request):
    """List all customers or create a new customer"""
    if request.method == 'GET':
        search = request.query_params.get('search', '').strip()
        customer_type = request.query_params.get('type', '').strip()

        from backend.core.model_cache import get_customer_list_cache_key, CUSTOMER_LIST_CACHE_TTL
        cache_key = get_customer_list_cache_key(search, customer_type)
        cached_data = cache.get(cache_key)
        if cached_data is not None:
            response = Response(cached_data)
            response['Cache-Control'] = 'private, max-age=300, stale-while-revalidate=600'
            return response

        queryset = Customer.objects.all().order_by('-created_at')
        if search:
            queryset = queryset.filter(Q(name__icontains=search) | Q(phone__icontains=search))
        if customer_type and customer_type != 'all':
            # 'both' customers show up under either role
            queryset = queryset.filter(Q(customer_type=customer_type) | Q(customer_type='both'))
        response_data = CustomerSerializer(queryset, many=True).data

        cache.set(cache_key, response_data, CUSTOMER_LIST_CACHE_TTL)

        response = Response(response_data)
        response['Cache-Control'] = 'private, max-age=300, stale-while-revalidate=600'
        return response
    else:
        serializer = CustomerSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaffMember])
def customer_detail(request, pk):
    """Retrieve, update or delete a customer"""
    customer = get_object_or_404(Customer, pk=pk)

    if request.method == 'GET':
        return Response(CustomerSerializer(customer).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = CustomerSerializer(customer, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        customer.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaffMember])
def customer_sync_from_shipments(request):
    """Create customers for shipment senders/recipients that are not registered yet"""
    from backend.shipments.models import Shipment
    shipments = Shipment.objects.only('sender_name', 'sender_phone', 'recipient_name', 'recipient_phone')
    created = sync_customers_from_shipments(shipments)
    return Response({
        'created': len(created),
        'customers': CustomerSerializer(created, many=True).data,
    }, status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffMember])
def customer_summary(request, pk):
    """Shipment count and debt/payment balance per currency for a customer"""
    from backend.shipments.models import Shipment
    from backend.finance.models import FinancialTransaction

    customer = get_object_or_404(Customer, pk=pk)

    shipments = Shipment.objects.none()
    if customer.phone:
        shipments = Shipment.objects.filter(
            Q(sender_phone=customer.phone) | Q(recipient_phone=customer.phone)
        )
    last_shipment = shipments.order_by('-created_at').first()

    transactions = FinancialTransaction.objects.filter(customer=customer)
    total_debt = aggregate_by_currency(transactions.filter(transaction_type='debt'))
    total_paid = aggregate_by_currency(transactions.filter(transaction_type='payment'))

    return Response({
        'customer': CustomerSerializer(customer).data,
        'total_shipments': shipments.count(),
        'last_shipment_date': last_shipment.created_at if last_shipment else None,
        'total_debt': totals_to_strings(total_debt),
        'total_paid': totals_to_strings(total_paid),
        'balance': totals_to_strings(subtract_totals(total_debt, total_paid)),
    })
