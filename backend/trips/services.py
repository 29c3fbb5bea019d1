"""
Trip workflows: creating trips with stations, moving shipments in and out of
trips, manifests, status cascades and deletion.
"""
import logging

from django.db import transaction

from backend.core.exceptions import DispatchError
from backend.shipments.models import Shipment
from backend.shipments.services import apply_status, apply_status_to_all
from backend.shipments.status import PENDING, IN_TRANSIT, TRIP_TO_SHIPMENT_STATUS
from .models import Trip, TripStation

logger = logging.getLogger('backend.trips')


def _load_shipments(shipment_ids):
    shipment_ids = list(dict.fromkeys(shipment_ids or []))
    shipments = list(Shipment.objects.select_for_update().filter(pk__in=shipment_ids))
    missing = set(shipment_ids) - {s.pk for s in shipments}
    if missing:
        raise DispatchError(f"Shipments not found: {sorted(missing)}", field='shipment_ids')
    return shipments


def assign_shipments(trip, shipment_ids, station=None):
    """Attach shipments to trip (and station); they ride on the trip's vehicle"""
    shipments = _load_shipments(shipment_ids)
    taken = [s.shipment_number for s in shipments if s.trip_id and s.trip_id != trip.pk]
    if taken:
        raise DispatchError(f"Shipments already assigned to another trip: {', '.join(taken)}", field='shipment_ids')
    for shipment in shipments:
        shipment.trip = trip
        shipment.station = station
        shipment.vehicle = trip.vehicle
        shipment.save(update_fields=['trip', 'station', 'vehicle', 'updated_at'])
    return shipments


def release_shipments(shipments, user=None, notes=''):
    """Detach shipments from their trip and put them back in the pending pool"""
    return apply_status_to_all(shipments, PENDING, user=user, notes=notes, trip=None, station=None, vehicle=None)


@transaction.atomic
def create_trip_with_stations(trip_data, stations_data, user=None):
    """
    Create a trip, its ordered stations and assign each station's shipments.
    stations_data items carry station_name, driver, commission_percentage,
    notes and shipment_ids.
    """
    vehicle = trip_data.get('vehicle')
    trip = Trip.objects.create(
        vehicle_number=vehicle.vehicle_number if vehicle else '',
        created_by=user,
        **trip_data
    )
    for index, station_data in enumerate(stations_data):
        driver = station_data['driver']
        station = TripStation.objects.create(
            trip=trip,
            order_index=index,
            station_name=station_data['station_name'],
            driver=driver,
            driver_name=driver.driver_name,
            commission_percentage=station_data['commission_percentage'],
            notes=station_data.get('notes', ''),
        )
        if station_data.get('shipment_ids'):
            assign_shipments(trip, station_data['shipment_ids'], station=station)
    logger.info(f"Trip '{trip.trip_name}' created with {len(stations_data)} stations")
    return trip


@transaction.atomic
def create_manifest(vehicle, shipment_ids, user=None, trip_name=None, notes=''):
    """
    Load unassigned shipments onto a vehicle. The new trip starts pending while
    the shipments go straight to in transit.
    """
    shipments = _load_shipments(shipment_ids)
    if not shipments:
        raise DispatchError('Select at least one shipment', field='shipment_ids')
    assigned = [s.shipment_number for s in shipments if s.trip_id]
    if assigned:
        raise DispatchError(f"Shipments already assigned to a trip: {', '.join(assigned)}", field='shipment_ids')

    governorates = sorted({s.governorate for s in shipments if s.governorate})
    trip = Trip.objects.create(
        trip_name=trip_name or f"Manifest {vehicle.vehicle_number}",
        source='manifest',
        vehicle=vehicle,
        vehicle_number=vehicle.vehicle_number,
        owner_name=vehicle.owner_name,
        destination=', '.join(governorates),
        destination_cities=governorates,
        status=PENDING,
        notes=notes or '',
        created_by=user,
    )
    apply_status_to_all(
        shipments, IN_TRANSIT, user=user, notes=f"Loaded on {vehicle.vehicle_number}",
        trip=trip, vehicle=vehicle
    )
    logger.info(f"Manifest trip {trip.pk} created for vehicle {vehicle.vehicle_number} with {len(shipments)} shipments")
    return trip


@transaction.atomic
def change_trip_status(trip, status, user=None):
    """Set the trip status and force the matching status on all of its shipments"""
    trip.status = status
    trip.save(update_fields=['status', 'updated_at'])
    shipment_status = TRIP_TO_SHIPMENT_STATUS[status]
    changed = 0
    for shipment in trip.shipments.all():
        if apply_status(shipment, shipment_status, user=user, notes=f"Trip {trip.trip_name}"):
            changed += 1
    logger.info(f"Trip {trip.pk} set to '{status}', {changed} shipments updated")
    return changed


@transaction.atomic
def delete_trip(trip, user=None):
    """Release every shipment of the trip, then delete it"""
    shipments = list(trip.shipments.all())
    release_shipments(shipments, user=user, notes=f"Trip {trip.trip_name} deleted")
    trip_id = trip.pk
    trip.delete()
    logger.info(f"Trip {trip_id} deleted, {len(shipments)} shipments released")
    return len(shipments)
