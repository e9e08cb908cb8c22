"""
Eligible resource matching tests.
"""

from datetime import datetime

import pytest

from dispatch.app.domain.dispatch.resource_matcher import find_eligible, rank_vehicles
from dispatch.app.models.resource_enums import DriverAvailability, VehicleAvailability, ResourceType
from dispatch.app.models.resource_lock import ResourceLock
from dispatch.app.models.trip_enums import TripCategory


@pytest.mark.asyncio
async def test_capacity_filter_excludes_small_vehicles(db_session, make_trip, make_vehicle, make_driver):
    await make_driver()
    small = await make_vehicle(seating_capacity=2)
    exact = await make_vehicle(seating_capacity=4)
    large = await make_vehicle(seating_capacity=12, vehicle_type="Mini Bus")
    trip = await make_trip(passenger_count=4)

    eligible = await find_eligible(db_session, trip)

    ids = [v.id for v in eligible.vehicles]
    assert small.id not in ids
    assert ids == [exact.id, large.id]


@pytest.mark.asyncio
async def test_only_available_active_drivers(db_session, make_trip, make_driver, make_vehicle):
    available = await make_driver()
    await make_driver(availability=DriverAvailability.ON_LEAVE)
    await make_driver(availability=DriverAvailability.OFFLINE)
    await make_driver(availability=DriverAvailability.MAINTENANCE)
    await make_driver(is_active=False)
    await make_vehicle()
    trip = await make_trip()

    eligible = await find_eligible(db_session, trip)

    assert [d.id for d in eligible.drivers] == [available.id]


@pytest.mark.asyncio
async def test_unavailable_vehicles_excluded(db_session, make_trip, make_driver, make_vehicle):
    await make_driver()
    ok = await make_vehicle()
    await make_vehicle(availability=VehicleAvailability.MAINTENANCE)
    await make_vehicle(availability=VehicleAvailability.UNAVAILABLE)
    await make_vehicle(availability=VehicleAvailability.BOOKED)
    await make_vehicle(is_active=False)
    trip = await make_trip()

    eligible = await find_eligible(db_session, trip)

    assert [v.id for v in eligible.vehicles] == [ok.id]


@pytest.mark.asyncio
async def test_locked_resources_excluded_even_if_flag_says_available(
    db_session, make_trip, make_driver, make_vehicle
):
    driver = await make_driver()
    vehicle = await make_vehicle()
    holder = await make_trip()
    db_session.add_all([
        ResourceLock(resource_type=ResourceType.DRIVER, resource_id=driver.id, trip_id=holder.trip_id),
        ResourceLock(resource_type=ResourceType.VEHICLE, resource_id=vehicle.id, trip_id=holder.trip_id),
    ])
    await db_session.commit()

    eligible = await find_eligible(db_session, await make_trip())

    assert eligible.drivers == []
    assert eligible.vehicles == []
    assert eligible.no_resources_available is True


@pytest.mark.asyncio
async def test_released_locks_do_not_exclude(db_session, make_trip, make_driver, make_vehicle):
    driver = await make_driver()
    await make_vehicle()
    holder = await make_trip()
    db_session.add(ResourceLock(
        resource_type=ResourceType.DRIVER, resource_id=driver.id,
        trip_id=holder.trip_id, released_at=datetime.utcnow()
    ))
    await db_session.commit()

    eligible = await find_eligible(db_session, await make_trip())

    assert [d.id for d in eligible.drivers] == [driver.id]
    assert eligible.no_resources_available is False


@pytest.mark.asyncio
async def test_drivers_ranked_by_rating_then_experience(db_session, make_trip, make_driver):
    veteran = await make_driver(rating=4.5, experience_years=12)
    rookie = await make_driver(rating=4.5, experience_years=1)
    star = await make_driver(rating=4.9, experience_years=2)
    unrated = await make_driver(rating=0.0, experience_years=20)

    eligible = await find_eligible(db_session, await make_trip())

    assert [d.id for d in eligible.drivers] == [star.id, veteran.id, rookie.id, unrated.id]


@pytest.mark.asyncio
async def test_category_is_advisory(db_session, make_trip, make_vehicle):
    casual = await make_vehicle(seating_capacity=4, category=TripCategory.CASUAL)
    safari = await make_vehicle(seating_capacity=4, category=TripCategory.SAFARI, vehicle_type="SUV")
    trip = await make_trip(category=TripCategory.SAFARI)

    eligible = await find_eligible(db_session, trip)

    # Both stay eligible; the matching category sorts first at equal capacity
    assert [v.id for v in eligible.vehicles] == [safari.id, casual.id]


def test_vehicle_ranking_prefers_capacity_over_category():
    class V:
        def __init__(self, id, seats, category, vehicle_type):
            self.id = id
            self.seating_capacity = seats
            self.category = category
            self.vehicle_type = vehicle_type

    vehicles = [
        V(1, 8, TripCategory.TOUR, "Van"),
        V(2, 4, TripCategory.CASUAL, "Car"),
        V(3, 4, TripCategory.CASUAL, "SUV"),
        V(4, 4, TripCategory.TOUR, "Car"),
    ]

    ranked = rank_vehicles(vehicles, category=TripCategory.TOUR, vehicle_type="suv")

    assert [v.id for v in ranked] == [4, 3, 2, 1]


@pytest.mark.asyncio
async def test_empty_pools_are_a_result(db_session, make_trip):
    eligible = await find_eligible(db_session, await make_trip(passenger_count=40))
    assert eligible.drivers == []
    assert eligible.vehicles == []
    assert eligible.no_resources_available is True
