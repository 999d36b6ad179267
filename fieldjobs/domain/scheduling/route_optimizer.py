"""
Route sequencing for a day's stops.

Uses the greedy nearest-neighbor heuristic: from the current position always drive to the
closest unvisited stop. This is a TSP approximation, not an optimal tour. Equidistant stops
resolve to the first one in input order.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Optional, Sequence

from ... import config
from .geo import distance_between
from .schemas import GeoStop, Location, RouteResult, RouteStop

logger = logging.getLogger(__name__)


class RouteOptimizer:
    def __init__(
        self,
        average_speed_mph: float = config.ROUTE_AVERAGE_SPEED_MPH,
        service_minutes: int = config.ROUTE_SERVICE_MINUTES,
    ):
        self.average_speed_mph = average_speed_mph
        self.service_minutes = service_minutes

    def optimize(
        self,
        stops: Sequence[GeoStop],
        origin: Location,
        departure_time: Optional[datetime] = None,
    ) -> RouteResult:
        routable = [stop for stop in stops if stop.is_routable]
        if len(routable) <= 1:
            return RouteResult()

        clock = departure_time or datetime.now()
        route = self._nearest_neighbor(routable, origin, clock)

        total_distance = sum(stop.distance_from_previous for stop in route)
        drive_minutes = total_distance / self.average_speed_mph * 60
        total_duration = round(drive_minutes + self.service_minutes * len(route))

        original_distance = self._original_distance(routable, origin)
        savings = 0.0
        if original_distance > 0:
            savings = (original_distance - total_distance) / original_distance * 100

        logger.info(
            f"📊 Route optimized: {len(route)} stops, {total_distance:.2f} mi, "
            f"savings {savings:.1f}%"
        )
        return RouteResult(
            optimized_route=route,
            total_distance=total_distance,
            total_duration_minutes=total_duration,
            savings_percent=savings,
        )

    def _nearest_neighbor(
        self, stops: list[GeoStop], origin: Location, clock: datetime
    ) -> list[RouteStop]:
        route: list[RouteStop] = []
        visited: set[int] = set()
        current = origin

        while len(visited) < len(stops):
            nearest_index = None
            nearest_distance = math.inf

            for index, stop in enumerate(stops):
                if index in visited:
                    continue
                distance = distance_between(current, stop)
                # Strict comparison keeps the first of equidistant stops
                if distance < nearest_distance:
                    nearest_distance = distance
                    nearest_index = index

            if nearest_index is None:
                break

            stop = stops[nearest_index]
            clock = clock + timedelta(minutes=nearest_distance / self.average_speed_mph * 60)
            route.append(
                RouteStop(
                    job_id=stop.job_id,
                    address=stop.address,
                    sequence=len(route) + 1,
                    arrival_time=clock,
                    duration_minutes=self.service_minutes,
                    distance_from_previous=nearest_distance,
                )
            )
            clock = clock + timedelta(minutes=self.service_minutes)
            visited.add(nearest_index)
            current = stop

        return route

    @staticmethod
    def _original_distance(stops: list[GeoStop], origin: Location) -> float:
        """Distance when visiting the stops in the order given."""
        total = 0.0
        current = origin
        for stop in stops:
            total += distance_between(current, stop)
            current = stop
        return total
