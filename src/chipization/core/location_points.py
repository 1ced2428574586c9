"""Location point store."""

import math

from ..db.models import LocationPoint
from .errors import ConflictError, NotFoundError, ValidationFailure
from .service import CoreService

LATITUDE_RANGE = (-90.0, 90.0)
LONGITUDE_RANGE = (-180.0, 180.0)


class LocationPointStore(CoreService):
    """Create, move and delete geographic points."""

    def _check_coordinates(self, operation: str, latitude, longitude) -> None:
        for label, value, (low, high) in (
            ("latitude", latitude, LATITUDE_RANGE),
            ("longitude", longitude, LONGITUDE_RANGE),
        ):
            if value is None or not math.isfinite(value) or not low <= value <= high:
                raise self.reject(
                    ValidationFailure,
                    operation,
                    f"{label} must lie within [{low:g}, {high:g}]",
                    latitude=latitude,
                    longitude=longitude,
                )

    async def get(self, point_id: int) -> LocationPoint:
        point = await self.repos.location_point.get_by_id(point_id)
        if point is None:
            raise NotFoundError(
                f"Location point {point_id} not found", context={"point_id": point_id}
            )
        return point

    async def add(self, latitude: float, longitude: float) -> LocationPoint:
        async with self.transaction():
            self._check_coordinates("location.add", latitude, longitude)
            if await self.repos.location_point.get_by_coordinates(latitude, longitude):
                raise self.reject(
                    ConflictError,
                    "location.add",
                    "a location point with these coordinates already exists",
                    latitude=latitude,
                    longitude=longitude,
                )
            point = await self.repos.location_point.create(latitude, longitude)

        self.logger.info(f"Created location point {point.id} ({latitude}, {longitude})")
        return point

    async def update(self, point_id: int, latitude: float, longitude: float) -> LocationPoint:
        async with self.transaction():
            point = await self.repos.location_point.get_by_id(point_id)
            if point is None:
                raise self.reject(
                    NotFoundError,
                    "location.update",
                    f"location point {point_id} not found",
                    point_id=point_id,
                )
            self._check_coordinates("location.update", latitude, longitude)

            existing = await self.repos.location_point.get_by_coordinates(latitude, longitude)
            if existing is not None and existing.id != point.id:
                raise self.reject(
                    ConflictError,
                    "location.update",
                    "a location point with these coordinates already exists",
                    point_id=point_id,
                    latitude=latitude,
                    longitude=longitude,
                )
            point.latitude = latitude
            point.longitude = longitude
            await self.repos.location_point.save(point)

        self.logger.info(f"Moved location point {point_id} to ({latitude}, {longitude})")
        return point

    async def remove(self, point_id: int) -> None:
        async with self.transaction():
            point = await self.repos.location_point.get_by_id(point_id)
            if point is None:
                raise self.reject(
                    NotFoundError,
                    "location.remove",
                    f"location point {point_id} not found",
                    point_id=point_id,
                )
            if await self.repos.location_point.is_referenced(point_id):
                raise self.reject(
                    ConflictError,
                    "location.remove",
                    "location point is a chipping location or has visit records",
                    point_id=point_id,
                )
            await self.repos.location_point.delete(point)

        self.logger.info(f"Removed location point {point_id}")
