"""Location service for warehouse and site management."""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from stock_ledger.exceptions import RecordNotFoundException, ResourceConflictException
from stock_ledger.models.location import Location
from stock_ledger.services.base import BaseService


class LocationService(BaseService):
    """Service class for location management operations."""

    def create_location(
        self,
        code: str,
        name: str,
        address: str | None = None,
        description: str | None = None,
    ) -> Location:
        """Create a new location identified by a unique short code."""
        existing = self.db.execute(
            select(Location).where(Location.code == code)
        ).scalar_one_or_none()
        if existing is not None:
            raise ResourceConflictException("Location", f"code {code}")

        location = Location(
            code=code,
            name=name,
            address=address,
            description=description,
        )
        self.db.add(location)
        try:
            self.db.flush()
        except IntegrityError as exc:
            self.db.rollback()
            raise ResourceConflictException("Location", f"code {code}") from exc
        return location

    def find_location(self, location_id: int) -> Location | None:
        """Return the location with this id, or None."""
        return self.db.get(Location, location_id)

    def get_location(self, location_id: int) -> Location:
        """Get location by id."""
        location = self.find_location(location_id)
        if location is None:
            raise RecordNotFoundException("Location", location_id)
        return location

    def get_location_by_code(self, code: str) -> Location:
        """Get location by its short code."""
        stmt = select(Location).where(Location.code == code)
        location = self.db.execute(stmt).scalar_one_or_none()
        if location is None:
            raise RecordNotFoundException("Location", code)
        return location

    def list_locations(self) -> list[Location]:
        """List all locations ordered by name."""
        stmt = select(Location).order_by(Location.name, Location.id)
        return list(self.db.execute(stmt).scalars().all())
