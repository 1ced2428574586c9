"""SQLAlchemy models for the Chipization tracker.

Entities reference each other through stored foreign identifiers; the only
ownership edge is Animal -> AnimalVisitedLocation (cascade delete).
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.types import TypeDecorator

from ..core.enums import LifeStatus, Role
from .database import Base


class UTCDateTime(TypeDecorator):
    """Timezone-aware UTC datetime that round-trips through SQLite."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(timezone.utc)
        if dialect.name == "sqlite":
            # SQLite has no timezone storage; persist naive UTC
            return value.replace(tzinfo=None)
        return value

    def process_result_value(self, value, dialect):
        if value is None:
            return value
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


animal_type_links = Table(
    "animal_type_links",
    Base.metadata,
    Column(
        "animal_id",
        Integer,
        ForeignKey("animals.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "animal_type_id",
        Integer,
        ForeignKey("animal_types.id"),
        primary_key=True,
    ),
    Index("ix_animal_type_links_type", "animal_type_id"),
)


class Account(Base):
    """A registered operator; credited as chipper on animals."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    password_salt = Column(String(64), nullable=False)
    password_hash = Column(String(128), nullable=False)
    role = Column(String(20), nullable=False, default=Role.USER.value)
    created_at = Column(UTCDateTime(), nullable=False, default=_utcnow)

    def verify_password(self, password: str) -> bool:
        """Check a plain password against the stored PBKDF2 hash."""
        from ..auth.security import verify_password

        return verify_password(password, self.password_salt, self.password_hash)

    def __repr__(self) -> str:
        return f"<Account(id={self.id}, email='{self.email}', role='{self.role}')>"


class AnimalType(Base):
    """A named animal-type tag. Names are unique (case-sensitive)."""

    __tablename__ = "animal_types"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<AnimalType(id={self.id}, name='{self.name}')>"


class LocationPoint(Base):
    """A geographic point used as chipping origin or visit target."""

    __tablename__ = "location_points"

    id = Column(Integer, primary_key=True, autoincrement=True)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)

    __table_args__ = (
        UniqueConstraint("latitude", "longitude", name="uq_location_point_coordinates"),
    )

    def __repr__(self) -> str:
        return f"<LocationPoint(id={self.id}, lat={self.latitude}, lon={self.longitude})>"


class Animal(Base):
    """A chipped animal."""

    __tablename__ = "animals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    weight = Column(Float, nullable=False)
    height = Column(Float, nullable=False)
    length = Column(Float, nullable=False)
    gender = Column(String(10), nullable=False)
    life_status = Column(String(10), nullable=False, default=LifeStatus.ALIVE.value)
    chipping_date_time = Column(UTCDateTime(), nullable=False)
    chipper_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    chipping_location_id = Column(
        Integer, ForeignKey("location_points.id"), nullable=False
    )
    death_date_time = Column(UTCDateTime(), nullable=True)
    updated_at = Column(UTCDateTime(), nullable=True)
    # Optimistic concurrency counter; bumped on every committed mutation
    version = Column(Integer, nullable=False)

    types = relationship(
        "AnimalType",
        secondary=animal_type_links,
        order_by="AnimalType.id",
        lazy="selectin",
    )
    visited_locations = relationship(
        "AnimalVisitedLocation",
        back_populates="animal",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="[AnimalVisitedLocation.visited_at, AnimalVisitedLocation.id]",
    )

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("ix_animal_chipper", "chipper_id"),
        Index("ix_animal_chipping_location", "chipping_location_id"),
    )

    @property
    def type_ids(self):
        return [animal_type.id for animal_type in self.types]

    @property
    def is_dead(self) -> bool:
        return self.life_status == LifeStatus.DEAD

    def __repr__(self) -> str:
        return f"<Animal(id={self.id}, life_status='{self.life_status}')>"


class AnimalVisitedLocation(Base):
    """A timestamped observation of an animal at a location point."""

    __tablename__ = "animal_visited_locations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    animal_id = Column(
        Integer, ForeignKey("animals.id", ondelete="CASCADE"), nullable=False
    )
    location_point_id = Column(
        Integer, ForeignKey("location_points.id"), nullable=False
    )
    visited_at = Column(UTCDateTime(), nullable=False)

    animal = relationship("Animal", back_populates="visited_locations")

    __table_args__ = (
        Index("ix_visit_animal_time", "animal_id", "visited_at", "id"),
        Index("ix_visit_location_point", "location_point_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<AnimalVisitedLocation(id={self.id}, animal_id={self.animal_id}, "
            f"point={self.location_point_id}, at={self.visited_at})>"
        )
