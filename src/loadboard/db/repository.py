"""SQLAlchemy repository for persistent storage."""

import json
import logging
from contextlib import contextmanager
from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Iterator, Optional

from sqlalchemy import (
    create_engine,
    func,
    CheckConstraint,
    Column,
    String,
    Integer,
    Float,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Text,
    Index,
)
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from ..config import settings
from ..exceptions import DuplicateKey, PersistenceError
from ..models import (
    Coordinates,
    DriverDetails,
    Load,
    LoadWithOwner,
    OwnerSummary,
    Product,
    Profile,
    Receiver,
    SubDriver,
    Truck,
)
from ..models.enums import LoadStatus, UserRole

logger = logging.getLogger(__name__)

Base = declarative_base()


# =============================================================================
# SQLAlchemy Models (Database Tables)
# =============================================================================

class ProfileRecord(Base):
    """SQLAlchemy model for profiles table."""

    __tablename__ = "profiles"

    id = Column(String(64), primary_key=True)
    full_name = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=False)
    country_code = Column(String(8), nullable=False, default="+966")
    role = Column(String(16), nullable=False, index=True)
    email = Column(String(255))
    created_at = Column(DateTime, default=datetime.utcnow, index=True)


class DriverDetailsRecord(Base):
    """SQLAlchemy model for driver_details table (one row per driver)."""

    __tablename__ = "driver_details"

    owner_id = Column(String(64), ForeignKey("profiles.id"), primary_key=True)
    truck_type = Column(String(50))
    body_type = Column(String(50))
    dimensions = Column(String(50))
    plate_number = Column(String(32))
    is_available = Column(Boolean, default=True, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class TruckRecord(Base):
    """SQLAlchemy model for trucks table."""

    __tablename__ = "trucks"

    id = Column(String(36), primary_key=True)
    owner_id = Column(String(64), ForeignKey("profiles.id"), nullable=False, index=True)
    plate_number = Column(String(32), nullable=False)
    brand = Column(String(100))
    model_year = Column(Integer)
    truck_type = Column(String(50))
    created_at = Column(DateTime, default=datetime.utcnow)


class SubDriverRecord(Base):
    """SQLAlchemy model for sub_drivers table."""

    __tablename__ = "sub_drivers"

    id = Column(String(36), primary_key=True)
    carrier_id = Column(String(64), ForeignKey("profiles.id"), nullable=False, index=True)
    driver_name = Column(String(255), nullable=False)
    driver_phone = Column(String(32), nullable=False)
    id_number = Column(String(32))
    created_at = Column(DateTime, default=datetime.utcnow)


class LoadRecord(Base):
    """SQLAlchemy model for loads table."""

    __tablename__ = "loads"

    id = Column(String(36), primary_key=True)
    owner_id = Column(String(64), ForeignKey("profiles.id"), nullable=False, index=True)

    # Route
    origin = Column(String(255), nullable=False)
    destination = Column(String(255), nullable=False)
    origin_lat = Column(Float)
    origin_lng = Column(Float)
    dest_lat = Column(Float)
    dest_lng = Column(Float)
    distance_km = Column(Float)
    duration_minutes = Column(Float)

    # Cargo
    weight = Column(Float, nullable=False, default=0)
    price = Column(Float, nullable=False, default=0)
    truck_type_required = Column(String(50), index=True)
    body_type = Column(String(50))
    cargo_type = Column(String(100))
    package_type = Column(String(100))
    description = Column(Text, default="")
    pickup_date = Column(Date)
    products = Column(Text)  # JSON array

    # Receiver
    receiver_name = Column(String(255))
    receiver_phone = Column(String(32))
    receiver_address = Column(Text)

    # Assignment
    status = Column(String(20), nullable=False, default="available", index=True)
    driver_id = Column(String(64), ForeignKey("profiles.id"), index=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        Index("ix_loads_status_created", "status", "created_at"),
        CheckConstraint("weight >= 0", name="ck_loads_weight"),
        CheckConstraint("price >= 0", name="ck_loads_price"),
        CheckConstraint(
            "(status IN ('in_progress', 'completed') AND driver_id IS NOT NULL) OR "
            "(status NOT IN ('in_progress', 'completed') AND driver_id IS NULL)",
            name="ck_loads_driver_assignment",
        ),
    )


# =============================================================================
# Record <-> Model mapping
# =============================================================================

def _to_profile(record: ProfileRecord) -> Profile:
    return Profile(
        id=record.id,
        full_name=record.full_name,
        phone=record.phone,
        country_code=record.country_code,
        role=record.role,
        email=record.email,
        created_at=record.created_at,
    )


def _to_driver_details(record: DriverDetailsRecord) -> DriverDetails:
    return DriverDetails(
        owner_id=record.owner_id,
        truck_type=record.truck_type,
        body_type=record.body_type,
        dimensions=record.dimensions,
        plate_number=record.plate_number,
        is_available=bool(record.is_available),
        updated_at=record.updated_at,
    )


def _coords(lat: Optional[float], lng: Optional[float]) -> Optional[Coordinates]:
    if lat is None or lng is None:
        return None
    return Coordinates(lat=lat, lng=lng)


def _to_load(record: LoadRecord, owner: Optional[ProfileRecord]) -> LoadWithOwner:
    receiver = None
    if record.receiver_name or record.receiver_phone or record.receiver_address:
        receiver = Receiver(
            name=record.receiver_name,
            phone=record.receiver_phone,
            address=record.receiver_address,
        )

    owner_summary = None
    if owner is not None:
        owner_summary = OwnerSummary(
            full_name=owner.full_name,
            phone=owner.phone,
            country_code=owner.country_code,
        )

    return LoadWithOwner(
        id=record.id,
        owner_id=record.owner_id,
        origin=record.origin,
        destination=record.destination,
        origin_coords=_coords(record.origin_lat, record.origin_lng),
        destination_coords=_coords(record.dest_lat, record.dest_lng),
        weight=record.weight,
        price=record.price,
        truck_type_required=record.truck_type_required,
        body_type=record.body_type,
        cargo_type=record.cargo_type,
        package_type=record.package_type,
        description=record.description or "",
        pickup_date=record.pickup_date,
        receiver=receiver,
        products=[Product(**p) for p in json.loads(record.products or "[]")],
        status=record.status,
        driver_id=record.driver_id,
        distance_km=record.distance_km,
        duration_minutes=record.duration_minutes,
        created_at=record.created_at,
        updated_at=record.updated_at,
        owner=owner_summary,
    )


# =============================================================================
# Repository Class
# =============================================================================

class Repository:
    """Repository for database operations."""

    def __init__(self, database_url: Optional[str] = None):
        self.database_url = database_url or settings.DATABASE_URL

        # Ensure data directory exists
        if self.database_url.startswith("sqlite:///") and ":memory:" not in self.database_url:
            db_path = Path(self.database_url.replace("sqlite:///", ""))
            db_path.parent.mkdir(parents=True, exist_ok=True)

        self.engine = create_engine(
            self.database_url,
            echo=settings.DEBUG,
            connect_args={"check_same_thread": False} if "sqlite" in self.database_url else {},
        )
        self.SessionLocal = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)

    def init_db(self) -> None:
        """Create all tables."""
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not initialise database: {e}") from e

    def get_session(self) -> Session:
        """Get a new database session."""
        return self.SessionLocal()

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Session that commits on success and maps driver errors to PersistenceError."""
        session = self.get_session()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error("Database operation failed: %s", e)
            raise PersistenceError(f"Database operation failed: {e.__class__.__name__}") from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def ping(self) -> bool:
        """Check that the store answers a trivial query."""
        try:
            with self.get_session() as session:
                session.query(func.count(ProfileRecord.id)).scalar()
            return True
        except SQLAlchemyError:
            return False

    # =========================================================================
    # Profile Operations
    # =========================================================================

    def insert_profile(self, profile: Profile) -> Profile:
        """Insert a profile; raises DuplicateKey if the id is taken."""
        with self.session_scope() as session:
            if session.get(ProfileRecord, profile.id) is not None:
                raise DuplicateKey(f"Profile '{profile.id}' already exists")

            session.add(ProfileRecord(
                id=profile.id,
                full_name=profile.full_name,
                phone=profile.phone,
                country_code=profile.country_code,
                role=profile.role,
                email=profile.email,
                created_at=profile.created_at,
            ))
            try:
                session.flush()
            except IntegrityError as e:
                raise DuplicateKey(f"Profile '{profile.id}' already exists") from e
            return profile

    def get_profile(self, profile_id: str) -> Optional[Profile]:
        """Get a profile by ID."""
        with self.session_scope() as session:
            record = session.get(ProfileRecord, profile_id)
            return _to_profile(record) if record else None

    def list_profiles(self, role: Optional[UserRole] = None) -> list[Profile]:
        """List profiles, newest first, optionally filtered by role."""
        with self.session_scope() as session:
            query = session.query(ProfileRecord)
            if role:
                query = query.filter(ProfileRecord.role == UserRole(role).value)
            query = query.order_by(ProfileRecord.created_at.desc())
            return [_to_profile(r) for r in query.all()]

    def count_profiles(self, role: Optional[UserRole] = None) -> int:
        """Count profiles with optional role filter."""
        with self.session_scope() as session:
            query = session.query(ProfileRecord)
            if role:
                query = query.filter(ProfileRecord.role == UserRole(role).value)
            return query.count()

    # =========================================================================
    # Driver Details Operations
    # =========================================================================

    def upsert_driver_details(self, details: DriverDetails) -> DriverDetails:
        """Replace the driver's details if present, else create them."""
        with self.session_scope() as session:
            record = session.get(DriverDetailsRecord, details.owner_id)

            if record is None:
                record = DriverDetailsRecord(owner_id=details.owner_id)
                session.add(record)

            record.truck_type = details.truck_type
            record.body_type = details.body_type
            record.dimensions = details.dimensions
            record.plate_number = details.plate_number
            record.is_available = details.is_available
            record.updated_at = details.updated_at

            return details

    def get_driver_details(self, owner_id: str) -> Optional[DriverDetails]:
        """Get a driver's details, None if not registered yet."""
        with self.session_scope() as session:
            record = session.get(DriverDetailsRecord, owner_id)
            return _to_driver_details(record) if record else None

    def count_driver_details(self, owner_id: Optional[str] = None) -> int:
        with self.session_scope() as session:
            query = session.query(DriverDetailsRecord)
            if owner_id:
                query = query.filter(DriverDetailsRecord.owner_id == owner_id)
            return query.count()

    def list_drivers_with_details(self) -> list[tuple[Profile, Optional[DriverDetails]]]:
        """All driver profiles left-joined with their details."""
        with self.session_scope() as session:
            rows = (
                session.query(ProfileRecord, DriverDetailsRecord)
                .outerjoin(DriverDetailsRecord, DriverDetailsRecord.owner_id == ProfileRecord.id)
                .filter(ProfileRecord.role == UserRole.DRIVER.value)
                .all()
            )
            return [
                (_to_profile(profile), _to_driver_details(details) if details else None)
                for profile, details in rows
            ]

    # =========================================================================
    # Truck / Sub-driver Operations
    # =========================================================================

    def insert_truck(self, truck: Truck) -> Truck:
        with self.session_scope() as session:
            session.add(TruckRecord(
                id=truck.id,
                owner_id=truck.owner_id,
                plate_number=truck.plate_number,
                brand=truck.brand,
                model_year=truck.model_year,
                truck_type=truck.truck_type,
                created_at=truck.created_at,
            ))
            return truck

    def list_trucks(self, owner_id: str) -> list[Truck]:
        with self.session_scope() as session:
            records = (
                session.query(TruckRecord)
                .filter(TruckRecord.owner_id == owner_id)
                .order_by(TruckRecord.created_at.desc())
                .all()
            )
            return [
                Truck(
                    id=r.id,
                    owner_id=r.owner_id,
                    plate_number=r.plate_number,
                    brand=r.brand,
                    model_year=r.model_year,
                    truck_type=r.truck_type,
                    created_at=r.created_at,
                )
                for r in records
            ]

    def insert_sub_driver(self, sub_driver: SubDriver) -> SubDriver:
        with self.session_scope() as session:
            session.add(SubDriverRecord(
                id=sub_driver.id,
                carrier_id=sub_driver.carrier_id,
                driver_name=sub_driver.driver_name,
                driver_phone=sub_driver.driver_phone,
                id_number=sub_driver.id_number,
                created_at=sub_driver.created_at,
            ))
            return sub_driver

    def list_sub_drivers(self, carrier_id: str) -> list[SubDriver]:
        with self.session_scope() as session:
            records = (
                session.query(SubDriverRecord)
                .filter(SubDriverRecord.carrier_id == carrier_id)
                .order_by(SubDriverRecord.created_at.desc())
                .all()
            )
            return [
                SubDriver(
                    id=r.id,
                    carrier_id=r.carrier_id,
                    driver_name=r.driver_name,
                    driver_phone=r.driver_phone,
                    id_number=r.id_number,
                    created_at=r.created_at,
                )
                for r in records
            ]

    # =========================================================================
    # Load Operations
    # =========================================================================

    def insert_load(self, load: Load) -> Load:
        """Insert a new load row."""
        with self.session_scope() as session:
            receiver = load.receiver or Receiver()
            session.add(LoadRecord(
                id=load.id,
                owner_id=load.owner_id,
                origin=load.origin,
                destination=load.destination,
                origin_lat=load.origin_coords.lat if load.origin_coords else None,
                origin_lng=load.origin_coords.lng if load.origin_coords else None,
                dest_lat=load.destination_coords.lat if load.destination_coords else None,
                dest_lng=load.destination_coords.lng if load.destination_coords else None,
                distance_km=load.distance_km,
                duration_minutes=load.duration_minutes,
                weight=load.weight,
                price=load.price,
                truck_type_required=load.truck_type_required,
                body_type=load.body_type,
                cargo_type=load.cargo_type,
                package_type=load.package_type,
                description=load.description,
                pickup_date=load.pickup_date,
                products=json.dumps([p.model_dump() for p in load.products]),
                receiver_name=receiver.name,
                receiver_phone=receiver.phone,
                receiver_address=receiver.address,
                status=LoadStatus(load.status).value,
                driver_id=load.driver_id,
                created_at=load.created_at,
                updated_at=load.updated_at,
            ))
            return load

    def get_load(self, load_id: str) -> Optional[LoadWithOwner]:
        """Get a load by ID, joined with its owner's profile."""
        with self.session_scope() as session:
            row = (
                session.query(LoadRecord, ProfileRecord)
                .outerjoin(ProfileRecord, ProfileRecord.id == LoadRecord.owner_id)
                .filter(LoadRecord.id == load_id)
                .first()
            )
            if row is None:
                return None
            return _to_load(*row)

    def load_exists(self, load_id: str) -> bool:
        with self.session_scope() as session:
            return session.query(LoadRecord.id).filter(LoadRecord.id == load_id).first() is not None

    def list_loads(
        self,
        status: Optional[str] = None,
        driver_id: Optional[str] = None,
        owner_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[LoadWithOwner]:
        """List loads newest first, joined with their owners."""
        with self.session_scope() as session:
            query = (
                session.query(LoadRecord, ProfileRecord)
                .outerjoin(ProfileRecord, ProfileRecord.id == LoadRecord.owner_id)
            )

            if status:
                query = query.filter(LoadRecord.status == status)
            if driver_id:
                query = query.filter(LoadRecord.driver_id == driver_id)
            if owner_id:
                query = query.filter(LoadRecord.owner_id == owner_id)

            query = query.order_by(LoadRecord.created_at.desc())
            if limit:
                query = query.limit(limit)

            return [_to_load(load, owner) for load, owner in query.all()]

    def transition_load(
        self,
        load_id: str,
        new_status: str,
        new_driver_id: Optional[str],
        expected_status: Optional[str] = None,
        expected_driver_id: Optional[str] = None,
    ) -> int:
        """
        Conditionally move a load to a new status in one UPDATE.

        Args:
            load_id: Load to update
            new_status: Status to write
            new_driver_id: Driver to write (None clears the assignment)
            expected_status: Only update if the row currently has this status
            expected_driver_id: Only update if the row is assigned to this driver

        Returns:
            Number of rows affected (0 or 1)
        """
        with self.session_scope() as session:
            query = session.query(LoadRecord).filter(LoadRecord.id == load_id)

            if expected_status is not None:
                query = query.filter(LoadRecord.status == expected_status)
            if expected_driver_id is not None:
                query = query.filter(LoadRecord.driver_id == expected_driver_id)

            return query.update(
                {
                    LoadRecord.status: new_status,
                    LoadRecord.driver_id: new_driver_id,
                    LoadRecord.updated_at: datetime.utcnow(),
                },
                synchronize_session=False,
            )

    def count_loads(
        self,
        statuses: Optional[set[str]] = None,
        driver_id: Optional[str] = None,
    ) -> int:
        """Count loads with optional status set and driver filters."""
        with self.session_scope() as session:
            query = session.query(LoadRecord)
            if statuses:
                query = query.filter(LoadRecord.status.in_(sorted(statuses)))
            if driver_id:
                query = query.filter(LoadRecord.driver_id == driver_id)
            return query.count()

    def sum_load_price(self, status: str, driver_id: Optional[str] = None) -> float:
        """Total price of loads in a status."""
        with self.session_scope() as session:
            query = session.query(func.coalesce(func.sum(LoadRecord.price), 0.0)).filter(
                LoadRecord.status == status
            )
            if driver_id:
                query = query.filter(LoadRecord.driver_id == driver_id)
            return float(query.scalar())


@lru_cache
def get_repository() -> Repository:
    """Get cached repository instance."""
    repo = Repository()
    repo.init_db()
    return repo
