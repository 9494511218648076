from collections.abc import Callable, Generator, Iterable
from dataclasses import dataclass

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from roombook.core.config import get_settings
from roombook.core.security import UserRole, decode_token
from roombook.db.session import SessionLocal
from roombook.services.auto_scheduler import AutoScheduler
from roombook.services.availability import AvailabilityService
from roombook.services.booking_transaction import BookingTransaction
from roombook.services.interval_store import IntervalStore
from roombook.services.references import ReferenceDirectory, RoomDirectory
from roombook.services.slot_locks import RoomDayLocks, get_room_day_locks

security = HTTPBearer()


@dataclass(frozen=True)
class Principal:
    subject: str
    role: UserRole


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_principal(credentials: HTTPAuthorizationCredentials = Depends(security)) -> Principal:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_token(credentials.credentials)
    except JWTError as exc:
        raise credentials_exception from exc
    subject = payload.get("sub")
    try:
        role = UserRole(payload.get("role"))
    except ValueError as exc:
        raise credentials_exception from exc
    if subject is None:
        raise credentials_exception
    return Principal(subject=str(subject), role=role)


def require_roles(*roles: UserRole) -> Callable[[Principal], Principal]:
    allowed_roles: Iterable[UserRole] = set(roles)

    def role_checker(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role not in allowed_roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return principal

    return role_checker


require_scheduler = require_roles(UserRole.admin, UserRole.scheduler)


def get_locks() -> RoomDayLocks:
    return get_room_day_locks(get_settings().booking_lock_timeout_seconds)


def get_interval_store(db: Session = Depends(get_db)) -> IntervalStore:
    return IntervalStore(db)


def get_references(db: Session = Depends(get_db)) -> ReferenceDirectory:
    return ReferenceDirectory(db)


def get_auto_scheduler(
    db: Session = Depends(get_db),
    interval_store: IntervalStore = Depends(get_interval_store),
) -> AutoScheduler:
    return AutoScheduler(interval_store, RoomDirectory(db), max_slot_minutes=get_settings().max_slot_minutes)


def get_availability_service(
    interval_store: IntervalStore = Depends(get_interval_store),
    references: ReferenceDirectory = Depends(get_references),
) -> AvailabilityService:
    return AvailabilityService(
        interval_store,
        references,
        default_slot_minutes=get_settings().default_slot_minutes,
    )


def get_booking_transaction(
    db: Session = Depends(get_db),
    interval_store: IntervalStore = Depends(get_interval_store),
    references: ReferenceDirectory = Depends(get_references),
    locks: RoomDayLocks = Depends(get_locks),
    principal: Principal = Depends(require_scheduler),
) -> BookingTransaction:
    return BookingTransaction(db, interval_store, references, locks, actor_id=principal.subject)
