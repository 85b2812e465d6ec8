"""
BookingStore: bookings, per-date slot availability, activities and the
admin gate, all backed by a `Repository` and an `IdentityProvider`.

Every public coroutine returns a `Result` envelope instead of raising,
except `is_admin()` (a plain bool) and `generate_default_slots()` (pure).

Known gaps kept on purpose:
  * create_booking inserts the booking and then increments availability;
    the two writes are not atomic together.
  * update_booking and delete_booking never touch availability.
  * get-or-create of an availability day can race with itself; both
    writers store the same default slots.
"""
import datetime
import functools
import logging
from typing import Any

from pydantic import ValidationError

from booking.auth import FirebaseAuth, IdentityProvider
from booking.config import Settings, get_firebase_api_key
from booking.db import FirestoreRepository, get_client
from booking.exceptions import BookingError, NotAdminError
from booking.models import (
    AvailabilityDay,
    Booking,
    BookingStatus,
    SlotCount,
    as_iso_date,
    generate_default_slots,
)
from booking.repository import Document, Repository
from booking.results import ErrorKind, Result

logger = logging.getLogger(__name__)


def _now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def _to_bookings(documents: list[Document]) -> list[Booking]:
    return [Booking.from_document(doc.id, doc.data) for doc in documents]


def _enveloped(action: str):
    """Turn any exception raised by the wrapped operation into `Result.fail`."""

    def decorator(method):
        @functools.wraps(method)
        async def wrapper(self, *args, **kwargs) -> Result:
            try:
                return await method(self, *args, **kwargs)
            except BookingError as err:
                logger.error("%s failed: %s", action, err)
                return Result.fail(str(err), err.kind)
            except ValidationError as err:
                logger.error("%s rejected invalid input: %s", action, err)
                return Result.fail(str(err), ErrorKind.INVALID)
            except Exception as err:
                logger.exception("%s failed unexpectedly", action)
                return Result.fail(str(err), ErrorKind.UNKNOWN)

        return wrapper

    return decorator


class BookingStore:
    def __init__(
        self,
        repository: Repository,
        identity: IdentityProvider,
        settings: Settings | None = None,
    ):
        self.repository = repository
        self.identity = identity
        self.settings = settings or Settings()

    # ============ BOOKINGS ============

    @_enveloped("create booking")
    async def create_booking(self, data: dict[str, Any]) -> Result:
        now = _now()
        booking = Booking.model_validate(
            {**data, "status": BookingStatus.PENDING.value, "createdAt": now, "updatedAt": now}
        )
        booking_id = await self.repository.add(
            self.settings.bookings_collection, booking.to_document()
        )
        logger.info(
            "Created booking %s for %s %s (%d people)",
            booking_id,
            booking.date,
            booking.time,
            booking.party_size,
        )

        synced = await self.update_availability(booking.date, booking.time, booking.party_size)
        if not synced:
            logger.warning(
                "Booking %s saved but availability for %s %s not updated: %s",
                booking_id,
                booking.date,
                booking.time,
                synced.error,
            )
        return Result.ok(id=booking_id, availability_synced=synced.success)

    @_enveloped("list bookings")
    async def get_all_bookings(self) -> Result:
        documents = await self.repository.query(
            self.settings.bookings_collection, order_by="createdAt", descending=True
        )
        return Result.ok(bookings=_to_bookings(documents))

    @_enveloped("list bookings by date")
    async def get_bookings_by_date(self, date: str | datetime.date) -> Result:
        documents = await self.repository.query(
            self.settings.bookings_collection, filters=[("date", "==", as_iso_date(date))]
        )
        return Result.ok(bookings=_to_bookings(documents))

    @_enveloped("update booking")
    async def update_booking(self, booking_id: str, updates: dict[str, Any]) -> Result:
        await self.repository.update(
            self.settings.bookings_collection, booking_id, {**updates, "updatedAt": _now()}
        )
        logger.info("Updated booking %s: %s", booking_id, sorted(updates))
        return Result.ok()

    @_enveloped("delete booking")
    async def delete_booking(self, booking_id: str) -> Result:
        await self.repository.delete(self.settings.bookings_collection, booking_id)
        logger.info("Deleted booking %s", booking_id)
        return Result.ok()

    # ============ ACTIVITIES ============

    @_enveloped("list activities")
    async def get_activities(self) -> Result:
        documents = await self.repository.query(self.settings.activities_collection)
        return Result.ok(activities={doc.id: doc.data for doc in documents})

    # ============ AVAILABILITY ============

    def generate_default_slots(self) -> dict[str, SlotCount]:
        return generate_default_slots(
            self.settings.first_slot_hour,
            self.settings.last_slot_hour,
            self.settings.slot_capacity,
        )

    async def _ensure_day(self, date: str) -> dict[str, SlotCount]:
        """Get-or-create the availability document for `date`.

        Creation only succeeds when the document is absent, so a late
        initialiser never resets counters another call already incremented.
        """
        collection = self.settings.availability_collection
        document = await self.repository.get(collection, date)
        if document is None:
            day = AvailabilityDay(date=date, slots=self.generate_default_slots())
            if await self.repository.put(collection, date, day.model_dump(), overwrite=False):
                logger.info("Initialised availability for %s with %d slots", date, len(day.slots))
                return day.slots
            document = await self.repository.get(collection, date) or {}

        day = AvailabilityDay(date=document.get("date", date), slots=document.get("slots") or {})
        return day.slots

    @_enveloped("get availability")
    async def get_availability(self, date: str | datetime.date) -> Result:
        return Result.ok(slots=await self._ensure_day(as_iso_date(date)))

    @_enveloped("update availability")
    async def update_availability(
        self, date: str | datetime.date, time: str, change: int
    ) -> Result:
        date = as_iso_date(date)
        await self._ensure_day(date)
        # server-side increment, no read-modify-write; capacity is not checked
        await self.repository.increment(
            self.settings.availability_collection, date, ("slots", time, "booked"), change
        )
        logger.debug("Availability %s %s changed by %+d", date, time, change)
        return Result.ok()

    # ============ AUTHENTICATION ============

    async def _is_allow_listed(self, email: str) -> bool:
        documents = await self.repository.query(
            self.settings.admins_collection, filters=[("email", "==", email)]
        )
        return bool(documents)

    @_enveloped("admin login")
    async def admin_login(self, email: str, password: str) -> Result:
        user = await self.identity.sign_in(email, password)
        try:
            allowed = await self._is_allow_listed(email)
        except BookingError:
            await self.identity.sign_out()
            raise
        if not allowed:
            await self.identity.sign_out()
            raise NotAdminError()
        logger.info("Admin %s signed in", email)
        return Result.ok(user=user)

    @_enveloped("admin logout")
    async def admin_logout(self) -> Result:
        await self.identity.sign_out()
        return Result.ok()

    async def is_admin(self) -> bool:
        """True only with an active session whose email is allow-listed.

        Lookup failures propagate as `StoreError`.
        """
        user = self.identity.current_user
        if user is None:
            return False
        return await self._is_allow_listed(user.email)

    async def aclose(self) -> None:
        await self.identity.aclose()


def build_store(settings: Settings | None = None) -> BookingStore:
    """Wire a BookingStore to Firestore and Firebase Authentication.

    The Firebase API key is only looked up on the first sign-in.
    """
    settings = settings or Settings()
    identity = FirebaseAuth(
        functools.partial(get_firebase_api_key, settings),
        base_url=settings.identity_url,
        timeout=settings.auth_timeout,
    )
    return BookingStore(FirestoreRepository(get_client(settings)), identity, settings)
