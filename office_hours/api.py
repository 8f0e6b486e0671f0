"""
Async API facade with simulated network latency.

UI code talks to this layer the way it would talk to a remote backend.
Each call sleeps for a random delay within the configured bounds and
then runs one synchronous engine operation to completion, so the
latency never splits an operation's read-modify-write.

The signed-in user is an explicit ``Session`` argument, never ambient
state.
"""

import asyncio
import logging
import random
from typing import Callable, Optional, Union

from office_hours.clock import Timestamp
from office_hours.config import AppConfig, settings
from office_hours.directory import UserDirectory
from office_hours.engine import BookingEngine
from office_hours.logging_context import get_session_logger, set_session_id
from office_hours.queries import ScheduleQueries
from office_hours.schemas.appointment_schema import Appointment, AppointmentWithDetails
from office_hours.schemas.slot_schema import Slot, SlotFilters, SlotUpdate, SlotWithTeacher
from office_hours.schemas.user_schema import Session, User
from office_hours.storage import Storage, build_storage

logger = get_session_logger(__name__)


class MockApi:
    def __init__(
        self,
        storage: Optional[Storage] = None,
        clock: Optional[Callable] = None,
        config: Optional[AppConfig] = None,
    ) -> None:
        self.config = config or settings
        self.storage = storage or build_storage(self.config.storage)
        self.engine = BookingEngine(self.storage, clock=clock, policy=self.config.policy)
        self.directory = UserDirectory(self.storage)
        self.queries = ScheduleQueries(self.storage)
        self._rng = random.Random()
        self._sleep = asyncio.sleep

    async def _simulate_latency(self, request: str) -> None:
        logger.debug("Request: %s", request)
        low = self.config.api.network_delay_min_ms
        high = self.config.api.network_delay_max_ms
        if high <= 0:
            return
        await self._sleep(self._rng.uniform(low, high) / 1000)

    @staticmethod
    def _enter(session: Session) -> None:
        set_session_id(session.session_id)

    # --- Auth ---

    async def sign_in(self, user_id: str) -> Session:
        await self._simulate_latency(f"POST /auth/login {user_id}")
        return self.directory.sign_in(user_id)

    async def sign_out(self, session: Session) -> None:
        self._enter(session)
        await self._simulate_latency("POST /auth/logout")
        logger.info("Signed out %s", session.user_id)

    # --- Users ---

    async def get_users(self) -> list[User]:
        await self._simulate_latency("GET /users")
        return self.directory.list_users()

    async def get_user(self, user_id: str) -> Optional[User]:
        await self._simulate_latency(f"GET /users/{user_id}")
        return self.directory.get_user(user_id)

    async def create_user(self, user: User) -> User:
        await self._simulate_latency("POST /users")
        return self.directory.create_user(user)

    # --- Slots ---

    async def get_slots(
        self, filters: Union[SlotFilters, dict, None] = None
    ) -> list[SlotWithTeacher]:
        await self._simulate_latency("GET /slots")
        return self.queries.list_slots(filters)

    async def get_slot(self, slot_id: str) -> SlotWithTeacher:
        await self._simulate_latency(f"GET /slots/{slot_id}")
        return self.queries.get_slot_with_teacher(slot_id)

    async def create_slot(
        self,
        session: Session,
        start_iso: Timestamp,
        end_iso: Timestamp,
        location: str,
        max_seats: int,
    ) -> Slot:
        self._enter(session)
        await self._simulate_latency("POST /slots")
        return self.engine.create_slot(session.user_id, start_iso, end_iso, location, max_seats)

    async def update_slot(
        self, session: Session, slot_id: str, updates: Union[SlotUpdate, dict]
    ) -> Slot:
        self._enter(session)
        await self._simulate_latency(f"PUT /slots/{slot_id}")
        return self.engine.update_slot(slot_id, updates, acting_user_id=session.user_id)

    async def delete_slot(self, session: Session, slot_id: str) -> None:
        self._enter(session)
        await self._simulate_latency(f"DELETE /slots/{slot_id}")
        self.engine.delete_slot(slot_id, acting_user_id=session.user_id)

    async def get_slot_appointments(self, slot_id: str) -> list[AppointmentWithDetails]:
        await self._simulate_latency(f"GET /slots/{slot_id}/appointments")
        return self.queries.list_slot_appointments(slot_id)

    # --- Appointments ---

    async def book_appointment(
        self, session: Session, slot_id: str, notes: Optional[str] = None
    ) -> Appointment:
        self._enter(session)
        await self._simulate_latency("POST /appointments")
        return self.engine.book_appointment(slot_id, session.user_id, notes)

    async def cancel_appointment(self, session: Session, appointment_id: str) -> Appointment:
        self._enter(session)
        await self._simulate_latency(f"PUT /appointments/{appointment_id}/cancel")
        return self.engine.cancel_appointment(appointment_id, session.user_id)

    async def mark_attended(self, session: Session, appointment_id: str) -> Appointment:
        self._enter(session)
        await self._simulate_latency(f"PUT /appointments/{appointment_id}/attend")
        return self.engine.mark_attended(appointment_id, acting_user_id=session.user_id)

    async def get_user_appointments(self, session: Session) -> list[AppointmentWithDetails]:
        self._enter(session)
        await self._simulate_latency(f"GET /appointments?userId={session.user_id}")
        return self.queries.list_appointments_for_user(session.user_id, session.role)
