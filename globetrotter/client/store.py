"""
Client-side trip state with optimistic writes.

Every record carries a ``sync_state``: ``pending`` while a create is in
flight, ``committed`` once it matches the server. Creates insert a temporary
record immediately and swap it for the server record on success or drop it
on failure. Updates apply locally first and are reverted when the latest
update for that record fails; responses to superseded updates are ignored.
"""

import asyncio
import time
from datetime import date
from typing import Dict, List, NamedTuple, Optional

import httpx

from globetrotter.client.api import ApiError, GlobetrotterApi
from globetrotter.client.mapper import (
    TripInput, TripView, build_create_payload, build_update_payload, local_budget, map_backend_trip,
)
from globetrotter.core.logger import logger
from globetrotter.utils.trip_status import compute_status

STATUS_REFRESH_SECONDS = 3600


class PendingTrip(NamedTuple):
    record: TripView
    task: "asyncio.Task[TripView]"


class TripStore:
    def __init__(self, api: GlobetrotterApi, user_id: Optional[int] = None):
        self.api = api
        self.user_id = user_id
        self.trips: List[TripView] = []
        self.loading = False
        self.loaded = False
        self.error: Optional[str] = None
        self._load_key: Optional[str] = None
        self._last_temp_stamp = 0
        self._update_seq: Dict[str, int] = {}
        self._status_task: Optional[asyncio.Task] = None

    def _index(self, trip_id: str) -> Optional[int]:
        for i, trip in enumerate(self.trips):
            if trip.id == trip_id:
                return i
        return None

    def get(self, trip_id: str) -> Optional[TripView]:
        index = self._index(trip_id)
        return self.trips[index] if index is not None else None

    def _replace(self, trip_id: str, record: TripView) -> bool:
        index = self._index(trip_id)
        if index is None:
            return False
        self.trips[index] = record
        return True

    def _temp_id(self) -> str:
        # Strictly increasing so two creates in the same millisecond stay distinct
        stamp = max(int(time.time() * 1000), self._last_temp_stamp + 1)
        self._last_temp_stamp = stamp
        return f"temp-{stamp}"

    # Create

    def add_trip(self, trip_input: TripInput) -> PendingTrip:
        """
        Insert an optimistic record at the head of the list and schedule the
        server create on the running loop. Await ``task`` for the committed
        record; a failed create removes the record and re-raises from the task.
        """
        budget = local_budget(trip_input)
        optimistic = TripView(
            id=self._temp_id(),
            title=trip_input.title or trip_input.destination,
            destination=trip_input.destination,
            start_date=trip_input.start_date,
            end_date=trip_input.end_date,
            start_time=trip_input.start_time,
            end_time=trip_input.end_time,
            status=compute_status(trip_input.start_date, trip_input.end_date),
            budget=budget,
            planned_budget=trip_input.planned_budget,
            participants=trip_input.participants,
            suggestions=list(trip_input.suggestions),
            sections=[s.model_copy() for s in trip_input.sections],
            created_at=time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            description=trip_input.description,
            visibility=trip_input.visibility,
            user_id=self.user_id,
            sync_state="pending",
        )
        self.trips.insert(0, optimistic)

        task = asyncio.get_running_loop().create_task(
            self._persist_new(optimistic.id, trip_input, budget)
        )
        return PendingTrip(optimistic, task)

    async def _persist_new(self, temp_id: str, trip_input: TripInput, budget: float) -> TripView:
        try:
            created = await self.api.create_trip(
                build_create_payload(trip_input, budget), trip_input.cover_photo_file
            )
        except Exception:
            logger.error(f"Create trip failed, rolling back {temp_id}")
            index = self._index(temp_id)
            if index is not None:
                del self.trips[index]
            raise

        record = map_backend_trip(created, fallback_user_id=self.user_id)
        if not record.budget:
            record.budget = budget
        self._replace(temp_id, record)
        logger.info(f"Trip {record.id} created; replaced {temp_id}")
        return record

    # Update

    async def update_trip(self, trip_id: str, partial: dict) -> TripView:
        index = self._index(trip_id)
        if index is None:
            raise KeyError(trip_id)
        current = self.trips[index]
        if current.sync_state == "pending":
            raise ValueError("Trip is still being created")

        snapshot = current.model_copy(deep=True)
        seq = self._update_seq.get(trip_id, 0) + 1
        self._update_seq[trip_id] = seq

        merged = TripView.model_validate({**current.model_dump(), **partial})
        merged.status = compute_status(merged.start_date, merged.end_date)
        self.trips[index] = merged

        try:
            updated = await self.api.update_trip(trip_id, build_update_payload(partial))
        except Exception:
            if self._update_seq.get(trip_id) == seq:
                logger.warning(f"Update of trip {trip_id} failed, restoring previous state")
                self._replace(trip_id, snapshot)
            raise

        if self._update_seq.get(trip_id) != seq:
            # A newer update was issued while this one was in flight
            logger.debug(f"Discarding stale update response for trip {trip_id}")
            return self.get(trip_id)

        record = map_backend_trip(updated, fallback_user_id=self.user_id)
        self._replace(trip_id, record)
        return record

    # Status

    def refresh_statuses(self, today: Optional[date] = None):
        for trip in self.trips:
            trip.status = compute_status(trip.start_date, trip.end_date, today)

    def start_status_refresh(self, interval: float = STATUS_REFRESH_SECONDS) -> asyncio.Task:
        self.stop_status_refresh()

        async def _loop():
            while True:
                await asyncio.sleep(interval)
                self.refresh_statuses()

        self._status_task = asyncio.get_running_loop().create_task(_loop())
        return self._status_task

    def stop_status_refresh(self):
        if self._status_task is not None:
            self._status_task.cancel()
            self._status_task = None

    # Loading

    async def reload_trips(self, force: bool = False):
        """Load the signed-in user's trips; skipped when already loaded for this user unless forced."""
        if not self.api.token or self.user_id is None:
            return
        key = str(self.user_id)
        if not force and self._load_key == key:
            return

        self.loading = True
        self.error = None
        try:
            backend_trips = await self.api.fetch_trips()
            self.trips = [map_backend_trip(t, fallback_user_id=self.user_id) for t in backend_trips]
            self._load_key = key
            logger.info(f"Loaded {len(self.trips)} trips for user {self.user_id}")
        except (ApiError, httpx.HTTPError) as e:
            logger.error(f"Failed to load trips: {e}")
            self.error = "Failed to load trips. Please check your connection."
            self.trips = []
        finally:
            self.loaded = True
            self.loading = False

    async def load_public_trips(self):
        self.loading = True
        self.error = None
        try:
            public_trips = await self.api.fetch_public_trips()
            self.trips = [map_backend_trip(t) for t in public_trips]
            self._load_key = "guest"
        except (ApiError, httpx.HTTPError) as e:
            logger.error(f"Failed to load public trips: {e}")
            self.error = "Failed to load public trips."
            self.trips = []
        finally:
            self.loaded = True
            self.loading = False

    async def get_public_trip(self, trip_id: str) -> Optional[TripView]:
        """Fetch one trip for a shared link and keep it in the list if it is not there yet."""
        try:
            data = await self.api.fetch_trip_by_id(trip_id)
        except ApiError as e:
            logger.warning(f"Trip {trip_id} unavailable: {e}")
            return None

        record = map_backend_trip(data)
        if self.get(record.id) is None:
            self.trips.insert(0, record)
        return record
