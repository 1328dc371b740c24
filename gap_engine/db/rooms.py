"""Room database operations."""

from datetime import datetime, timezone  # noqa: UP035
from typing import Any

from supabase import Client

from gap_engine.core.errors import PersistenceError
from gap_engine.core.logging import get_logger
from gap_engine.core.schemas_analysis import AnalysisResult
from gap_engine.core.schemas_rooms import Room
from gap_engine.db.supabase_client import get_supabase

logger = get_logger(__name__)

TABLE = "rooms"


def _utc_now_iso() -> str:
    """Get current UTC time as ISO string."""
    return datetime.now(timezone.utc).isoformat()  # noqa: UP017


def result_to_room_update(result: AnalysisResult) -> dict[str, Any]:
    """Room columns written when an analysis completes."""
    return {
        "status": "completed",
        "summary_report": result.summary,
        "gap_grade": result.grade.value,
        "category_reports": [
            report.model_dump(by_alias=True, mode="json") for report in result.category_reports
        ],
    }


class RoomStore:
    """Supabase-backed store for the ``rooms`` table."""

    def __init__(self, client: Client | None = None):
        self._client = client

    @property
    def client(self) -> Client:
        return self._client or get_supabase()

    def create(self) -> Room:
        """
        Create a room waiting for both answers.

        Raises:
            PersistenceError: If the insert fails
        """
        try:
            response = (
                self.client.table(TABLE)
                .insert({"status": "waiting", "summary_report": None, "gap_grade": None})
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to create room: {e}")
            raise PersistenceError(f"Failed to create room: {e}") from e

        if not response.data:
            raise PersistenceError("No data returned from room insert")

        room = Room.model_validate(response.data[0])
        logger.info(f"Created room {room.id}", extra={"room_id": room.id})
        return room

    def get(self, room_id: str) -> Room | None:
        """
        Fetch a room by id.

        Returns:
            Room, or None if it does not exist

        Raises:
            PersistenceError: If the query fails
        """
        try:
            response = self.client.table(TABLE).select("*").eq("id", room_id).limit(1).execute()
        except Exception as e:
            logger.error(f"Failed to fetch room: {e}", extra={"room_id": room_id})
            raise PersistenceError(f"Failed to fetch room {room_id}: {e}") from e

        if not response.data:
            return None
        return Room.model_validate(response.data[0])

    def update(self, room_id: str, updates: dict[str, Any]) -> None:
        """
        Update room columns.

        Raises:
            PersistenceError: If the update fails
        """
        payload = {**updates, "updated_at": _utc_now_iso()}
        try:
            self.client.table(TABLE).update(payload).eq("id", room_id).execute()
        except Exception as e:
            logger.error(f"Failed to update room: {e}", extra={"room_id": room_id})
            raise PersistenceError(f"Failed to update room {room_id}: {e}") from e

        logger.info(
            f"Updated room {room_id}",
            extra={"room_id": room_id, "extra_data": {"fields": sorted(updates)}},
        )
