"""Answer database operations."""

from supabase import Client

from gap_engine.core.errors import PersistenceError
from gap_engine.core.logging import get_logger
from gap_engine.core.schemas_rooms import Answer
from gap_engine.db.supabase_client import get_supabase

logger = get_logger(__name__)

TABLE = "answers"


class AnswerStore:
    """Supabase-backed store for the ``answers`` table."""

    def __init__(self, client: Client | None = None):
        self._client = client

    @property
    def client(self) -> Client:
        return self._client or get_supabase()

    def insert(self, room_id: str, user_type: str, answers: dict[str, int]) -> None:
        """
        Save one participant's answer set.

        Raises:
            PersistenceError: If the insert fails
        """
        try:
            self.client.table(TABLE).insert(
                {"room_id": room_id, "user_type": user_type, "answers": answers}
            ).execute()
        except Exception as e:
            logger.error(f"Failed to insert answers: {e}", extra={"room_id": room_id})
            raise PersistenceError(f"Failed to save answers for room {room_id}: {e}") from e

        logger.info(f"Saved {user_type} answers", extra={"room_id": room_id})

    def list_by_room(self, room_id: str) -> list[Answer]:
        """
        List every answer set stored for a room.

        Raises:
            PersistenceError: If the query fails
        """
        try:
            response = self.client.table(TABLE).select("*").eq("room_id", room_id).execute()
        except Exception as e:
            logger.error(f"Failed to list answers: {e}", extra={"room_id": room_id})
            raise PersistenceError(f"Failed to fetch answers for room {room_id}: {e}") from e

        return [Answer.model_validate(row) for row in response.data or []]

    def has_answered(self, room_id: str, user_type: str) -> bool:
        """
        Check whether a role already submitted answers for a room.

        Raises:
            PersistenceError: If the query fails
        """
        try:
            response = (
                self.client.table(TABLE)
                .select("id")
                .eq("room_id", room_id)
                .eq("user_type", user_type)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to check answers: {e}", extra={"room_id": room_id})
            raise PersistenceError(f"Failed to check answers for room {room_id}: {e}") from e

        return bool(response.data)
