"""Per-phone-number conversation history backed by Supabase PostgreSQL."""
import logging
from datetime import datetime, timezone
from typing import List, Optional
from supabase import create_client, Client

from models.conversation import Turn
from config import SUPABASE_URL, SUPABASE_KEY, HISTORY_TABLE

logger = logging.getLogger(__name__)

# Expected table layout:
# CREATE TABLE message_history (
#   id bigint GENERATED ALWAYS AS IDENTITY PRIMARY KEY,
#   phone_number text NOT NULL,
#   message text NOT NULL,
#   response text NOT NULL,
#   timestamp timestamptz NOT NULL DEFAULT now()
# );
# CREATE INDEX message_history_phone_ts ON message_history (phone_number, timestamp);


class HistoryStoreError(Exception):
    """Raised when a history read, write or delete fails."""


class HistoryStore:
    """Append-only log of (message, response) turns, partitioned by phone number."""
    
    def __init__(
        self,
        supabase_url: str = SUPABASE_URL,
        supabase_key: str = SUPABASE_KEY,
        table_name: str = HISTORY_TABLE
    ):
        """
        Initialize the history store with a Supabase client.
        
        Args:
            supabase_url: Supabase project URL
            supabase_key: Supabase API key
            table_name: Name of the table holding turns
            
        Raises:
            ValueError: If Supabase credentials are missing
        """
        if not supabase_url or not supabase_key:
            raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set in environment variables")
        
        self.table_name = table_name
        self.client: Client = create_client(supabase_url, supabase_key)
        logger.info(f"HistoryStore initialized with table: {table_name}")
    
    def get_turns(self, identity: str, limit: Optional[int] = None) -> List[Turn]:
        """
        Retrieve turns for a phone number in chronological order.
        
        Args:
            identity: Phone number
            limit: Optional cap on turns returned (the most recent ones are kept)
            
        Returns:
            List of Turn objects, oldest first
            
        Raises:
            HistoryStoreError: If the query fails
        """
        try:
            query = self.client.table(self.table_name).select("*").eq("phone_number", identity)
            
            if limit:
                # Newest first so the limit keeps the most recent turns
                result = query.order("timestamp", desc=True).order("id", desc=True).limit(limit).execute()
                rows = list(reversed(result.data or []))
            else:
                result = query.order("timestamp", desc=False).order("id", desc=False).execute()
                rows = result.data or []
        except Exception as e:
            logger.error(f"Error retrieving turns for {identity}: {e}")
            raise HistoryStoreError(f"Failed to load history for {identity}: {e}") from e
        
        turns = [self._row_to_turn(row) for row in rows]
        logger.debug(f"Loaded {len(turns)} turns for {identity}")
        return turns
    
    def add_turn(self, identity: str, message: str, response: str) -> Turn:
        """
        Append a message/response pair to a phone number's history.
        
        Args:
            identity: Phone number
            message: Inbound user message as received
            response: Assistant reply
            
        Returns:
            The persisted Turn
            
        Raises:
            HistoryStoreError: If the insert fails
        """
        timestamp = datetime.now(timezone.utc)
        
        try:
            result = self.client.table(self.table_name).insert({
                "phone_number": identity,
                "message": message,
                "response": response,
                "timestamp": timestamp.isoformat()
            }).execute()
        except Exception as e:
            logger.error(f"Error adding turn for {identity}: {e}")
            raise HistoryStoreError(f"Failed to store turn for {identity}: {e}") from e
        
        row_id = result.data[0].get("id") if result.data else None
        logger.info(f"Added turn for {identity}")
        return Turn(
            identity=identity,
            user_message=message,
            assistant_response=response,
            timestamp=timestamp,
            id=row_id
        )
    
    def clear(self, identity: str) -> int:
        """
        Delete every turn stored for a phone number.
        
        Returns:
            Number of turns deleted
            
        Raises:
            HistoryStoreError: If the delete fails
        """
        try:
            result = self.client.table(self.table_name).delete().eq("phone_number", identity).execute()
        except Exception as e:
            logger.error(f"Error clearing history for {identity}: {e}")
            raise HistoryStoreError(f"Failed to clear history for {identity}: {e}") from e
        
        deleted = len(result.data or [])
        logger.info(f"Cleared {deleted} turns for {identity}")
        return deleted
    
    def _row_to_turn(self, row: dict) -> Turn:
        return Turn(
            identity=row["phone_number"],
            user_message=row["message"],
            assistant_response=row["response"],
            timestamp=parse_timestamp(row["timestamp"]),
            id=row.get("id")
        )


def parse_timestamp(value: str) -> datetime:
    """
    Parse a PostgREST timestamp.
    
    PostgREST trims trailing zeros from the fractional seconds (e.g.
    ``2026-02-21T02:08:26.18976+00:00``), which older ``fromisoformat``
    implementations reject, so the fraction is padded to six digits.
    """
    value = value.replace("Z", "+00:00")
    if "." not in value:
        return datetime.fromisoformat(value)
    
    head, tail = value.split(".", 1)
    digits = ""
    for char in tail:
        if not char.isdigit():
            break
        digits += char
    zone = tail[len(digits):]
    return datetime.fromisoformat(f"{head}.{digits[:6].ljust(6, '0')}{zone}")
