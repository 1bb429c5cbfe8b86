import asyncio
import logging
from typing import Optional

from supabase import create_client, Client

from app.core.config import Settings
from app.core.errors import RecordStoreError
from app.models.video import VideoRecord

logger = logging.getLogger(__name__)

def get_supabase_client(settings: Settings) -> Optional[Client]:
    """Initializes and returns a Supabase client instance."""
    if not settings.supabase_url or not settings.supabase_key:
        logger.error("Supabase URL or Key not configured. Cannot initialize client.")
        return None
    try:
        client: Client = create_client(settings.supabase_url, settings.supabase_key)
        logger.info("Supabase client initialized successfully.")
        return client
    except Exception as e:
        logger.error(f"Failed to initialize Supabase client: {e}")
        return None


class SupabaseVideoStore:
    """Status records in the `video_records` table.

    The Supabase client is synchronous, so every call runs in a worker thread
    to keep the event loop free for other requests.
    """

    def __init__(self, client: Client, table_name: str = "video_records"):
        self.client = client
        self.table_name = table_name

    async def insert(self, record: VideoRecord) -> VideoRecord:
        row = record.model_dump(mode="json")
        logger.info(f"Creating initial video record {record.id}")
        try:
            response = await asyncio.to_thread(
                lambda: self.client.table(self.table_name).insert(row).execute()
            )
        except Exception as e:
            raise RecordStoreError(f"Error creating video record {record.id}: {e}") from e

        if not response.data:
            raise RecordStoreError(f"Insert for video record {record.id} returned no data.")
        return VideoRecord.model_validate(response.data[0])

    async def update(self, record: VideoRecord) -> None:
        update_data = record.model_dump(mode="json", exclude={"id", "created_at"})
        logger.info(f"Updating video record {record.id} to status {record.status.value}")
        try:
            response = await asyncio.to_thread(
                lambda: self.client.table(self.table_name)
                                   .update(update_data)
                                   .eq("id", record.id)
                                   .execute()
            )
        except Exception as e:
            raise RecordStoreError(f"Error updating video record {record.id}: {e}") from e

        if not response.data:
            raise RecordStoreError(f"No video record found to update for id {record.id}.")

    async def get(self, video_id: str) -> Optional[VideoRecord]:
        try:
            response = await asyncio.to_thread(
                lambda: self.client.table(self.table_name)
                                   .select("*")
                                   .eq("id", video_id)
                                   .limit(1)
                                   .execute()
            )
        except Exception as e:
            raise RecordStoreError(f"Error reading video record {video_id}: {e}") from e

        if not response.data:
            return None
        return VideoRecord.model_validate(response.data[0])
