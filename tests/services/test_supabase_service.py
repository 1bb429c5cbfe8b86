from unittest.mock import MagicMock

import pytest

from app.core.config import Settings
from app.core.errors import RecordStoreError
from app.models.video import VideoRecord, VideoStatus
from app.services.supabase_service import SupabaseVideoStore, get_supabase_client


def _client_returning(data=None, error=None):
    client = MagicMock()
    query = client.table.return_value
    for method in ("insert", "update", "select", "eq", "limit"):
        getattr(query, method).return_value = query
    if error:
        query.execute.side_effect = error
    else:
        query.execute.return_value = MagicMock(data=data)
    return client, query


def test_client_not_created_without_credentials():
    assert get_supabase_client(Settings(supabase_url="", supabase_key="")) is None


@pytest.mark.asyncio
async def test_insert_writes_json_row():
    record = VideoRecord(owner_id="user-1", title="Demo")
    client, query = _client_returning(data=[record.model_dump(mode="json")])

    created = await SupabaseVideoStore(client, "video_records").insert(record)

    client.table.assert_called_with("video_records")
    row = query.insert.call_args.args[0]
    assert row["id"] == record.id
    assert row["status"] == "processing"
    assert row["artifact_urls"]["video"] == ""
    assert created == record


@pytest.mark.asyncio
async def test_insert_without_returned_row_raises():
    client, _ = _client_returning(data=[])
    with pytest.raises(RecordStoreError):
        await SupabaseVideoStore(client).insert(VideoRecord(owner_id="u", title="t"))


@pytest.mark.asyncio
async def test_update_targets_record_id():
    record = VideoRecord(owner_id="user-1", title="Demo", status=VideoStatus.FAILED)
    client, query = _client_returning(data=[record.model_dump(mode="json")])

    await SupabaseVideoStore(client).update(record)

    update_data = query.update.call_args.args[0]
    assert update_data["status"] == "failed"
    assert "id" not in update_data
    query.eq.assert_called_with("id", record.id)


@pytest.mark.asyncio
async def test_update_wraps_client_errors():
    client, _ = _client_returning(error=RuntimeError("connection refused"))
    with pytest.raises(RecordStoreError, match="connection refused"):
        await SupabaseVideoStore(client).update(VideoRecord(owner_id="u", title="t"))


@pytest.mark.asyncio
async def test_get_returns_none_when_missing():
    client, _ = _client_returning(data=[])
    assert await SupabaseVideoStore(client).get("missing") is None


@pytest.mark.asyncio
async def test_get_parses_row():
    record = VideoRecord(owner_id="user-1", title="Demo")
    client, _ = _client_returning(data=[record.model_dump(mode="json")])

    fetched = await SupabaseVideoStore(client).get(record.id)

    assert fetched.id == record.id
    assert fetched.status == VideoStatus.PROCESSING
