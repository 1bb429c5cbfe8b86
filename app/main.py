from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import BackgroundTasks, Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
import logging

from app.core.config import settings
from app.core.errors import RecordStoreError, ValidationError
from app.models.video import (
    GenerateVideoRequest,
    GenerateVideoResponse,
    HealthResponse,
    VideoRecord,
)
from app.services.pipeline import VideoPipeline, build_pipeline
from app.services.supabase_service import get_supabase_client
from app.utils.file_utils import ensure_dir

# --- Logging Setup ---
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

# --- Database Schema (Commented Out SQL) ---
# CREATE TABLE IF NOT EXISTS video_records (
#     id UUID PRIMARY KEY,
#     owner_id TEXT NOT NULL,
#     title TEXT NOT NULL,
#     status VARCHAR(20) NOT NULL DEFAULT 'processing', -- processing, completed, failed
#     duration TEXT NOT NULL DEFAULT '0:00',
#     artifact_urls JSONB NOT NULL DEFAULT '{}'::jsonb,   -- {video, audio, subtitle, thumbnail}
#     metadata JSONB NOT NULL DEFAULT '{}'::jsonb,        -- word_count, image_count, error_detail, ...
#     created_at TIMESTAMPTZ DEFAULT timezone('utc', now()) NOT NULL,
#     completed_at TIMESTAMPTZ
# );
#
# CREATE INDEX IF NOT EXISTS idx_video_records_owner_id ON video_records(owner_id);
# CREATE INDEX IF NOT EXISTS idx_video_records_status ON video_records(status);
#
# Storage buckets (public): videos, audio, subtitles, thumbnails

@asynccontextmanager
async def lifespan(app: FastAPI):
    ensure_dir(settings.temp_dir_base)
    client = get_supabase_client(settings)
    app.state.pipeline = build_pipeline(client, settings) if client else None
    yield

# --- FastAPI App Initialization ---
app = FastAPI(title="Narrated Video Generation Service", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

def get_pipeline(request: Request) -> Optional[VideoPipeline]:
    return getattr(request.app.state, "pipeline", None)

def require_pipeline(pipeline: Optional[VideoPipeline] = Depends(get_pipeline)) -> VideoPipeline:
    if pipeline is None:
        logger.error("Supabase client is not initialized. Cannot process request.")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Video processing service is temporarily unavailable."
        )
    return pipeline

# --- API Endpoints ---
@app.get("/")
async def read_root():
    return {"message": "Video Generation API is running."}

@app.get("/health", response_model=HealthResponse)
async def health():
    return HealthResponse(status="ok", timestamp=datetime.now(timezone.utc))

@app.post("/generate-video", response_model=GenerateVideoResponse, status_code=status.HTTP_202_ACCEPTED)
async def generate_video_endpoint(
    payload: GenerateVideoRequest,
    background_tasks: BackgroundTasks,
    pipeline: VideoPipeline = Depends(require_pipeline),
):
    """Accepts a script and starts narrated video generation in the background."""
    logger.info(f"Received video generation request for user: {payload.user_id}")

    try:
        generation_request = payload.to_generation_request()
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    # 1. Create the processing record before any generation work
    try:
        video_record = await pipeline.submit(generation_request)
    except RecordStoreError as e:
        logger.error(f"Failed to create initial video record in database: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to initiate video creation process."
        )

    # 2. Run the pipeline after the response has been sent
    background_tasks.add_task(pipeline.run, video_record, generation_request)
    logger.info(f"Video generation task for ID {video_record.id} added to background.")

    return GenerateVideoResponse(
        message="Video generation started. Poll the status endpoint for completion.",
        video_id=video_record.id,
        video=video_record,
    )

@app.get("/videos/{video_id}", response_model=VideoRecord)
async def get_video_status(video_id: str, pipeline: VideoPipeline = Depends(require_pipeline)):
    try:
        record = await pipeline.get(video_id)
    except RecordStoreError as e:
        logger.error(f"Failed to read video record {video_id}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to read video status.")
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Video {video_id} not found.")
    return record

# --- Uvicorn Runner (for local development) ---
if __name__ == "__main__":
    import uvicorn
    logger.info("Starting Uvicorn server...")
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
