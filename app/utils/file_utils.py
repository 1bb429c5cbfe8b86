import aiofiles
import os
import shutil
import logging

logger = logging.getLogger(__name__)

def ensure_dir(dir_path: str):
    """Ensures that a directory exists, creating it if necessary."""
    if not os.path.exists(dir_path):
        os.makedirs(dir_path, exist_ok=True)
        logger.info(f"Created directory: {dir_path}")

def cleanup_dir(dir_path: str) -> bool:
    """Removes a directory and its contents. Returns False when there was nothing to remove."""
    if not os.path.isdir(dir_path):
        return False
    try:
        shutil.rmtree(dir_path)
        logger.info(f"Successfully removed temporary directory: {dir_path}")
        return True
    except OSError as e:
        logger.error(f"Error removing directory {dir_path}: {e}")
        return False

async def write_bytes(file_path: str, data: bytes):
    async with aiofiles.open(file_path, mode='wb') as f:
        await f.write(data)

async def read_bytes(file_path: str) -> bytes:
    async with aiofiles.open(file_path, mode='rb') as f:
        return await f.read()
