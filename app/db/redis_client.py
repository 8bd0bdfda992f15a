# app/db/redis_client.py
import os
import redis.asyncio as redis

# Load Redis URL from environment, fallback to default
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

# Create a Redis client instance
redis_client = redis.from_url(REDIS_URL, decode_responses=True)

async def get_redis():
    """
    Dependency to provide Redis client in FastAPI endpoints
    Usage: `redis: redis.Redis = Depends(get_redis)`
    """
    yield redis_client  # client persists for the app lifetime, never closed per request
