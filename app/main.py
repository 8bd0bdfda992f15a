import logging
import os

from fastapi import FastAPI
from app.routers import booking, notification

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

app = FastAPI(
    title="Property Bookings",
    version="1.0.0"
)

# --- Register Routers ---
app.include_router(booking.router)          # /api/v1/property/*
app.include_router(notification.router)     # /api/v1/notification/*


# --- Root health check ---
@app.get("/")
async def root():
    return {"message": "Property Bookings API is running"}
