"""
AfriVerse Editorial Desk - Pydantic Schemas
===========================================
Shared response schemas. Route-specific request bodies live beside their routers.
"""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "1.0.0"
    database: str = "connected"
    uptime_seconds: float = 0
