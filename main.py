"""
Omni API server.
Run with: python main.py  (or: uvicorn main:app)
"""

import uvicorn

from omni.core.config import get_settings
from omni.factory import create_app

settings = get_settings()
app = create_app(settings)


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.env == "development",
        log_level=settings.log_level.lower(),
    )
