"""
Entry point for the skill tree player API.

Run with:
    uvicorn main:app --reload --port 8100
    python main.py
"""
import uvicorn

from config import get_settings
from skilltree.api.main import app

settings = get_settings()

if __name__ == "__main__":
    uvicorn.run(
        "skilltree.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
        log_level=settings.log_level.lower(),
    )
