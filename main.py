"""
main.py — Entry point for the MediTrack export service.
Configures file logging and launches the FastAPI backend.
"""

from loguru import logger
from config.settings import API_HOST, API_PORT, API_RELOAD, LOG_DIR, LOG_LEVEL, PROJECT_NAME

# Configure logging
logger.add(
    LOG_DIR / "export_service.log",
    rotation="50MB",
    retention="7 days",
    level=LOG_LEVEL,
    format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {name}:{line} | {message}"
)

if __name__ == "__main__":
    import uvicorn

    logger.info(f"{PROJECT_NAME} starting on {API_HOST}:{API_PORT}...")
    uvicorn.run(
        "api.main:app",
        host=API_HOST,
        port=API_PORT,
        reload=API_RELOAD,
    )
