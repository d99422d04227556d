"""Run the Swasthya booking API with uvicorn (``python main.py``)."""

import uvicorn

from swasthya.config import settings
from swasthya.core.logging import logger


if __name__ == "__main__":
    logger.info(f"Starting {settings.APP_NAME} on port {settings.PORT} ({settings.ENVIRONMENT})")
    uvicorn.run(
        "swasthya.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
