import os

import uvicorn

from barometer.config import load_settings
from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="server")


if __name__ == "__main__":
    # Fail fast on invalid configuration before the server binds.
    settings = load_settings()
    setup_logging(level=settings.log_level, job_name="barometer")
    logger.info("Starting Barometer", extra={"port": os.getenv("PORT", 8000)})

    uvicorn.run(
        "barometer.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=int(os.getenv("PORT", 8000)),
        reload=False,
    )
