# crowdscene/__main__.py
import logging

import uvicorn

from .config import settings
from .utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def main():
    setup_logging(settings.LOG_LEVEL)
    logger.info(f"🚀 CrowdScene backend listening on :{settings.PORT}")
    uvicorn.run(
        "crowdscene.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_config=None,
    )


if __name__ == "__main__":
    main()
