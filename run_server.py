# run_server.py
import logging
import uvicorn
from shopify_bridge.core.config import settings

log_level = settings.LOGGING_LEVEL.upper()
logging.basicConfig(
    level=log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

logger = logging.getLogger(__name__)


if __name__ == "__main__":
    logger.info(f"Server running on port {settings.PORT}")
    try:
        uvicorn.run("shopify_bridge.main:app", host="0.0.0.0", port=settings.PORT, log_level=settings.LOGGING_LEVEL.lower())
    except (KeyboardInterrupt, SystemExit):
        logger.info("Server stopped by user.")
