import logging
import uvicorn
from app.core.config import get_settings
from app.main import app

logger = logging.getLogger("app")


def main():
    settings = get_settings()
    logger.info(f"Token server running on http://localhost:{settings.PORT}")
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
