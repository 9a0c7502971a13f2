#Description: Loguru configuration for the worker: coloured stdout plus an optional rotating file.

from loguru import logger
import sys

from utils.config import settings

logger.remove()
logger.add(sys.stdout, level=settings.LOG_LEVEL,
           colorize=True,
           format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level}</level> | <cyan>{message}</cyan>")
if settings.LOG_FILE:
    logger.add(settings.LOG_FILE, level=settings.LOG_LEVEL, rotation="00:00", retention="7 days",
               format="{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}")
