"""
Logging Configuration
Uygulama genelinde log formatı ve seviyeleri
"""
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from core.config import settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging() -> None:
    """Root logger'ı yapılandır"""
    handlers = [logging.StreamHandler()]

    if settings.LOG_FILE:
        log_path = Path(settings.LOG_FILE)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(log_path, maxBytes=5 * 1024 * 1024, backupCount=5, encoding="utf-8")
        )

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
    )

    # Socket.IO logları sadece debug modunda ayrıntılı
    socket_level = logging.INFO if settings.DEBUG else logging.WARNING
    logging.getLogger('socketio.server').setLevel(socket_level)
    logging.getLogger('engineio.server').setLevel(socket_level)
