import logging

from .config import settings

logger = logging.getLogger("chosic_scout")

if not logger.handlers:
    _handler = logging.StreamHandler()
    _handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(_handler)
    logger.setLevel(settings.LOG_LEVEL.upper())
