import logging
import sys
from pathlib import Path

from swimlane.core.config import get_settings

# Директория для логов: LOG_DIR или каталог пакета
log_dir = Path(get_settings().LOG_DIR or Path(__file__).parent)
log_dir.mkdir(parents=True, exist_ok=True)


def setup_logging():
    logger = logging.getLogger("swimlane.api")
    logger.setLevel(logging.INFO)
    logger.propagate = False

    # Повторный импорт не должен дублировать обработчики
    if logger.handlers:
        return logger

    formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')

    file_handler = logging.FileHandler(log_dir / "api_requests.log", encoding='utf-8')
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    return logger


api_logger = setup_logging()
