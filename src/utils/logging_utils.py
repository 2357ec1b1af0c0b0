import logging
import os
from collections import deque
from logging.handlers import RotatingFileHandler
from typing import Dict, List

# log name -> (logger name, file name)
PIPELINE_LOG_FILES = {
    "scrape": ("news.scrape", "scrape.log"),
    "processing": ("news.processing", "processing.log"),
}


def setup_pipeline_file_logging(log_dir: str, log_level: int = logging.INFO) -> None:
    """Mirror the scrape and processing loggers into rotating files under log_dir"""
    os.makedirs(log_dir, exist_ok=True)
    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    for logger_name, file_name in PIPELINE_LOG_FILES.values():
        pipeline_logger = logging.getLogger(logger_name)
        pipeline_logger.setLevel(log_level)
        path = os.path.abspath(os.path.join(log_dir, file_name))

        already_installed = any(
            isinstance(h, RotatingFileHandler) and h.baseFilename == path
            for h in pipeline_logger.handlers
        )
        if already_installed:
            continue

        file_handler = RotatingFileHandler(
            path,
            maxBytes=10*1024*1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        pipeline_logger.addHandler(file_handler)


def read_log_tail(path: str, lines: int = 50) -> List[str]:
    if not os.path.exists(path):
        return []
    with open(path, encoding="utf-8", errors="replace") as handle:
        return [line.rstrip("\n") for line in deque(handle, maxlen=lines)]


def read_pipeline_logs(log_dir: str, lines: int = 50) -> Dict[str, List[str]]:
    return {
        name: read_log_tail(os.path.join(log_dir, file_name), lines)
        for name, (_, file_name) in PIPELINE_LOG_FILES.items()
    }
