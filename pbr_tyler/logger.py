import logging
import os
import sys
from datetime import datetime
from typing import Optional


def setup_logger(log_dir: Optional[str] = None, log_name: str = "pbr_tyler", level: str = "INFO") -> logging.Logger:
    """
    Sets up the root logger to write to:
    1. The console (standard output), always.
    2. A timestamped file in log_dir, when one is given.
    """
    logger = logging.getLogger()
    logger.setLevel(level)

    # Clear existing handlers to prevent duplicate logs on repeated setup
    if logger.hasHandlers():
        logger.handlers.clear()

    # --- Console Handler (Clean) ---
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(console_handler)

    # --- File Handler (Detailed) ---
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = os.path.join(log_dir, f"{log_name}_{timestamp}.log")

        file_handler = logging.FileHandler(filename, mode="w")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
        logger.addHandler(file_handler)
        logger.info(f"Logging initialized. Writing to: {filename}")

    return logger
