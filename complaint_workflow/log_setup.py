# ============================================================================
#  File: log_setup.py
#  Version: 1.00
#  Purpose: Loguru sink configuration for the workflow engine
# ============================================================================
# SECTION 1: Global Variable Definitions & Imports
# ============================================================================

import sys
from pathlib import Path
from typing import Optional, Union

from loguru import logger

from complaint_workflow.config import LOG_CONFIG

LOG_FORMAT = LOG_CONFIG["formatters"]["default"]["format"]

# ============================================================================
# SECTION 2: Loguru Configuration
# ============================================================================
# Function 2.1: configure_logging
# ============================================================================
def configure_logging(
    level: Optional[str] = None,
    log_dir: Optional[Union[str, Path]] = None,
) -> None:
    """
    Replace loguru's default sink with a console sink and, optionally, a
    rotating file sink.

    Args:
        level: Console level, defaults to LOG_CONFIG's console level
        log_dir: Directory for the rotating log file; no file sink when None
    """
    console_cfg = LOG_CONFIG["handlers"]["console"]
    file_cfg = LOG_CONFIG["handlers"]["file"]

    logger.remove()
    logger.add(
        sys.stderr,
        level=level or console_cfg["level"],
        format=LOG_FORMAT,
        colorize=True,
    )

    if log_dir is not None:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path / "complaint_workflow_{time:YYYY-MM-DD}.log",
            rotation=file_cfg["rotation"],
            retention=file_cfg["retention"],
            level=file_cfg["level"],
            format=LOG_FORMAT,
            compression=file_cfg["compression"],
        )
        logger.debug(f"File logging enabled in {log_path.resolve()}")
#
#
## End of Script
