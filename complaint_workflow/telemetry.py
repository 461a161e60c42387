# ============================================================================
#  File: telemetry.py
#  Version: 2.0
#  Purpose: Internal telemetry for node handlers (timing, usage, resource)
# ============================================================================
# SECTION 1: Global Variables
# ============================================================================

import csv
import functools
import os
import threading
import time
from datetime import datetime
from typing import Dict, Optional

import psutil
from loguru import logger

_telemetry_csv: Optional[str] = None
_usage: Dict[str, int] = {}
_usage_lock = threading.Lock()

# ============================================================================
# Function 1.1: configure_telemetry
# ============================================================================
def configure_telemetry(csv_path: Optional[str]) -> None:
    """Set (or clear, with a falsy value) the CSV file timing rows are appended to."""
    global _telemetry_csv
    _telemetry_csv = csv_path or None
    if _telemetry_csv:
        directory = os.path.dirname(_telemetry_csv)
        if directory:
            os.makedirs(directory, exist_ok=True)

# ============================================================================
# SECTION 2: Timing Decorator
# ============================================================================
# Function 2.1: _write_row
# ============================================================================
def _write_row(row: dict) -> None:
    if not _telemetry_csv:
        return
    try:
        with open(_telemetry_csv, 'a', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=row.keys())
            if f.tell() == 0:
                writer.writeheader()
            writer.writerow(row)
    except OSError as e:
        logger.warning(f"Could not write telemetry row to {_telemetry_csv}: {e}")

# ============================================================================
# Function 2.2: record_telemetry
# ============================================================================
def record_telemetry(component, action):
    """
    Decorator to record timing and memory usage of an async handler action.
    Rows go to the configured CSV; the usage counter is always incremented.
    """
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            start = time.perf_counter()
            process = psutil.Process(os.getpid())
            mem_before = process.memory_info().rss
            outcome = 'ok'
            try:
                return await func(*args, **kwargs)
            except Exception:
                outcome = 'error'
                raise
            finally:
                elapsed = time.perf_counter() - start
                mem_after = process.memory_info().rss
                increment_usage(component, action)
                logger.debug(f"{component}.{action} finished in {elapsed:.3f}s ({outcome})")
                _write_row({
                    'datetime': datetime.now().isoformat(),
                    'component': component,
                    'action': action,
                    'outcome': outcome,
                    'elapsed_sec': round(elapsed, 3),
                    'mem_mb': round((mem_after - mem_before) / 1048576, 3),
                })
        return wrapper
    return decorator

# ============================================================================
# SECTION 3: Usage Counter
# ============================================================================
# Function 3.1: increment_usage
# ============================================================================
def increment_usage(component, action):
    key = f'{component}:{action}'
    with _usage_lock:
        _usage[key] = _usage.get(key, 0) + 1
        return _usage[key]

# ============================================================================
# Function 3.2: get_usage
# ============================================================================
def get_usage() -> Dict[str, int]:
    with _usage_lock:
        return dict(_usage)
#
#
## End of Script
