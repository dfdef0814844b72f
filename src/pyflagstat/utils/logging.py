"""
Logging utilities for pyflagstat.
Sets up console logging and an optional log file, shared with pool workers.
"""

import logging
import sys
import multiprocessing
from pathlib import Path
from typing import Optional
from logging.handlers import QueueHandler, QueueListener

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(output_dir: Optional[Path] = None, verbose: bool = False):
    """
    Setup logging to stderr (INFO, or DEBUG when verbose) and, when an output
    directory is given, to log.txt (DEBUG) inside it.
    Supports multiprocessing via a QueueListener.

    stdout is left alone since the report is written there.

    :param output_dir: Directory to save log.txt, or None for console only.
    :param verbose: Log DEBUG messages to the console too.
    :return: The Queue to pass to workers, and the listener to stop at exit.
    """
    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(formatter)
    handlers = [console_handler]

    log_file = None
    if output_dir is not None:
        output_dir.mkdir(parents=True, exist_ok=True)
        log_file = output_dir / "log.txt"
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    queue = multiprocessing.Manager().Queue(-1)

    listener = QueueListener(queue, *handlers, respect_handler_level=True)
    listener.start()

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in root.handlers[:]:
        root.removeHandler(h)
    root.addHandler(QueueHandler(queue))

    if log_file is not None:
        root.info(f"Logging initialized. Log file: {log_file}")

    return queue, listener


def worker_configurer(queue):
    """
    Configure a worker process to log to the central queue.
    """
    h = QueueHandler(queue)
    root = logging.getLogger()
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(h)
    root.setLevel(logging.DEBUG)
