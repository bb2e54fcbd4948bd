"""
Logging setup of zkif.

Warnings go to the console, everything else to files next to each other: ``<log_file>_debug.log`` with all
messages tagged by the active log context (e.g. the gadget which is being called), and ``<log_file>_data.log``
with the DATA records (constraint counts, timings) as one JSON object per line.
"""
import datetime
import json
import logging
import logging.config
import os

from zkif.config import cfg
from zkif.my_logging.log_context import full_log_context

# Below DEBUG, so DATA records only reach the data log
DATA = 5
logging.addLevelName(DATA, 'DATA')

timestamp = '{:%Y-%m-%d_%H-%M-%S}'.format(datetime.datetime.now())


def data(key: str, value):
    """Log (key, value) with the current log context to log-level DATA."""
    d = {'key': key, 'value': value, 'context': list(full_log_context)}
    logging.log(DATA, json.dumps(d))


def get_log_file(filename: str = 'zkif', parent_dir: str = None, include_timestamp: bool = True) -> str:
    """Path prefix for the log files of one run, the directory is created if needed."""
    if parent_dir is None:
        parent_dir = os.path.realpath(cfg.log_dir)
    os.makedirs(parent_dir, exist_ok=True)
    if include_timestamp:
        filename += '_' + timestamp
    return os.path.join(parent_dir, filename)


class StatementContext(logging.Filter):
    """Attach the active log context (e.g. 'validate/mul') to every record."""

    def filter(self, record):
        record.context = '/'.join(full_log_context) or '-'
        return True


class OnlyData(logging.Filter):

    def filter(self, record):
        return record.levelno == DATA


def prepare_logger(log_file: str = None):
    if log_file is None:
        log_file = get_log_file()

    logging.config.dictConfig({
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'context': {
                'format': '%(asctime)s [%(levelname)s] %(context)s: %(message)s',
                'datefmt': '%Y-%m-%d_%H-%M-%S'
            },
            'json': {
                'format': '%(message)s'
            },
        },
        'filters': {
            'context': {'()': StatementContext},
            'onlydata': {'()': OnlyData},
        },
        'handlers': {
            'console': {
                'level': 'WARNING',
                'formatter': 'context',
                'filters': ['context'],
                'class': 'logging.StreamHandler',
            },
            'debug': {
                'level': 'DEBUG',
                'formatter': 'context',
                'filters': ['context'],
                'filename': log_file + '_debug.log',
                'mode': 'w',
                'class': 'logging.FileHandler',
            },
            'data': {
                'level': DATA,
                'formatter': 'json',
                'filters': ['onlydata'],
                'filename': log_file + '_data.log',
                'mode': 'w',
                'class': 'logging.FileHandler',
            },
        },
        'root': {
            'handlers': ['console', 'debug', 'data'],
            'level': DATA,
        },
    })


# register a default logger (can be overwritten later)
prepare_logger()
