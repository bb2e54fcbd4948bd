import contextlib
import time

from zkif import my_logging
from zkif.config import zkif_print


@contextlib.contextmanager
def time_measure(key, should_print=False, skip=False):
    start = time.time()
    yield
    end = time.time()
    elapsed = end - start

    if not skip:
        if should_print:
            zkif_print(f"Took {elapsed} s")
        my_logging.data("time_" + key, elapsed)

