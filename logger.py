import sys
import time


def print_(*args, file=None):
    """Debug print: timestamped, to stderr unless `file` is given."""
    stamp = time.strftime("%H:%M:%S")
    print(f"[{stamp}]", *args, file=file if file is not None else sys.stderr)
