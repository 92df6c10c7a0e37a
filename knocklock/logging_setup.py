# =======================================================================================
# knocklock/logging_setup.py - Logging Configuration
# =======================================================================================
import logging
import os
from typing import Optional

_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
_configured = False


def setup_logging(debug: bool = False, log_path: Optional[str] = None) -> None:
    global _configured

    root = logging.getLogger()
    root.setLevel(logging.DEBUG if debug else logging.INFO)

    # create_app() may run more than once per process (tests, reload)
    if _configured:
        return

    fmt = logging.Formatter(_FORMAT)

    ch = logging.StreamHandler()
    ch.setFormatter(fmt)
    root.addHandler(ch)

    if log_path:
        log_dir = os.path.dirname(log_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        fh = logging.FileHandler(log_path)
        fh.setFormatter(fmt)
        root.addHandler(fh)

    _configured = True
