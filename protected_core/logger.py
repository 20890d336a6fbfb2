import logging, json, sys, time, os


def get_logger(name="protected", level=None, to_file=None):
    """
    JSON-line logger shared by all protected_core modules.

    Defaults come from PROTECTED_CORE_LOG_LEVEL (INFO) and
    PROTECTED_CORE_LOG_FILE (unset: stdout only).
    """
    logger = logging.getLogger(name)
    logger.setLevel(level or os.getenv("PROTECTED_CORE_LOG_LEVEL", "INFO").upper())

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            fmt=json.dumps({
                "ts": "%(asctime)s",
                "level": "%(levelname)s",
                "name": "%(name)s",
                "msg": "%(message)s"
            }),
            datefmt="%Y-%m-%dT%H:%M:%SZ",
        )
        formatter.converter = time.gmtime  # UTC timestamps
        handler.setFormatter(formatter)
        logger.addHandler(handler)

        to_file = to_file or os.getenv("PROTECTED_CORE_LOG_FILE")
        if to_file:
            os.makedirs(os.path.dirname(to_file) or ".", exist_ok=True)
            file_handler = logging.FileHandler(to_file)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger
