import logging
import json
from datetime import datetime, timezone

LOGGER_NAME = "demand_assembly"


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            json.dumps({
                "time": "%(asctime)s",
                "level": "%(levelname)s",
                "message": "%(message)s",
                "module": "%(module)s",
                "funcName": "%(funcName)s",
                "lineno": "%(lineno)d"
            }),
            datefmt="%Y-%m-%d %H:%M:%S"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(logging.INFO)
    return logger


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def log_metric(metric_name: str, value: float = 1, metadata: dict = None):
    """
    Emit a single metric line. Assembly runs report section counts,
    drafting latency and fallback counts through here.
    """
    try:
        logger.info(json.dumps({
            "metric": metric_name,
            "value": value,
            "metadata": metadata or {},
            "timestamp": _utc_now()
        }, default=str))
    except (TypeError, ValueError) as e:
        logger.warning(f"[METRIC] Could not serialize metric {metric_name}: {e}")


def log_error_with_metrics(error: Exception, code: str, context: dict = None):
    try:
        logger.error(json.dumps({
            "error_code": code,
            "error": str(error),
            "context": context or {},
            "timestamp": _utc_now()
        }, default=str))
    except (TypeError, ValueError) as e:
        logger.warning(f"[METRIC] Could not serialize error {code}: {e}")


logger = get_logger()
