# campuslink/utils/retry.py
import logging

from tenacity import before_sleep_log, retry, stop_after_attempt, wait_exponential, retry_if_exception_type
import requests
import redis

from campuslink.utils.logging import get_logger

logger = get_logger(__name__)


def http_retry(attempts: int = 3):
    """Retry dla wywolan WhatsApp Cloud API, tylko bledy transportu/HTTP."""
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception_type(requests.RequestException),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )


def redis_retry(attempts: int = 3):
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(redis.RedisError),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )
