
import time
import requests
from .logging import get_logger

log = get_logger(__name__)


def get(url, timeout=10, retries=2, params=None):
    return _request("GET", url, timeout=timeout, retries=retries, params=params)


def post(url, payload=None, timeout=10, retries=2):
    return _request("POST", url, timeout=timeout, retries=retries, json=payload)


def _request(method, url, timeout, retries, **kwargs):
    for attempt in range(retries + 1):
        try:
            resp = requests.request(method, url, timeout=timeout, **kwargs)
            resp.raise_for_status()
            return resp.json() if resp.content else {}
        except requests.RequestException as e:
            log.warning(f"http.{method.lower()} failed attempt={attempt} url={url} err={e}")
            if attempt == retries:
                raise
            time.sleep(0.5 * (attempt + 1))
