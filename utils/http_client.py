"""HTTP client for outbound notification delivery."""
import json
import time
import logging
import requests

logger = logging.getLogger("v1z3r.http")


class DeliveryError(Exception):
    """Notification delivery error with status code and response body."""
    def __init__(self, message, status_code=None, response_body=None, url=None):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body
        self.url = url


class HTTPClient:
    """JSON POST client with a bounded timeout and optional retries."""

    RETRYABLE_STATUS = {429, 500, 502, 503, 504}

    def __init__(self, timeout=10, max_retries=0, user_agent="v1z3r-monitoring/1.0"):
        self.timeout = timeout
        self.max_retries = max_retries
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": user_agent})

    def post_json(self, url, payload, headers=None):
        """POST payload as JSON. Returns the response; raises DeliveryError on non-2xx."""
        body = json.dumps(payload)
        last_error = None
        for attempt in range(self.max_retries + 1):
            try:
                start = time.time()
                resp = self.session.post(url, data=body, headers=headers or {}, timeout=self.timeout)
                latency = int((time.time() - start) * 1000)
                logger.debug(f"POST {url} → {resp.status_code} ({latency}ms)")

                if 200 <= resp.status_code < 300:
                    return resp

                last_error = DeliveryError(
                    f"Webhook request failed: {resp.status_code}",
                    status_code=resp.status_code,
                    response_body=resp.text,
                    url=url,
                )
                if resp.status_code not in self.RETRYABLE_STATUS:
                    raise last_error

            except requests.exceptions.RequestException as e:
                logger.warning(f"Request error for {url}: {e} (attempt {attempt + 1})")
                last_error = e

            if attempt < self.max_retries:
                wait = min(2 ** attempt, 30)
                logger.warning(f"Retrying POST {url} in {wait}s (attempt {attempt + 1})")
                time.sleep(wait)

        raise last_error

    def close(self):
        self.session.close()
