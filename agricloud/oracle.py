# agricloud/oracle.py
import logging

import requests

from .config import get_settings
from .errors import OracleUnavailable

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are an agronomist. Reply with a single JSON object and nothing else."


class AdvisoryOracle:
    """Chat-completions client for the plan generator.

    Returns the model's message text untouched; shape checks happen in
    ``advisory.validate_advisory_response``. One request per call, no retry.
    """

    def __init__(self, api_url=None, api_key=None, model=None, timeout=None, session=None):
        settings = get_settings()
        self.api_url = api_url or settings.oracle_api_url
        self.api_key = api_key if api_key is not None else settings.oracle_api_key
        self.model = model or settings.oracle_model
        self.timeout = timeout or settings.oracle_timeout
        self.session = session or requests.Session()

    def complete(self, prompt: str) -> str:
        if not self.api_key:
            raise OracleUnavailable("advisory oracle API key is not configured")
        body = {
            "model": self.model,
            "temperature": 0.2,
            "response_format": {"type": "json_object"},
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        try:
            r = self.session.post(self.api_url, json=body, headers=headers, timeout=self.timeout)
            r.raise_for_status()
            data = r.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("advisory oracle request failed: %s", e)
            raise OracleUnavailable(f"advisory oracle request failed: {e}") from e

        try:
            text = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise OracleUnavailable("advisory oracle returned no message") from e
        if not text:
            raise OracleUnavailable("advisory oracle returned an empty message")
        return text
