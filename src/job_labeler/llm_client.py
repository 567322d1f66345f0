import logging
from typing import Any, Dict, Optional

import requests

from .models import FailureReason, OracleResult
from .settings import Settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are an email classifier that analyzes emails and categorizes them accurately."
MAX_TOKENS = 50
TEMPERATURE = 0.1
CONNECTION_TEST_PROMPT = 'Respond with "OK" if you can read this message.'

class ChatClassifier:
    """
    Sends classification prompts to a chat-completion endpoint.

    `classify` never raises: transport, decoding and empty-reply failures are
    returned as an OracleResult carrying the FailureReason.
    """

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        api_url: str,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.api_url = api_url
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings, session: Optional[requests.Session] = None) -> "ChatClassifier":
        return cls(
            api_key=settings.require_api_key(),
            model=settings.model,
            api_url=settings.api_url,
            timeout=settings.timeout_seconds,
            session=session,
        )

    def _payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": MAX_TOKENS,
            "temperature": TEMPERATURE,
        }

    def classify(self, prompt: str) -> OracleResult:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        try:
            response = self.session.post(
                self.api_url,
                json=self._payload(prompt),
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("Chat completion request failed: %s", exc)
            return OracleResult.fail(FailureReason.TRANSPORT_ERROR, str(exc))
        except Exception as exc:
            # e.g. OSError from the socket, UnicodeEncodeError for a non latin-1 key
            logger.warning("Chat completion request failed: %r", exc)
            return OracleResult.fail(FailureReason.TRANSPORT_ERROR, str(exc))

        try:
            data = response.json()
        except ValueError as exc:
            logger.warning("Chat completion returned invalid JSON: %s", exc)
            return OracleResult.fail(FailureReason.PARSE_ERROR, str(exc))

        choices = data.get("choices") if isinstance(data, dict) else None
        if not choices:
            logger.warning("Chat completion returned no choices")
            return OracleResult.fail(FailureReason.EMPTY, "no choices")

        try:
            content = choices[0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            logger.warning("Unexpected chat completion format: %s", exc)
            return OracleResult.fail(FailureReason.PARSE_ERROR, repr(exc))
        if not isinstance(content, str):
            logger.warning("Chat completion content is not text: %r", content)
            return OracleResult.fail(FailureReason.PARSE_ERROR, "content is not a string")

        text = content.strip()
        if not text:
            return OracleResult.fail(FailureReason.EMPTY, "blank content")
        return OracleResult.success(text)

    def test_connection(self) -> bool:
        result = self.classify(CONNECTION_TEST_PROMPT)
        if result.ok and "ok" in result.text.lower():
            logger.info("Chat completion API connection successful")
            return True
        logger.warning("Chat completion API connection failed (%s)", result.failure or result.text)
        return False
