import base64
import logging
from typing import Optional

import openai

logger = logging.getLogger(__name__)


class CompletionServiceError(Exception):
    """The completion service could not be reached or returned an error status."""


class OpenAICompletionClient:
    """Thin wrapper over the OpenAI chat completions endpoint, text or vision."""

    def __init__(self, api_key: str, text_model: str = "gpt-4o", vision_model: str = "gpt-4o",
                 timeout: float = 60.0, client: Optional[openai.OpenAI] = None):
        self.text_model = text_model
        self.vision_model = vision_model
        # One outbound call per request; the SDK would otherwise retry on its own.
        self._client = client or openai.OpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    def complete(self, prompt: str, image: Optional[bytes] = None, mime_type: str = "image/jpeg") -> str:
        if image is None:
            model = self.text_model
            content = prompt
        else:
            model = self.vision_model
            encoded = base64.b64encode(image).decode("ascii")
            content = [
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": {"url": f"data:{mime_type};base64,{encoded}"}},
            ]

        logger.info("[OpenAI] Requesting %s completion from %s", "vision" if image is not None else "text", model)
        try:
            response = self._client.chat.completions.create(
                model=model,
                messages=[{"role": "user", "content": content}],
                temperature=0,
            )
        except openai.OpenAIError as e:
            raise CompletionServiceError(f"{type(e).__name__}: {e}") from e

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""
