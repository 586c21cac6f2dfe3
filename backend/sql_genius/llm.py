import json
import logging
import re
from typing import Any, Optional

from .config import settings

try:
    import google.generativeai as genai

    _HAS_GENAI = True
except Exception:
    _HAS_GENAI = False

_log = logging.getLogger("sql_genius.llm")

_ESCAPE = re.compile(r"\\(.?)", flags=re.DOTALL)
_VALID_ESCAPES = set('"\\/bfnrtu')


def _fix_escape(match: "re.Match") -> str:
    nxt = match.group(1)
    if nxt and nxt in _VALID_ESCAPES:
        return match.group(0)
    return "\\\\" + nxt


class LLMError(Exception):
    """The model call failed or returned nothing usable."""


class LLMUnavailableError(LLMError):
    """No model is configured (missing library or API key)."""


def strip_code_fences(text: str) -> str:
    text = (text or "").strip()
    if text.startswith("```"):
        text = text.strip("`").strip()
        if text.lower().startswith("json"):
            text = text[4:]
    return text.strip()


def loads_model_json(text: str) -> Any:
    """Parse model output as JSON, tolerating code fences and stray backslashes.

    Models often emit SQL or regex fragments with unescaped backslashes inside
    JSON strings; those are doubled and the parse is retried once. Any other
    decode error propagates as ``json.JSONDecodeError``.
    """
    text = strip_code_fences(text)
    try:
        return json.loads(text)
    except json.JSONDecodeError as je:
        if "Invalid \\escape" not in str(je):
            raise
        return json.loads(_ESCAPE.sub(_fix_escape, text))


class GeminiClient:
    """Sends a prompt to Gemini and returns the raw JSON text of the reply."""

    def __init__(self, api_key: Optional[str] = None, model_name: Optional[str] = None):
        self.api_key = api_key if api_key is not None else settings.gemini_api_key
        self.model_name = model_name or settings.gemini_model

    def _model(self):
        if not _HAS_GENAI:
            raise LLMUnavailableError("google-generativeai is not installed.")
        if not self.api_key:
            raise LLMUnavailableError("GEMINI_API_KEY is not set.")
        genai.configure(api_key=self.api_key)
        return genai.GenerativeModel(
            model_name=self.model_name,
            generation_config={
                "response_mime_type": "application/json",
            },
        )

    async def generate_json(self, prompt: str) -> str:
        model = self._model()
        try:
            resp = await model.generate_content_async(prompt)
            text = resp.text
        except Exception as exc:
            _log.warning("model_call_failed model=%s", self.model_name, exc_info=True)
            raise LLMError(str(exc)) from exc
        if not text or not text.strip():
            raise LLMError("The model returned an empty response.")
        return text
