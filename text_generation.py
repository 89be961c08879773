"""
Generative-text capability for WeddingLedger.

A generator turns a prompt into a JSON object or raises ``GenerationFailure``.
``run_with_fallback`` applies the call-site policy shared by every flow: one
attempt, validate the payload, and substitute a fixed default on any failure.
"""
from __future__ import annotations
import json
import logging
from typing import Optional, Protocol, Type, TypeVar

import requests
from pydantic import BaseModel, ValidationError as SchemaError

from config import GEMINI_API_KEY, GEMINI_MODEL, GEMINI_TIMEOUT
from errors import GenerationFailure

logger = logging.getLogger(__name__)

GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

M = TypeVar("M", bound=BaseModel)


class TextGenerator(Protocol):
    def generate(self, prompt: str) -> dict:
        """Return the model's JSON answer for ``prompt``; raise GenerationFailure otherwise"""
        ...


class GeminiTextGenerator:
    """Calls the Gemini generateContent REST endpoint and asks for JSON output"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key or GEMINI_API_KEY
        self.model = model or GEMINI_MODEL
        self.timeout = timeout or GEMINI_TIMEOUT
        self.session = session or requests.Session()

    def generate(self, prompt: str) -> dict:
        if not self.api_key:
            raise GenerationFailure("No Gemini API key configured (set GEMINI_API_KEY).")
        body = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"responseMimeType": "application/json"},
        }
        try:
            resp = self.session.post(
                GEMINI_ENDPOINT.format(model=self.model),
                headers={"x-goog-api-key": self.api_key},
                json=body,
                timeout=self.timeout,
            )
            resp.raise_for_status()
            payload = resp.json()
        except (requests.RequestException, ValueError) as ex:
            raise GenerationFailure(f"Gemini request failed: {ex}") from ex

        try:
            text = payload["candidates"][0]["content"]["parts"][0]["text"]
            out = json.loads(text)
        except (KeyError, IndexError, TypeError, ValueError) as ex:
            raise GenerationFailure("Gemini returned no usable JSON output") from ex
        if not isinstance(out, dict):
            raise GenerationFailure("Gemini output is not a JSON object")
        return out


def run_with_fallback(generator: TextGenerator, prompt: str, output_model: Type[M], fallback: M) -> M:
    """Generate and validate; any failure yields ``fallback``"""
    try:
        raw = generator.generate(prompt)
        return output_model.model_validate(raw)
    except GenerationFailure as ex:
        logger.warning("%s generation failed, using fallback: %s", output_model.__name__, ex)
    except SchemaError as ex:
        logger.warning("%s output invalid, using fallback: %s", output_model.__name__, ex.errors())
    except Exception:
        logger.exception("%s generation raised unexpectedly, using fallback", output_model.__name__)
    return fallback
