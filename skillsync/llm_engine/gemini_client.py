"""Gemini API client for SkillSync Brain.

This module provides a thin wrapper around the Gemini ``generateContent`` REST
endpoint used as the resume-vs-job matching engine.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, Optional

import requests
from loguru import logger

from .errors import (
    AIAuthError,
    AINetworkError,
    AINotConfiguredError,
    AIRateLimitError,
    AIResponseError,
    AIServiceError,
)

PREFERRED_MODELS = (
    "gemini-2.5-flash",
    "gemini-2.5-pro",
    "gemini-2.0-flash",
    "gemini-2.0-flash-exp",
    "gemini-flash-latest",
    "gemini-pro-latest",
)


class GeminiClient:
    """Client for interacting with the Gemini generateContent API."""

    _BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta/models"

    def __init__(self, api_key: str | None, model: str = "gemini-2.5-flash", timeout: float = 60.0) -> None:
        if not api_key:
            logger.error("GEMINI_API_KEY is not configured. GeminiClient will not be able to send requests.")
            raise AINotConfiguredError("Gemini API not configured. Please set GEMINI_API_KEY in .env")
        self.api_key: str = api_key
        self.model: str = model
        self.timeout: float = timeout

    @classmethod
    def from_settings(cls, app_settings: Any) -> Optional["GeminiClient"]:
        """Build a client, or return None when no API key is configured."""
        if not app_settings.GEMINI_API_KEY:
            logger.warning("GEMINI_API_KEY not configured; analysis endpoints will answer 503")
            return None
        return cls(app_settings.GEMINI_API_KEY, app_settings.MODEL_NAME, app_settings.AI_TIMEOUT_SEC)

    def run(self, prompt: str, model: str | None = None) -> str:
        """Run a single generateContent request.

        Parameters
        ----------
        prompt: str
            The prompt to send to the model.
        model: str, optional
            Overrides the configured model for this call.

        Returns
        -------
        str
            The text of the first candidate returned by the model.
        """
        model_name = model or self.model
        url = f"{self._BASE_URL}/{model_name}:generateContent"
        headers = {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json",
        }
        payload: Dict[str, Any] = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": 0.2},
        }

        try:
            response = requests.post(url, headers=headers, data=json.dumps(payload), timeout=self.timeout)
        except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as exc:
            logger.error("Network error while calling Gemini API: {}", exc)
            raise AINetworkError(
                "Network error: Unable to reach Gemini API. Please check your internet connection."
            ) from exc
        except requests.exceptions.RequestException as exc:
            logger.error("Error while calling Gemini API: {}", exc)
            raise AIServiceError("Failed to call Gemini API") from exc

        if response.status_code == 429:
            raise AIRateLimitError("API rate limit exceeded. Please try again in a moment.")
        if response.status_code in (401, 403):
            raise AIAuthError("Invalid API key. Please check your GEMINI_API_KEY in .env file.")
        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as exc:
            logger.error("Gemini API returned HTTP {}: {}", response.status_code, response.text[:500])
            raise AIServiceError(f"Gemini API request failed with status {response.status_code}") from exc

        try:
            data: Dict[str, Any] = response.json()
        except ValueError as exc:
            logger.error("Failed to parse Gemini API response as JSON. Raw text: {}", response.text[:500])
            raise AIResponseError("Invalid response from Gemini API") from exc

        try:
            parts = data["candidates"][0]["content"]["parts"]
            return "".join(part.get("text", "") for part in parts)
        except (KeyError, IndexError, TypeError) as exc:
            logger.error("Unexpected Gemini API response structure: {}", data)
            raise AIResponseError("Unexpected Gemini API response structure") from exc

    def probe_models(self, candidates: Iterable[str] = PREFERRED_MODELS) -> str:
        """Keep the first candidate model that answers a tiny request.

        Falls back to the configured model when none of them respond.
        """
        for model_name in candidates:
            try:
                self.run("Test", model=model_name)
            except AIServiceError as exc:
                logger.info("Model {} failed: {}", model_name, exc)
                continue
            self.model = model_name
            logger.info("Connected to Gemini model: {}", model_name)
            return model_name
        logger.warning("Could not verify connectivity to any preferred Gemini model; keeping {}", self.model)
        return self.model
