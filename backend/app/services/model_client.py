import base64
import binascii
import logging
import re
from typing import Any, Dict, List, Optional, Protocol, Tuple

import google.generativeai as genai
import requests
from google.api_core import exceptions as google_exceptions

from app.config import GATEWAY_PROVIDER, GEMINI_PROVIDER, Settings
from app.services.errors import ConfigurationError, UpstreamError, ValidationError

logger = logging.getLogger(__name__)

DATA_URI_PATTERN = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[^;,]*)*?);base64,(?P<data>.*)$", re.DOTALL)

# Generation configuration for direct Gemini calls
generation_config = {
    "temperature": 0.4,
    "top_p": 1,
    "top_k": 32,
    "max_output_tokens": 8192,
    "response_mime_type": "application/json",
}

# Safety settings (adjust as needed)
safety_settings = [
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_SEXUALLY_EXPLICIT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
    {"category": "HARM_CATEGORY_DANGEROUS_CONTENT", "threshold": "BLOCK_MEDIUM_AND_ABOVE"},
]


class ModelClient(Protocol):
    def complete(self, messages: List[Dict[str, Any]]) -> Optional[str]:
        """Sends system/user chat messages and returns the model's text (None if it gave none)."""
        ...


def extract_message_content(data: Any) -> Optional[str]:
    """Reads choices[0].message.content from a chat-completions reply."""
    if not isinstance(data, dict):
        return None
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    message = choices[0].get("message") or {}
    content = message.get("content") if isinstance(message, dict) else None
    if isinstance(content, list):
        # Some gateways answer with a list of content parts
        content = "".join(
            part["text"] for part in content if isinstance(part, dict) and isinstance(part.get("text"), str)
        )
    return content if isinstance(content, str) else None


class GatewayModelClient:
    """Calls an OpenAI-compatible chat-completions endpoint with a bearer credential."""

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self._settings = settings
        self._session = session or requests.Session()

    def complete(self, messages: List[Dict[str, Any]]) -> Optional[str]:
        api_key = self._settings.gateway_api_key
        if not api_key:
            raise ConfigurationError("AI_GATEWAY_API_KEY not configured")

        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        payload = {"model": self._settings.gateway_model, "messages": messages}

        logger.info(f"Sending request to AI gateway (model={self._settings.gateway_model})")
        try:
            response = self._session.post(
                self._settings.gateway_url,
                json=payload,
                headers=headers,
                timeout=self._settings.request_timeout_s,
            )
        except requests.exceptions.Timeout as e:
            logger.error(f"AI API request timed out after {self._settings.request_timeout_s}s: {e}")
            raise UpstreamError("AI API request timed out")
        except requests.exceptions.RequestException as e:
            logger.error(f"AI API request failed: {e}")
            raise UpstreamError("AI API request failed")

        if not response.ok:
            logger.error(f"AI API error: {response.status_code} {response.text[:500]}")
            raise UpstreamError(f"AI API error: {response.status_code}", status=response.status_code, body=response.text)

        try:
            data = response.json()
        except ValueError:
            logger.error(f"AI API returned a body that is not JSON: {response.text[:500]}")
            raise UpstreamError("AI API returned an unreadable response", status=response.status_code, body=response.text)

        logger.info("Received response from AI gateway.")
        return extract_message_content(data)


def decode_data_uri(uri: str) -> Tuple[str, bytes]:
    """Splits a base64 data URI into (mime type, raw bytes)."""
    match = DATA_URI_PATTERN.match(uri)
    if not match:
        raise ValidationError(["image"], "image must be a base64 data URI or an http(s) URL")
    try:
        data = base64.b64decode(match.group("data"), validate=False)
    except (binascii.Error, ValueError):
        raise ValidationError(["image"], "image data URI is not valid base64")
    return match.group("mime") or "image/jpeg", data


class GeminiModelClient:
    """Calls Google Gemini directly through google-generativeai."""

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None):
        self._settings = settings
        # Only used to download images referenced by URL
        self._session = session or requests.Session()

    def _image_part(self, url: str) -> Dict[str, Any]:
        if url.startswith("data:"):
            mime_type, data = decode_data_uri(url)
            return {"mime_type": mime_type, "data": data}
        if not url.startswith(("http://", "https://")):
            raise ValidationError(["image"], "image must be a base64 data URI or an http(s) URL")

        logger.info(f"Downloading image for Gemini from {url[:100]}")
        try:
            response = self._session.get(url, timeout=self._settings.request_timeout_s)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error(f"Could not download image {url[:100]}: {e}")
            raise UpstreamError("Could not download image for analysis")
        mime_type = response.headers.get("Content-Type", "image/jpeg").split(";")[0].strip()
        return {"mime_type": mime_type, "data": response.content}

    def to_gemini_request(self, messages: List[Dict[str, Any]]) -> Tuple[Optional[str], List[Any]]:
        """Returns (system instruction, content parts) for a chat message list."""
        system_texts = []
        parts = []
        for message in messages:
            content = message.get("content")
            if message.get("role") == "system":
                system_texts.append(content)
                continue
            if isinstance(content, str):
                parts.append(content)
                continue
            for part in content or []:
                if part.get("type") == "text":
                    parts.append(part["text"])
                elif part.get("type") == "image_url":
                    parts.append(self._image_part(part["image_url"]["url"]))
        return ("\n\n".join(system_texts) or None), parts

    def complete(self, messages: List[Dict[str, Any]]) -> Optional[str]:
        api_key = self._settings.google_api_key
        if not api_key:
            raise ConfigurationError("GOOGLE_API_KEY not configured")

        system_instruction, parts = self.to_gemini_request(messages)
        genai.configure(api_key=api_key)
        model = genai.GenerativeModel(
            model_name=self._settings.gemini_model,
            generation_config=generation_config,
            safety_settings=safety_settings,
            system_instruction=system_instruction,
        )

        logger.info(f"Sending request to Gemini API (model={self._settings.gemini_model})")
        try:
            response = model.generate_content(parts, request_options={"timeout": self._settings.request_timeout_s})
        except google_exceptions.GoogleAPICallError as e:
            logger.error(f"Gemini API error: {e.code} {e.message}")
            raise UpstreamError(f"AI API error: {e.code}", status=e.code, body=str(e.message))
        except google_exceptions.GoogleAPIError as e:
            logger.error(f"Gemini API request failed: {e}")
            raise UpstreamError("AI API request failed", body=str(e))
        logger.info("Received response from Gemini API.")

        try:
            return response.text
        except ValueError:
            # Blocked or empty candidates carry no text
            block_reason = getattr(response.prompt_feedback, "block_reason", None)
            logger.warning(f"Gemini returned no text content (block reason: {block_reason})")
            return None


def create_model_client(settings: Settings, session: Optional[requests.Session] = None) -> ModelClient:
    if settings.provider == GATEWAY_PROVIDER:
        return GatewayModelClient(settings, session)
    if settings.provider == GEMINI_PROVIDER:
        return GeminiModelClient(settings, session)
    raise ConfigurationError(f"Unknown AI_PROVIDER '{settings.provider}'")
