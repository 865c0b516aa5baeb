"""
Google Generation Client
========================

Prompt enhancement through Gemini and image rendering through Imagen, both
via the Generative Language REST API.

Features:
- Multimodal enhancement requests (text plus inline reference images)
- Single JPEG render per call at a chosen aspect ratio
- API keys redacted from every logged or raised message
"""

import logging
from typing import Optional, List, Dict, Any

import httpx

from .base import (
    BaseGenerationClient,
    ImagePart,
    Part,
    RenderRequest,
    TextPart,
)
from .factory import register_client
from ..core.exceptions import CapabilityUnavailableError, EnhancementError, RenderError
from ..core.security import redact_api_key
from ..utils.image_utils import to_data_url

logger = logging.getLogger(__name__)


@register_client("google")
class GoogleGenerationClient(BaseGenerationClient):
    """
    Gemini + Imagen backend.

    The API key is sent as the ``key`` query parameter, as the Generative
    Language API expects.
    """

    @property
    def provider_name(self) -> str:
        return "Google Gemini"

    @property
    def env_key_name(self) -> str:
        return "GOOGLE_API_KEY"

    @property
    def default_enhance_model(self) -> str:
        return "gemini-2.5-flash"

    @property
    def default_image_model(self) -> str:
        return "imagen-3.0-generate-002"

    def _get_default_base_url(self) -> str:
        return "https://generativelanguage.googleapis.com/v1beta"

    def _get_headers(self) -> Dict[str, str]:
        """Google API uses API key as query param, not header."""
        return {
            "Content-Type": "application/json",
        }

    def _require_key(self) -> None:
        if not self.api_key:
            raise CapabilityUnavailableError(
                provider=self.provider_name,
                env_key=self.env_key_name,
            )

    # -------------------------------------------------------------------------
    # Prompt Enhancement
    # -------------------------------------------------------------------------

    async def enhance_prompt(
        self,
        parts: List[Part],
        model: Optional[str] = None,
    ) -> str:
        """
        Ask Gemini to turn the instruction parts into an image prompt.

        Args:
            parts: Ordered text and image parts
            model: Override the enhancement model

        Returns:
            The enhanced prompt, stripped of surrounding whitespace
        """
        self._require_key()
        model = model or self.enhance_model

        endpoint = f"{self.base_url}/models/{model}:generateContent"
        payload = self._build_enhance_payload(parts)

        logger.info(f"Enhancing prompt with {model} ({len(parts)} parts)")
        logger.debug(f"Enhancement text parts: {[p.text for p in parts if isinstance(p, TextPart)]}")

        try:
            client = await self._get_client()
            response = await client.post(endpoint, params={"key": self.api_key}, json=payload)
        except httpx.HTTPError as e:
            message = redact_api_key(str(e)) or e.__class__.__name__
            logger.error(f"Enhancement request failed: {message}")
            raise EnhancementError(
                f"Failed to generate enhanced prompt: {message}",
                provider=self.provider_name,
                model=model,
            )

        if response.status_code != 200:
            body = redact_api_key(response.text)
            logger.error(f"Enhancement API error: {response.status_code}")
            raise EnhancementError(
                f"Failed to generate enhanced prompt: API error {response.status_code}",
                provider=self.provider_name,
                model=model,
                status_code=response.status_code,
                response_body=body,
            )

        try:
            data = response.json()
        except ValueError:
            raise EnhancementError(
                "Failed to generate enhanced prompt: response was not valid JSON",
                provider=self.provider_name,
                model=model,
            )

        text = self._extract_text(data)
        if not text:
            reason = (data.get("promptFeedback") or {}).get("blockReason")
            detail = f" (blocked: {reason})" if reason else ""
            logger.error(f"{model} returned an empty enhanced prompt{detail}")
            raise EnhancementError(
                f"Failed to generate enhanced prompt: model returned an empty prompt{detail}",
                provider=self.provider_name,
                model=model,
            )

        logger.debug(f"Enhanced prompt: {text}")
        return text

    def _build_enhance_payload(self, parts: List[Part]) -> Dict[str, Any]:
        """Build the generateContent request payload."""
        wire_parts = []
        for part in parts:
            if isinstance(part, ImagePart):
                wire_parts.append({
                    "inlineData": {
                        "mimeType": part.mime_type,
                        "data": part.data,
                    }
                })
            else:
                wire_parts.append({"text": part.text})

        return {
            "contents": [{
                "role": "user",
                "parts": wire_parts,
            }]
        }

    @staticmethod
    def _extract_text(data: Dict[str, Any]) -> str:
        """Concatenate the text parts of the first candidate."""
        candidates = data.get("candidates") or []
        if not candidates:
            return ""

        content = candidates[0].get("content") or {}
        texts = [p.get("text", "") for p in content.get("parts") or [] if not p.get("thought")]
        return "".join(texts).strip()

    # -------------------------------------------------------------------------
    # Image Rendering
    # -------------------------------------------------------------------------

    async def render_image(self, prompt: str, aspect_ratio: str) -> str:
        """
        Render one image with Imagen.

        Args:
            prompt: The final image prompt
            aspect_ratio: Ratio string such as ``"16:9"``

        Returns:
            ``data:image/jpeg;base64,...``
        """
        self._require_key()

        try:
            request = RenderRequest(prompt=prompt, aspect_ratio=aspect_ratio)
        except ValueError as e:
            raise RenderError(
                f"Failed to generate image with Imagen: {e}",
                provider=self.provider_name,
                model=self.image_model,
                prompt=prompt,
            )

        endpoint = f"{self.base_url}/models/{self.image_model}:predict"
        payload = self._build_render_payload(request)

        logger.info(f"Rendering image with {self.image_model} at {request.aspect_ratio}")
        logger.debug(f"Render prompt: {request.prompt}")

        try:
            client = await self._get_client()
            response = await client.post(endpoint, params={"key": self.api_key}, json=payload)
        except httpx.HTTPError as e:
            message = redact_api_key(str(e)) or e.__class__.__name__
            logger.error(f"Render request failed: {message}")
            raise RenderError(
                f"Failed to generate image with Imagen: {message}",
                provider=self.provider_name,
                model=self.image_model,
                prompt=prompt,
            )

        if response.status_code != 200:
            logger.error(f"Render API error: {response.status_code}")
            raise RenderError(
                f"Failed to generate image with Imagen: API error {response.status_code}",
                provider=self.provider_name,
                model=self.image_model,
                prompt=prompt,
                status_code=response.status_code,
                response_body=redact_api_key(response.text),
            )

        try:
            data = response.json()
        except ValueError:
            raise RenderError(
                "Failed to generate image with Imagen: response was not valid JSON",
                provider=self.provider_name,
                model=self.image_model,
                prompt=prompt,
            )

        image_b64, mime_type = self._extract_image(data, request.mime_type)
        if not image_b64:
            logger.error("No image data in Imagen response")
            raise RenderError(
                "Failed to generate image with Imagen: no image generated or unexpected response structure",
                provider=self.provider_name,
                model=self.image_model,
                prompt=prompt,
            )

        return to_data_url(image_b64, mime_type)

    def _build_render_payload(self, request: RenderRequest) -> Dict[str, Any]:
        """Build the Imagen predict payload."""
        return {
            "instances": [{
                "prompt": request.prompt,
            }],
            "parameters": {
                "sampleCount": request.image_count,
                "aspectRatio": request.aspect_ratio,
                "outputOptions": {
                    "mimeType": request.mime_type,
                },
            },
        }

    @staticmethod
    def _extract_image(data: Dict[str, Any], default_mime: str):
        """Return (base64, mime_type) of the first prediction carrying bytes."""
        for prediction in data.get("predictions") or []:
            image_b64 = prediction.get("bytesBase64Encoded")
            if image_b64:
                return image_b64, prediction.get("mimeType") or default_mime
        return None, default_mime
