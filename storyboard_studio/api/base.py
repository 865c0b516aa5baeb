"""
Base Generation Client
======================

Abstract base class for remote prompt-enhancement and image-rendering
backends, plus the request shapes the orchestrator assembles.
"""

import os
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, List, Dict, Any, Union

import httpx

logger = logging.getLogger(__name__)


# =============================================================================
# Request Shapes
# =============================================================================


@dataclass
class TextPart:
    """A text segment of a multimodal enhancement request."""

    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"text": self.text}


@dataclass
class ImagePart:
    """An inline image of a multimodal enhancement request."""

    mime_type: str
    data: str  # base64, no data-URL prefix

    def to_dict(self) -> Dict[str, Any]:
        return {"image": {"mime_type": self.mime_type, "data": self.data}}


Part = Union[TextPart, ImagePart]


@dataclass
class RenderRequest:
    """Parameters of a single image render."""

    prompt: str
    aspect_ratio: str = "16:9"
    image_count: int = 1
    output_format: str = "jpeg"

    VALID_ASPECT_RATIOS = ("16:9", "9:16", "1:1", "4:3", "3:2")

    def __post_init__(self):
        if self.aspect_ratio not in self.VALID_ASPECT_RATIOS:
            raise ValueError(f"Unsupported aspect ratio: {self.aspect_ratio}")

    @property
    def mime_type(self) -> str:
        return f"image/{self.output_format}"


# =============================================================================
# Client Base Class
# =============================================================================


class BaseGenerationClient(ABC):
    """
    Abstract base class for generation backends.

    Both remote calls are single-shot: no retries happen here, retrying is
    left to whoever calls the orchestrator again.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: int = 120,
        enhance_model: Optional[str] = None,
        image_model: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            api_key: API key (or read from environment)
            base_url: Base URL for the API
            timeout: Request timeout in seconds
            enhance_model: Model used for prompt enhancement
            image_model: Model used for image rendering
            transport: Custom httpx transport (mainly for tests)
        """
        self.api_key = api_key or self._get_api_key_from_env()
        self.base_url = (base_url or self._get_default_base_url()).rstrip("/")
        self.timeout = timeout
        self.enhance_model = enhance_model or self.default_enhance_model
        self.image_model = image_model or self.default_image_model
        self._transport = transport

        self._client: Optional[httpx.AsyncClient] = None

        self._validate_config()

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the provider name."""
        pass

    @property
    @abstractmethod
    def env_key_name(self) -> str:
        """Return the environment variable name for the API key."""
        pass

    @property
    @abstractmethod
    def default_enhance_model(self) -> str:
        pass

    @property
    @abstractmethod
    def default_image_model(self) -> str:
        pass

    @abstractmethod
    def _get_default_base_url(self) -> str:
        """Return the default base URL for this provider."""
        pass

    @abstractmethod
    async def enhance_prompt(
        self,
        parts: List[Part],
        model: Optional[str] = None,
    ) -> str:
        """
        Turn a multimodal instruction into a detailed image prompt.

        Args:
            parts: Ordered text and image parts
            model: Override the enhancement model

        Returns:
            The enhanced prompt text

        Raises:
            EnhancementError: On transport/service failure or empty output
        """
        pass

    @abstractmethod
    async def render_image(self, prompt: str, aspect_ratio: str) -> str:
        """
        Render one image.

        Args:
            prompt: The final image prompt
            aspect_ratio: Ratio string such as ``"16:9"``

        Returns:
            The image as a base64 data URL

        Raises:
            RenderError: On transport/service failure or missing image
        """
        pass

    def is_available(self) -> bool:
        """Whether a credential is configured. Never touches the network."""
        return bool(self.api_key)

    def _get_api_key_from_env(self) -> Optional[str]:
        """Get API key from environment variable."""
        return os.getenv(self.env_key_name)

    def _validate_config(self) -> None:
        """Validate the client configuration."""
        if not self.api_key:
            logger.warning(
                f"No API key found for {self.provider_name}. "
                f"Set {self.env_key_name} environment variable or pass api_key parameter."
            )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                headers=self._get_headers(),
                transport=self._transport,
            )
        return self._client

    def _get_headers(self) -> Dict[str, str]:
        """Get default headers for requests."""
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
