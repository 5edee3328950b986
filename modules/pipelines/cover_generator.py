"""Book cover generation backed by Gemini image models."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from google import genai
from google.genai import types

from config.settings import AppConfig
from modules.pipelines.errors import KeyRequiredError, UpstreamError, ValidationError

logger = logging.getLogger(__name__)

GENRES = (
    "Fantasy",
    "Sci-Fi",
    "Mystery",
    "Romance",
    "Thriller",
    "Historical",
    "Non-Fiction",
)
STYLES = (
    "Cinematic",
    "Minimalist",
    "Oil Painting",
    "Digital Art",
    "Gothic",
    "Pastel",
)
DEFAULT_GENRE = "Fiction"
DEFAULT_STYLE = "Cinematic"

KEY_NOT_FOUND_MARKER = "Requested entity was not found"
NO_IMAGE_MESSAGE = "No image data found in response"

PROMPT_TEMPLATE = """
Create a professional, stunning book cover design for a book titled "{title}"{author_clause}.
Genre: {genre}.
Visual Style/Vibe: {style}.
Details: {description}.

The layout should be a standard portrait book cover. The title should be prominently featured in a high-quality, elegant font that matches the genre. Ensure the composition is balanced and cinematic.
"""


class ModelTier(str, Enum):
    """Supported image model tiers."""

    BASIC = "basic"
    PRO = "pro"


class ImageSize(str, Enum):
    """Output resolutions accepted by the pro tier."""

    SIZE_1K = "1K"
    SIZE_2K = "2K"
    SIZE_4K = "4K"


@dataclass(frozen=True, slots=True)
class GenerationParams:
    """Snapshot of the form values used for one generation."""

    title: str
    description: str = ""
    genre: str = DEFAULT_GENRE
    style: str = DEFAULT_STYLE
    model: ModelTier = ModelTier.BASIC
    author: Optional[str] = None
    image_size: Optional[ImageSize] = ImageSize.SIZE_1K

    @classmethod
    def from_form(
        cls,
        title: Optional[str],
        author: Optional[str] = None,
        genre: Optional[str] = None,
        style: Optional[str] = None,
        description: Optional[str] = None,
        model: Any = ModelTier.BASIC,
        image_size: Any = None,
    ) -> "GenerationParams":
        """Build params from raw UI values."""
        return cls(
            title=(title or "").strip(),
            author=(author or "").strip() or None,
            genre=genre or DEFAULT_GENRE,
            style=style or DEFAULT_STYLE,
            description=(description or "").strip(),
            model=parse_tier(model),
            image_size=_parse_size(image_size),
        )

    def validate(self) -> None:
        """Raise ValidationError when the title is missing."""
        if not self.title.strip():
            raise ValidationError("Please enter a book title")

    @property
    def is_pro(self) -> bool:
        return self.model is ModelTier.PRO


def parse_tier(value: Any) -> ModelTier:
    """Parse a tier value, falling back to the basic tier."""
    if isinstance(value, ModelTier):
        return value
    try:
        return ModelTier(str(value).lower())
    except ValueError:
        return ModelTier.BASIC


def _parse_size(value: Any) -> Optional[ImageSize]:
    if value in ("", None):
        return None
    if isinstance(value, ImageSize):
        return value
    try:
        return ImageSize(str(value).upper())
    except ValueError:
        return None


def build_prompt(params: GenerationParams) -> str:
    """Interpolate the form values into the cover prompt template."""
    author_clause = f" by {params.author}" if params.author else ""
    return PROMPT_TEMPLATE.format(
        title=params.title,
        author_clause=author_clause,
        genre=params.genre,
        style=params.style,
        description=params.description,
    )


def build_image_config(
    params: GenerationParams,
    aspect_ratio: str = "3:4",
    default_size: str = ImageSize.SIZE_1K.value,
) -> dict[str, str]:
    """Return image config fields; only the pro tier carries a resolution."""
    image_config = {"aspect_ratio": aspect_ratio}
    if params.is_pro:
        image_config["image_size"] = params.image_size.value if params.image_size else default_size
    return image_config


def extract_image_url(response: Any) -> Optional[str]:
    """Return the first inline image of the first candidate as a data URI."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None
    content = getattr(candidates[0], "content", None)
    for part in getattr(content, "parts", None) or []:
        inline_data = getattr(part, "inline_data", None)
        if not inline_data or not getattr(inline_data, "data", None):
            continue
        payload = inline_data.data
        if isinstance(payload, (bytes, bytearray)):
            payload = base64.b64encode(payload).decode("utf-8")
        return f"data:image/png;base64,{payload}"
    return None


class CoverGenerationService:
    """Facade around the Gemini image generation API."""

    def __init__(self, config: AppConfig, client: Optional[Any] = None) -> None:
        self.config = config
        self._client = client
        self._client_key: Optional[str] = config.api_key if client is not None else None

    def _get_client(self) -> Any:
        """Lazily create the client, rebuilding it after the API key changes."""
        if self._client is not None and self._client_key == self.config.api_key:
            return self._client
        self._client = genai.Client(api_key=self.config.api_key)
        self._client_key = self.config.api_key
        logger.info("Gemini client initialized")
        return self._client

    def resolve_model_id(self, tier: ModelTier) -> str:
        models: Mapping[ModelTier, str] = {
            ModelTier.BASIC: self.config.basic_model_id,
            ModelTier.PRO: self.config.pro_model_id,
        }
        return models[tier]

    def build_request(self, params: GenerationParams) -> dict[str, Any]:
        """Return the keyword arguments for ``generate_content``."""
        image_config = build_image_config(
            params,
            aspect_ratio=self.config.aspect_ratio,
            default_size=self.config.default_image_size,
        )
        return {
            "model": self.resolve_model_id(params.model),
            "contents": [
                types.Content(role="user", parts=[types.Part(text=build_prompt(params))])
            ],
            "config": types.GenerateContentConfig(
                image_config=types.ImageConfig(**image_config),
            ),
        }

    async def generate(self, params: GenerationParams) -> str:
        """Generate a cover and return it as a base64 data URI."""
        request = self.build_request(params)
        logger.info("Generating cover for %r with %s", params.title, request["model"])

        try:
            response = await self._get_client().aio.models.generate_content(**request)
        except Exception as exc:  # noqa: BLE001
            message = str(exc)
            if KEY_NOT_FOUND_MARKER in message:
                logger.warning("Model %s not available for this key: %s", request["model"], message)
                raise KeyRequiredError(message) from exc
            logger.error("Gemini API error: %s", message)
            raise UpstreamError(message) from exc

        image_url = extract_image_url(response)
        if image_url is None:
            logger.error("Gemini returned no inline image for %r", params.title)
            raise UpstreamError(NO_IMAGE_MESSAGE)
        return image_url
