"""CoverGenerationService unit tests."""

from __future__ import annotations

import asyncio
import base64
from types import SimpleNamespace

import pytest

from config.settings import AppConfig
from modules.pipelines import cover_generator
from modules.pipelines.cover_generator import (
    CoverGenerationService,
    GenerationParams,
    ImageSize,
    ModelTier,
    build_image_config,
    build_prompt,
    parse_tier,
)
from modules.pipelines.errors import KeyRequiredError, UpstreamError, ValidationError


def make_response(*parts):
    content = SimpleNamespace(parts=list(parts))
    return SimpleNamespace(candidates=[SimpleNamespace(content=content)])


def image_part(data):
    return SimpleNamespace(text=None, inline_data=SimpleNamespace(data=data, mime_type="image/png"))


def text_part(text):
    return SimpleNamespace(text=text, inline_data=None)


class DummyModels:
    """Mimics ``client.aio.models`` and records the request."""

    def __init__(self, response=None, error=None) -> None:
        self.response = response
        self.error = error
        self.calls = []

    async def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


class DummyClient:
    def __init__(self, models: DummyModels) -> None:
        self.aio = SimpleNamespace(models=models)


def build_service(response=None, error=None):
    models = DummyModels(response=response, error=error)
    service = CoverGenerationService(AppConfig(api_key="test-key"), client=DummyClient(models))
    return service, models


def test_prompt_contains_form_values():
    params = GenerationParams(title="Dune", genre="Sci-Fi", style="Cinematic")

    prompt = build_prompt(params)

    assert '"Dune"' in prompt
    assert "Genre: Sci-Fi." in prompt
    assert "Visual Style/Vibe: Cinematic." in prompt
    assert " by " not in prompt
    assert "portrait book cover" in prompt


def test_prompt_includes_author_clause():
    params = GenerationParams(title="Dune", author="Frank Herbert")

    assert '"Dune" by Frank Herbert.' in build_prompt(params)


def test_basic_tier_never_sends_resolution():
    for size in (None, *ImageSize):
        params = GenerationParams(title="Dune", model=ModelTier.BASIC, image_size=size)
        assert build_image_config(params) == {"aspect_ratio": "3:4"}


def test_pro_tier_defaults_to_1k():
    params = GenerationParams(title="Dune", model=ModelTier.PRO, image_size=None)

    assert build_image_config(params) == {"aspect_ratio": "3:4", "image_size": "1K"}


def test_pro_tier_uses_selected_size():
    params = GenerationParams(title="Dune", model=ModelTier.PRO, image_size=ImageSize.SIZE_4K)

    assert build_image_config(params)["image_size"] == "4K"


def test_from_form_normalizes_raw_values():
    params = GenerationParams.from_form(
        title="  Dune ",
        author="",
        genre=None,
        style="Gothic",
        description=None,
        model="PRO",
        image_size="2k",
    )

    assert params.title == "Dune"
    assert params.author is None
    assert params.genre == cover_generator.DEFAULT_GENRE
    assert params.description == ""
    assert params.model is ModelTier.PRO
    assert params.image_size is ImageSize.SIZE_2K


@pytest.mark.parametrize(
    ("value", "tier"),
    [
        ("pro", ModelTier.PRO),
        ("PRO", ModelTier.PRO),
        (ModelTier.PRO, ModelTier.PRO),
        ("bogus", ModelTier.BASIC),
        (None, ModelTier.BASIC),
    ],
)
def test_parse_tier_falls_back_to_basic(value, tier):
    assert parse_tier(value) is tier


def test_validate_rejects_empty_title():
    with pytest.raises(ValidationError, match="book title"):
        GenerationParams(title="   ").validate()


def test_generate_returns_data_uri_for_bytes_payload():
    service, models = build_service(make_response(text_part("here you go"), image_part(b"\x89PNG")))

    url = asyncio.run(service.generate(GenerationParams(title="Dune")))

    expected = base64.b64encode(b"\x89PNG").decode("utf-8")
    assert url == f"data:image/png;base64,{expected}"
    call = models.calls[0]
    assert call["model"] == "gemini-2.5-flash-image"
    assert call["config"].image_config.aspect_ratio == "3:4"
    assert call["config"].image_config.image_size is None
    assert "Dune" in call["contents"][0].parts[0].text


def test_generate_passes_through_string_payload():
    service, _ = build_service(make_response(image_part("QUJD")))

    url = asyncio.run(service.generate(GenerationParams(title="Dune")))

    assert url == "data:image/png;base64,QUJD"


def test_generate_pro_tier_uses_pro_model_and_size():
    service, models = build_service(make_response(image_part(b"img")))
    params = GenerationParams(title="Dune", model=ModelTier.PRO, image_size=ImageSize.SIZE_2K)

    asyncio.run(service.generate(params))

    call = models.calls[0]
    assert call["model"] == "gemini-3-pro-image-preview"
    assert call["config"].image_config.image_size == "2K"


def test_generate_without_parts_raises_upstream_error():
    service, _ = build_service(make_response())

    with pytest.raises(UpstreamError, match="No image data found in response"):
        asyncio.run(service.generate(GenerationParams(title="Dune")))


def test_generate_without_candidates_raises_upstream_error():
    service, _ = build_service(SimpleNamespace(candidates=None))

    with pytest.raises(UpstreamError, match="No image data found in response"):
        asyncio.run(service.generate(GenerationParams(title="Dune")))


def test_not_found_error_becomes_key_required():
    error = RuntimeError("404 NOT_FOUND. Requested entity was not found.")
    service, _ = build_service(error=error)

    with pytest.raises(KeyRequiredError):
        asyncio.run(service.generate(GenerationParams(title="Dune", model=ModelTier.PRO)))


def test_other_errors_keep_message():
    service, models = build_service(error=RuntimeError("503 UNAVAILABLE"))

    with pytest.raises(UpstreamError, match="503 UNAVAILABLE"):
        asyncio.run(service.generate(GenerationParams(title="Dune")))
    assert len(models.calls) == 1


def test_client_rebuilt_when_key_changes(monkeypatch):
    created = []

    class FakeGenaiClient:
        def __init__(self, api_key=None):
            created.append(api_key)

    monkeypatch.setattr(cover_generator.genai, "Client", FakeGenaiClient)
    config = AppConfig(api_key="first")
    service = CoverGenerationService(config)

    first = service._get_client()
    assert service._get_client() is first
    config.api_key = "second"
    service._get_client()

    assert created == ["first", "second"]


@pytest.mark.integration
def test_real_generation_call():
    """Call the real Gemini API when a key is configured."""
    from config.settings import load_config

    config = load_config()
    if not config.api_key:
        pytest.skip("GEMINI_API_KEY not set, skipping real API call.")

    service = CoverGenerationService(config)
    params = GenerationParams(title="Dune", genre="Sci-Fi", style="Cinematic")
    try:
        url = asyncio.run(service.generate(params))
    except KeyRequiredError as exc:  # pragma: no cover - integration handling
        pytest.skip(f"Key cannot access {config.basic_model_id}: {exc}")

    assert url.startswith("data:image/png;base64,")
