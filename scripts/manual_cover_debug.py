"""One-off script for debugging cover generation against the real API."""

import asyncio
from pathlib import Path

from config.settings import load_config
from modules.pipelines.cover_generator import (
    CoverGenerationService,
    GenerationParams,
    ImageSize,
    ModelTier,
)
from modules.services.key_selection import EnvironmentKeySelector
from modules.services.session import CoverSession
from modules.services.storage_service import StorageService
from modules.utils.logging import setup_logging


async def run() -> None:
    # 1. Real config and services
    config = load_config()
    setup_logging(config)
    session = CoverSession(CoverGenerationService(config), EnvironmentKeySelector(config))

    # 2. Test input; switch to ModelTier.PRO to exercise the key check
    params = GenerationParams(
        title="The Chronicles of Aurora",
        author="Jane Doe",
        genre="Fantasy",
        style="Oil Painting",
        description="A lone lighthouse on a cliff under a sky full of auroras",
        model=ModelTier.BASIC,
        image_size=ImageSize.SIZE_1K,
    )

    # 3. Run one generation and store the result
    cover = await session.generate(params)
    print("State:", session.state.value)
    if cover is None:
        print("No cover generated:", session.error)
        return
    path = StorageService(Path("debug_outputs")).save_cover(cover)
    print("Cover saved:", path.resolve())


if __name__ == "__main__":
    asyncio.run(run())
