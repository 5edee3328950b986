"""Gradio layout for the book cover generator."""

from __future__ import annotations

from typing import Any, Optional

import gradio as gr

from config.settings import AppConfig
from modules.pipelines.cover_generator import (
    DEFAULT_GENRE,
    DEFAULT_STYLE,
    GENRES,
    STYLES,
    CoverGenerationService,
    ImageSize,
    ModelTier,
)
from modules.services.key_selection import EnvironmentKeySelector
from modules.services.session import CoverSession
from modules.services.storage_service import StorageService
from modules.ui.callbacks import build_callbacks

TICK_SECONDS = 0.5


def _tier_choices(config: AppConfig) -> list[tuple[str, str]]:
    entries = config.metadata.get("available_models") or []
    choices = [
        (str(item.get("label") or item.get("value")), str(item.get("value")))
        for item in entries
        if isinstance(item, dict) and item.get("value")
    ]
    return choices or [("FLASH", ModelTier.BASIC.value), ("PRO (2K/4K)", ModelTier.PRO.value)]


def build_app(config: AppConfig) -> Any:
    """Compose and return the Gradio application."""
    callbacks_map = build_callbacks(
        config,
        generator=CoverGenerationService(config),
        key_selector=EnvironmentKeySelector(config),
        storage=StorageService(config.download_dir),
    )

    with gr.Blocks(title="CoverAlchemy") as demo:
        gr.Markdown(
            "# CoverAlchemy\n"
            "Transform your story's essence into professional book cover art "
            "using Gemini visual intelligence."
        )
        session_state = gr.State(None)

        with gr.Row():
            with gr.Column():
                title = gr.Textbox(label="Book Title *", placeholder="The Chronicles of Aurora")
                author = gr.Textbox(label="Author Name (Optional)", placeholder="Jane Doe")
                with gr.Row():
                    genre = gr.Dropdown(
                        label="Genre",
                        choices=list(GENRES),
                        value=DEFAULT_GENRE,
                        allow_custom_value=True,
                    )
                    style = gr.Dropdown(label="Style", choices=list(STYLES), value=DEFAULT_STYLE)
                description = gr.Textbox(
                    label="Description & Atmosphere",
                    lines=3,
                    placeholder="A lonely astronaut standing on a purple desert planet looking at three moons...",
                )
                model = gr.Radio(
                    label="Engine Quality",
                    choices=_tier_choices(config),
                    value=ModelTier.BASIC.value,
                )
                image_size = gr.Radio(
                    label="Output Size",
                    choices=[size.value for size in ImageSize],
                    value=config.default_image_size,
                    visible=False,
                )
                error_box = gr.Markdown()
                generate_btn = gr.Button("Generate Book Cover", variant="primary")
                status = gr.Markdown()

            with gr.Column():
                cover_image = gr.Image(label="Generated Book Cover", type="pil", interactive=False)
                with gr.Row():
                    download_btn = gr.Button("Download Cover")
                    regenerate_btn = gr.Button("Regenerate", variant="secondary")
                download_file = gr.File(label="Download", interactive=False)
                history = gr.Gallery(
                    label="Recent Iterations",
                    columns=config.history_limit,
                    height="auto",
                    allow_preview=False,
                )

        gr.Markdown(
            f"Powered by Google Gemini. [Billing Documentation]({config.billing_docs_url})"
            " | Pro features require paid API project"
        )

        generate_inputs = [session_state, title, author, genre, style, description, model, image_size]
        generate_outputs = [session_state, cover_image, error_box, history]

        def _size_visibility(selection: str) -> Any:
            return gr.update(visible=callbacks_map["on_change_model"](selection))

        def _select(session: Optional[CoverSession], evt: gr.SelectData) -> Any:
            return callbacks_map["on_select_history"](session, evt.index)

        # Polls the loading message; only active while a generation runs.
        timer = gr.Timer(TICK_SECONDS, active=False)
        timer.tick(
            fn=callbacks_map["on_tick"],
            inputs=[session_state],
            outputs=[status],
            show_progress="hidden",
        )

        demo.load(fn=callbacks_map["new_session"], outputs=[session_state])
        model.change(fn=_size_visibility, inputs=[model], outputs=[image_size])
        for trigger in (generate_btn, regenerate_btn):
            trigger.click(
                fn=lambda: (
                    gr.update(interactive=False),
                    gr.update(interactive=False),
                    gr.Timer(active=True),
                ),
                outputs=[generate_btn, regenerate_btn, timer],
            ).then(
                fn=callbacks_map["on_generate"],
                inputs=generate_inputs,
                outputs=generate_outputs,
            ).then(
                fn=lambda: (
                    gr.update(interactive=True),
                    gr.update(interactive=True),
                    gr.Timer(active=False),
                    "",
                ),
                outputs=[generate_btn, regenerate_btn, timer, status],
            )
        history.select(fn=_select, inputs=[session_state], outputs=generate_outputs)
        download_btn.click(
            fn=callbacks_map["on_download"],
            inputs=[session_state],
            outputs=[download_file],
        )

    return demo
