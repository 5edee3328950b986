"""Manual script to verify the Gemini API key can see the image models."""

from __future__ import annotations

import os

import requests
from config.settings import load_config

config = load_config()  # reads .env into os.environ

BASE_URL = os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta")
API_KEY = config.api_key

if not API_KEY:
    print("[error] GEMINI_API_KEY not set; check .env or environment variables.")
    raise SystemExit(1)

headers = {"x-goog-api-key": API_KEY}

try:
    for model_id in (config.basic_model_id, config.pro_model_id):
        resp = requests.get(f"{BASE_URL}/models/{model_id}", headers=headers, timeout=30)
        print(f"{model_id}: status {resp.status_code}")
        if resp.ok:
            data = resp.json()
            print("-", data.get("displayName"), data.get("supportedGenerationMethods"))
        else:
            print(resp.text[:500])
except Exception as exc:  # noqa: BLE001
    print("[error]", exc)
    raise
