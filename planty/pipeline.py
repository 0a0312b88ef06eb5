# planty/pipeline.py
# Image -> Gemini -> PlantInfo glue used by the API.
# Call identify_plant(image_bytes, mime_type) from the route; everything model-specific lives here.

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, List

from google import genai
from google.genai import types

from planty.errors import ExternalModelError
from planty.extract import parse_plant_info
from planty.schemas import PlantInfo
from planty.settings import get_settings

logger = logging.getLogger(__name__)

PROMPT_FILE = "identify_plant.txt"

DEFAULT_PROMPT = (
    "Identify this plant and provide its name, scientific name, family, brief description, "
    "where it's native to, sunlight needs, watering needs, and soil type.\n"
    "Answer with one line per field, using exactly these labels at the start of each line:\n"
    "Name:\n"
    "Scientific Name:\n"
    "Family:\n"
    "Description:\n"
    "Native to: (comma separated regions)\n"
    "Sunlight needs:\n"
    "Watering needs:\n"
    "Soil type:"
)

SAFETY_SETTINGS = [
    types.SafetySetting(
        category=types.HarmCategory.HARM_CATEGORY_HARASSMENT,
        threshold=types.HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    ),
]


@dataclass(frozen=True)
class IdentificationRequest:
    """Prompt plus inline image for a single model call."""

    prompt: str
    image: bytes
    mime_type: str

    def contents(self) -> List[Any]:
        # The SDK base64-encodes inline bytes on the wire.
        return [self.prompt, types.Part.from_bytes(data=self.image, mime_type=self.mime_type)]


def load_prompt(prompts_dir: str) -> str:
    """
    Prefer '<prompts_dir>/identify_plant.txt' if present; else the built-in prompt.
    """
    p = Path(prompts_dir) / PROMPT_FILE
    if p.exists():
        return p.read_text(encoding="utf-8").strip()
    return DEFAULT_PROMPT


@lru_cache(maxsize=1)
def get_client() -> genai.Client:
    """
    Process-wide Gemini client, built on first use and reused afterwards.
    """
    st = get_settings()
    if not st.GEMINI_API_KEY:
        raise ExternalModelError("Missing GEMINI_API_KEY")
    return genai.Client(api_key=st.GEMINI_API_KEY)


async def generate_description(request: IdentificationRequest) -> str:
    """
    Single awaited model call. Returns the raw text; raises if the model produced none.
    """
    st = get_settings()
    client = get_client()

    logger.info("Generating content with %s (%s, %d bytes)", st.GEMINI_MODEL, request.mime_type, len(request.image))
    resp = await client.aio.models.generate_content(
        model=st.GEMINI_MODEL,
        contents=request.contents(),
        config=types.GenerateContentConfig(safety_settings=SAFETY_SETTINGS),
    )

    text = (resp.text or "").strip()
    logger.debug("Generated text: %s", text)
    if not text:
        feedback = getattr(resp, "prompt_feedback", None)
        if feedback is not None and feedback.block_reason:
            logger.warning("Gemini response was blocked: %s", feedback.block_reason)
        raise ExternalModelError("No text generated from the model")
    return text


async def identify_plant(image: bytes, mime_type: str) -> PlantInfo:
    """
    High-level helper: prompt + image -> model text -> PlantInfo.
    """
    st = get_settings()
    request = IdentificationRequest(prompt=load_prompt(st.PROMPTS_DIR), image=image, mime_type=mime_type)
    text = await generate_description(request)

    info = parse_plant_info(text)
    logger.info("Parsed plant info: %s", info.to_json())
    return info
