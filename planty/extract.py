# planty/extract.py
# Pull labelled fields out of the model's free-text answer.
# Usable as import or CLI:
#   python -m planty.extract --file outputs/model_response.txt

from __future__ import annotations

import re
from pathlib import Path
from typing import List

from planty.schemas import NO_DESCRIPTION, UNKNOWN, PlantInfo

LABEL_NAME = "Name:"
LABEL_SCIENTIFIC_NAME = "Scientific Name:"
LABEL_FAMILY = "Family:"
LABEL_DESCRIPTION = "Description:"
LABEL_NATIVE_TO = "Native to:"
LABEL_SUNLIGHT = "Sunlight needs:"
LABEL_WATERING = "Watering needs:"
LABEL_SOIL = "Soil type:"

LABELS = (
    LABEL_NAME,
    LABEL_SCIENTIFIC_NAME,
    LABEL_FAMILY,
    LABEL_DESCRIPTION,
    LABEL_NATIVE_TO,
    LABEL_SUNLIGHT,
    LABEL_WATERING,
    LABEL_SOIL,
)


def extract_info(text: str, label: str) -> str:
    """
    Return the rest of the first line that starts with `label`, trimmed.
    Returns "" when no line starts with the label.
    """
    match = re.search(rf"^{re.escape(label)}[ \t]*(.*)$", text, re.MULTILINE)
    return match.group(1).strip() if match else ""


def split_regions(raw: str) -> List[str]:
    """Comma separated list -> trimmed, non-empty entries in order."""
    return [region.strip() for region in raw.split(",") if region.strip()]


def parse_plant_info(text: str) -> PlantInfo:
    """
    Build a PlantInfo from the model's answer.
    Missing name/scientific name/family/description fall back to placeholders;
    missing sunlight/watering/soil stay unset.
    """
    return PlantInfo(
        name=extract_info(text, LABEL_NAME) or UNKNOWN,
        scientific_name=extract_info(text, LABEL_SCIENTIFIC_NAME) or UNKNOWN,
        family=extract_info(text, LABEL_FAMILY) or UNKNOWN,
        description=extract_info(text, LABEL_DESCRIPTION) or NO_DESCRIPTION,
        native_to=split_regions(extract_info(text, LABEL_NATIVE_TO)),
        sunlight=extract_info(text, LABEL_SUNLIGHT) or None,
        watering=extract_info(text, LABEL_WATERING) or None,
        soil=extract_info(text, LABEL_SOIL) or None,
    )


if __name__ == "__main__":
    import argparse, json

    parser = argparse.ArgumentParser(description="Parse a saved model response into PlantInfo JSON.")
    parser.add_argument("--file", required=True, help="Path to a text file holding the model's answer")
    args = parser.parse_args()

    info = parse_plant_info(Path(args.file).read_text(encoding="utf-8"))
    print(json.dumps(info.to_json(), ensure_ascii=False, indent=2))
