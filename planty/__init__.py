# planty/__init__.py
# Plant identification service and client.

from .schemas import ErrorResponse, PlantInfo
from .extract import parse_plant_info

__all__ = [
    "ErrorResponse",
    "PlantInfo",
    "parse_plant_info",
]
