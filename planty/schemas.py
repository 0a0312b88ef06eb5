# planty/schemas.py
# Pydantic models for API responses (the request itself is a multipart upload).

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

UNKNOWN = "Unknown"
NO_DESCRIPTION = "No description available."


class PlantInfo(BaseModel):
    """
    Structured identification result.
    Serialize with `to_json()` so keys are camelCase and absent care fields are omitted.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(UNKNOWN, examples=["Rose"])
    scientific_name: str = Field(UNKNOWN, alias="scientificName", examples=["Rosa"])
    family: str = Field(UNKNOWN, examples=["Rosaceae"])
    description: str = NO_DESCRIPTION
    native_to: List[str] = Field(default_factory=list, alias="nativeTo", examples=[["Asia", "Europe"]])
    sunlight: Optional[str] = None
    watering: Optional[str] = None
    soil: Optional[str] = None

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
    stack: Optional[str] = None

    def to_json(self) -> dict:
        return self.model_dump(exclude_none=True)


class HealthResponse(BaseModel):
    status: str = Field(..., examples=["ok"])
    has_gemini_key: bool
    model: str
