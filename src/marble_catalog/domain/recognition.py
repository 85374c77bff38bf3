"""Models for piece recognition results."""

from pydantic import BaseModel, Field


class BoundingBox(BaseModel):
    """Detection region as percentages of the image size."""

    x: float = Field(ge=0.0, le=100.0)
    y: float = Field(ge=0.0, le=100.0)
    width: float = Field(ge=0.0, le=100.0)
    height: float = Field(ge=0.0, le=100.0)


class DetectedPiece(BaseModel):
    """Candidate catalog match for one photographed region."""

    id: str
    piece_type_id: str | None = None
    brand_id: str | None = None
    confidence: float = Field(ge=0.0, le=1.0)
    bounding_box: BoundingBox
    predicted_name: str
    predicted_brand: str
    predicted_category: str


class RecognitionExtract(BaseModel):
    """Structured output for piece recognition."""

    pieces: list[DetectedPiece]
