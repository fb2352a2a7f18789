"""Models for detector output."""

from pydantic import BaseModel, ConfigDict, Field


class BoundingBox(BaseModel):
    """Rectangle delimiting a detected object, in image pixels."""

    model_config = ConfigDict(frozen=True)

    x1: float
    y1: float
    x2: float
    y2: float
    width: float | None = None
    height: float | None = None
    area: float | None = None


class DetectedItem(BaseModel):
    """Single detected object returned by the detector."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    label: str = Field(alias="class")
    class_id: int | None = None
    confidence: float = Field(ge=0.0, le=1.0)
    bbox: BoundingBox


class DetectionGroup(BaseModel):
    """Detections of one kind (food trays or menu items)."""

    detected: bool = False
    count: int = 0
    detections: list[DetectedItem] = Field(default_factory=list)


class ImageInfo(BaseModel):
    """Basic properties of the analysed image."""

    width: int = 0
    height: int = 0
    mode: str | None = None


class DetectionSummary(BaseModel):
    """Detector-side summary of an image."""

    total_detections: int = 0
    foodtray_types: list[str] = Field(default_factory=list)
    food_items: list[str] = Field(default_factory=list)


class DetectionResponse(BaseModel):
    """Structured payload returned by the detector `/api/detect` endpoint."""

    success: bool
    timestamp: str | None = None
    image_info: ImageInfo = Field(default_factory=ImageInfo)
    foodtray: DetectionGroup = Field(default_factory=DetectionGroup)
    menu: DetectionGroup = Field(default_factory=DetectionGroup)
    summary: DetectionSummary = Field(default_factory=DetectionSummary)
    error: str | None = None
