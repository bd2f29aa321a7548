"""Pydantic models for image generation requests and responses"""
from collections.abc import Mapping
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationError,
    field_validator,
)

from ai.exceptions.together_exceptions import InvalidArgumentsError
from config import (
    DEFAULT_FORMAT,
    DEFAULT_HEIGHT,
    DEFAULT_IMAGE_COUNT,
    DEFAULT_IMAGE_MODEL,
    DEFAULT_STEPS,
    DEFAULT_WIDTH,
)

Number = Union[StrictInt, StrictFloat]
ImageFormat = Literal["png", "jpg", "svg"]


class ImageGenerationRequest(BaseModel):
    """
    Validated arguments of a generate_image call.

    Numeric fields are not bounds checked. A missing or zero value falls back
    to its default through the requested_* properties.
    """
    model_config = ConfigDict(frozen=True)

    prompt: StrictStr = Field(min_length=1)
    model: Optional[StrictStr] = None
    width: Optional[Number] = None
    height: Optional[Number] = None
    steps: Optional[Number] = None
    n: Optional[Number] = None
    output_dir: Optional[StrictStr] = Field(default=None, alias="outputDir")
    format: Optional[ImageFormat] = None

    @field_validator("model", "width", "height", "steps", "n", "output_dir", "format", mode="before")
    @classmethod
    def _reject_null(cls, value):
        # Optional means "may be omitted", not "may be null"
        if value is None:
            raise ValueError("must not be null")
        return value

    @field_validator("width", "height", "steps", "n")
    @classmethod
    def _whole_number(cls, value):
        if isinstance(value, float):
            if not value.is_integer():
                raise ValueError("must be a whole number")
            return int(value)
        return value

    @classmethod
    def from_arguments(cls, arguments: Any) -> "ImageGenerationRequest":
        """Validate raw tool arguments, raising InvalidArgumentsError on any mismatch"""
        if not isinstance(arguments, Mapping):
            raise InvalidArgumentsError("Invalid generate_image arguments")
        try:
            return cls.model_validate(dict(arguments))
        except ValidationError as e:
            raise InvalidArgumentsError(
                "Invalid generate_image arguments", e.errors()
            ) from e

    @property
    def requested_model(self) -> str:
        return self.model or DEFAULT_IMAGE_MODEL

    @property
    def requested_width(self) -> int:
        return self.width or DEFAULT_WIDTH

    @property
    def requested_height(self) -> int:
        return self.height or DEFAULT_HEIGHT

    @property
    def requested_steps(self) -> int:
        return self.steps or DEFAULT_STEPS

    @property
    def requested_count(self) -> int:
        return self.n or DEFAULT_IMAGE_COUNT

    @property
    def requested_format(self) -> str:
        return self.format or DEFAULT_FORMAT


class GeneratedImage(BaseModel):
    """One entry of the API response's data array"""
    model_config = ConfigDict(extra="allow")

    b64_json: str

    def auxiliary_fields(self) -> Dict[str, Any]:
        """Everything the API sent alongside the payload, e.g. index or timings"""
        return self.model_dump(exclude={"b64_json"})


class ImageGenerationResponse(BaseModel):
    """Response model for the images/generations endpoint"""
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    model: Optional[str] = None
    object: Optional[str] = None
    data: List[GeneratedImage]


class ImageDimensions(BaseModel):
    width: int
    height: int


class DimensionsReport(BaseModel):
    original: ImageDimensions
    final: ImageDimensions


class ProcessedImageResult(BaseModel):
    """Metadata for one persisted image, extended with the API's auxiliary fields"""
    model_config = ConfigDict(extra="allow", frozen=True)

    filepath: str
    filename: str
    dimensions: DimensionsReport

    @classmethod
    def from_generated(
        cls,
        image: GeneratedImage,
        filepath: str,
        filename: str,
        original: ImageDimensions,
        final: ImageDimensions,
    ) -> "ProcessedImageResult":
        payload = image.auxiliary_fields()
        payload.update(
            filepath=filepath,
            filename=filename,
            dimensions=DimensionsReport(original=original, final=final),
        )
        return cls.model_validate(payload)
