from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from noticeboard.utils.clock import ensure_aware_utc

# Incoming offsets are converted, naive values are taken as UTC
UTCDateTime = Annotated[datetime, AfterValidator(ensure_aware_utc)]


class CamelModel(BaseModel):
    """JSON uses camelCase keys; snake_case field names are accepted too."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(CamelModel):
    message: str


class CreatedResponse(CamelModel):
    id: int
    message: str
