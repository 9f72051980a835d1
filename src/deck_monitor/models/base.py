from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ModelBase(BaseModel):
    """
    Base class for all deck-monitor models.

    Forbids unknown fields, serializes with camelCase aliases and accepts
    either snake_case or camelCase names on input.
    """

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_json_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class FrozenModel(ModelBase):
    """
    Immutable variant used for snapshots and change records.
    """

    model_config = ConfigDict(frozen=True)


ElementId = str
SlideId = str
ChangeId = str
