"""Shared pydantic base for assessment models.

Attributes are snake_case in Python; JSON uses the camelCase names the
intake wizard and the AI model exchange.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase JSON."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        use_enum_values = True
        validate_default = True

    def to_json_dict(self) -> dict:
        """Dump to a JSON-ready dict using camelCase keys, omitting unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
