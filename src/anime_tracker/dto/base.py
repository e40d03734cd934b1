"""Shared base model for API contracts."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire.

    Requests accept either spelling; responses are serialized with the
    camelCase aliases the web client expects.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
