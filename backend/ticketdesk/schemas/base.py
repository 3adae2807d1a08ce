"""
Shared Pydantic base model.

WHY: The API speaks camelCase (assignedToId, transferStatus) while Python
code and the ORM use snake_case. One base model carries the alias
generator so every schema serializes the same way and still accepts
snake_case input.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
