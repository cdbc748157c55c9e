# opsadmin/application/dtos/base_dto.py

"""
Base class for the application's DTOs.

Every DTO speaks camelCase on the wire while keeping snake_case
attribute names in Python.
"""

from typing import Annotated, Any, Dict

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Largest value an INTEGER primary key column holds on every supported backend
MAX_ENTITY_ID = 2 ** 31 - 1

EntityId = Annotated[int, Field(ge=1, le=MAX_ENTITY_ID)]


class CustomBaseModel(BaseModel):
    """
    Base model for every DTO.

    Accepts both the camelCase alias and the Python field name on input,
    and can be built from ORM objects.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_wire(self, **kwargs) -> Dict[str, Any]:
        """
        JSON-compatible dict using the camelCase aliases.
        """
        return self.model_dump(mode="json", by_alias=True, **kwargs)
