# worthline/schemas/base.py
"""
Shared base model for API responses.

Worthline responses leave optional fields out instead of sending null:
a missing price is an absent "price" key, not "price": null. A few
fields (history start_date / end_date) are part of the contract even
when unset and are always emitted.
"""

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, SerializerFunctionWrapHandler, model_serializer


class OmitNoneModel(BaseModel):
    """
    BaseModel that drops None-valued fields when serialized.

    Subclasses list fields that must be emitted even when None in
    `always_present_fields`.
    """

    model_config = ConfigDict(from_attributes=True)

    always_present_fields: ClassVar[frozenset[str]] = frozenset()

    @model_serializer(mode="wrap")
    def _omit_none(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        return {
            key: value
            for key, value in data.items()
            if value is not None or key in self.always_present_fields
        }
