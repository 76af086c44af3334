"""Common schema building blocks used across the accounts API payloads."""

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

# Monetary amounts are Decimal in memory and plain JSON numbers on the wire
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class WireModel(BaseModel):
    """Base model mapping snake_case fields to the camelCase JSON of the accounts API."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageResponse(WireModel):
    """Simple status/message response returned by sync and export.

    Attributes:
        status: Outcome reported by the collaborator (e.g. 'success')
        message: Human-readable description
    """

    status: str = Field("success", description="Outcome reported by the collaborator")
    message: str | None = Field(None, description="Human-readable message")
