"""Pydantic schemas for ad account endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field


class AdAccountCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class AdAccountUpdateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)


class CardLinkRequest(BaseModel):
    """Request body for POST /marketing/ad-accounts/{id}/cards."""
    card_id: int


class LinkedCardResponse(BaseModel):
    id: int
    name: str
    last_four_digits: str

    model_config = {"from_attributes": True}


class AdAccountResponse(BaseModel):
    id: int
    name: str
    # Read from the ORM "cards" relationship
    linked_cards: list[LinkedCardResponse] = Field(validation_alias="cards")
    created_at: datetime

    model_config = {"from_attributes": True}
