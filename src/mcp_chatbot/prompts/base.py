"""Models for provider-rendered prompts."""

from typing import Dict

from pydantic import BaseModel, Field


class RenderedPrompt(BaseModel):
    """A prompt template rendered by its provider, ready to send as a query."""

    name: str
    server_id: str
    arguments: Dict[str, str] = Field(default_factory=dict)
    text: str
