from typing import List, Literal, Optional

from pydantic import BaseModel


class VerboseResponseItem(BaseModel):
    type: Literal["text", "tool"] = "text"
    text: Optional[str] = None
    tool_name: Optional[str] = None


class LLMResponse(BaseModel):
    """Outcome of one query as seen by the user."""

    verbose: List[VerboseResponseItem] = []
    text: str = ""
    error: Optional[str] = None
