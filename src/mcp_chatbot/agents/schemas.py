"""
Result models for the conversation engine.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from mcp_chatbot.llm.schemas import LLMResponse
from mcp_chatbot.models.user_conversation import ConversationContext


class EngineState(str, Enum):
    """States of the turn loop."""

    AWAITING_MODEL = "awaiting_model"
    DISPATCHING_TOOLS = "dispatching_tools"
    DONE = "done"


class QueryResult(BaseModel):
    """
    Outcome of running one user query to DONE.

    error is set when the loop ended on a failure; the context then holds
    every turn appended before the failure.
    """

    llm_response: LLMResponse = Field(
        default_factory=LLMResponse, description="Text and tool activity of the query"
    )
    context: ConversationContext = Field(
        description="Conversation history after the query"
    )
    state: EngineState = EngineState.DONE
    completions: int = Field(default=0, description="Model round trips performed")
    error: Optional[str] = Field(
        default=None, description="Error message if the query failed"
    )
    error_type: Optional[str] = Field(
        default=None, description="Exception class name if the query failed"
    )

    @property
    def succeeded(self) -> bool:
        return self.error is None
