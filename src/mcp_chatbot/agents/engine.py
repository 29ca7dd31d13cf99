"""
Conversation engine for mcp-chatbot.

Runs the turn loop for one user query: request a completion, dispatch the
tool invocations it contains through the capability registry, feed the
results back, and repeat until the model settles on an answer.
"""

import logging
from typing import Any, Callable, List, Optional

from mcp_chatbot.llm.base import BaseLLM
from mcp_chatbot.llm.schemas import LLMResponse, VerboseResponseItem
from mcp_chatbot.models.user_conversation import (
    ContentItem,
    ConversationContext,
    Message,
    MessageRole,
    TextMessage,
    ToolCall,
    ToolResult,
)
from mcp_chatbot.tools.registry import CapabilityRegistry
from mcp_chatbot.tools.schemas import MalformedResponseError, MCPError

from .schemas import EngineState, QueryResult

logger = logging.getLogger(__name__)

OutputFn = Callable[[str], Any]

ABORTED_TOOL_RESULT = "Tool invocation aborted: the previous query failed before it completed"


class ConversationEngine:
    """
    Turn-loop state machine: AWAITING_MODEL -> DISPATCHING_TOOLS -> ... -> DONE.

    Tool invocations within one response run sequentially in the order the
    model returned them. Any failure ends the query in DONE with an error;
    the registry stays usable for the next query.
    """

    def __init__(
        self,
        registry: CapabilityRegistry,
        llm: BaseLLM,
        output: Optional[OutputFn] = None,
        system_prompt: Optional[str] = None,
        feed_tool_errors: bool = False,
    ):
        """
        Args:
            registry: Routes tool invocations and supplies the tool set.
            llm: Model backend.
            output: Receives every text block as soon as it is processed.
            system_prompt: Optional system prompt sent with each completion.
            feed_tool_errors: Report MCP errors to the model as error tool
                              results instead of aborting the query.
        """
        self._registry = registry
        self._llm = llm
        self._output = output
        self._system_prompt = system_prompt
        self._feed_tool_errors = feed_tool_errors
        self._state = EngineState.DONE

    @property
    def state(self) -> EngineState:
        return self._state

    async def run(
        self, query: str, context: Optional[ConversationContext] = None
    ) -> QueryResult:
        """
        Run one query to DONE.

        Args:
            query: User query text.
            context: History to continue; a fresh one is used if None.

        Returns:
            QueryResult with final text, tool activity, history and any error.
        """
        context = context if context is not None else ConversationContext()
        context.add_message(self._query_turn(query, context))
        result = QueryResult(context=context, llm_response=LLMResponse())
        self._state = EngineState.AWAITING_MODEL

        try:
            while self._state == EngineState.AWAITING_MODEL:
                response = await self._complete(context)
                result.completions += 1
                await self._process_response(response, context, result.llm_response)

        except Exception as e:
            self._state = EngineState.DONE
            logger.error(f"Query aborted: {type(e).__name__}: {e}")
            result.error = str(e)
            result.error_type = type(e).__name__
            result.llm_response.error = str(e)

        result.state = self._state
        return result

    def _query_turn(self, query: str, context: ConversationContext) -> Message:
        """
        User turn carrying the query.

        Invocations left unanswered by an aborted query are closed here with
        error results, so every invocation stays paired with one result.
        """
        content: List[ContentItem] = [
            ToolResult(tool_id=call.tool_id, result=ABORTED_TOOL_RESULT, is_error=True)
            for call in context.unanswered_tool_calls()
        ]
        if content:
            logger.info(f"Closing {len(content)} unanswered tool invocations")
        content.append(TextMessage(text=query))
        return Message(role=MessageRole.USER, content=content)

    async def _complete(self, context: ConversationContext) -> Message:
        # Tools discovered after this point are not exposed to this completion
        tools = self._registry.tools
        response = await self._llm.complete(
            context, tools=tools, system_prompt=self._system_prompt
        )
        if not response.content:
            raise MalformedResponseError("Model returned an empty content array")
        return response

    async def _process_response(
        self,
        response: Message,
        context: ConversationContext,
        final: LLMResponse,
    ) -> None:
        """Walk the response blocks in order, dispatching each tool invocation."""
        pending: List[ContentItem] = []
        last_turn: Optional[Message] = None
        dispatched = 0

        for block in response.content:
            if isinstance(block, TextMessage):
                self._emit(block.text)
                final.verbose.append(VerboseResponseItem(type="text", text=block.text))
                pending.append(block)
                if len(response.content) == 1:
                    final.text = block.text
                    self._state = EngineState.DONE
                    return

            elif isinstance(block, ToolCall):
                pending.append(block)
                last_turn = Message(role=MessageRole.ASSISTANT, content=pending)
                context.add_message(last_turn)
                pending = []

                self._state = EngineState.DISPATCHING_TOOLS
                tool_result = await self._dispatch(block)
                context.add_message(Message(role=MessageRole.USER, content=[tool_result]))
                final.verbose.append(VerboseResponseItem(type="tool", tool_name=block.tool_name))
                dispatched += 1

        if dispatched:
            # Text after the last invocation stays in that invocation's turn
            if pending:
                last_turn.content.extend(pending)
            self._state = EngineState.AWAITING_MODEL
        else:
            final.text = response.text
            self._state = EngineState.DONE

    async def _dispatch(self, tool_call: ToolCall) -> ToolResult:
        try:
            text = await self._registry.invoke_tool(tool_call.tool_name, tool_call.tool_input)
        except MCPError as e:
            if not self._feed_tool_errors:
                raise
            logger.warning(f"Tool {tool_call.tool_name} failed, reporting to model: {e}")
            return ToolResult(
                tool_id=tool_call.tool_id,
                result=f"Error running tool: {e}",
                is_error=True,
            )
        return ToolResult(tool_id=tool_call.tool_id, result=text)

    def _emit(self, text: str) -> None:
        if self._output is not None:
            self._output(text)
