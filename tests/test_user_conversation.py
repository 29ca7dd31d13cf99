import pytest
from pydantic import ValidationError

from fakes import assistant, text, tool_call

from mcp_chatbot.models.user_conversation import (
    ConversationContext,
    Message,
    MessageRole,
    TextMessage,
    ToolCall,
    ToolResult,
)


def tool_result_msg(tool_id, result, is_error=False):
    return Message(
        role=MessageRole.USER,
        content=[ToolResult(tool_id=tool_id, result=result, is_error=is_error)],
    )


class TestMessageValidation:
    def test_user_message_cannot_hold_tool_call(self):
        with pytest.raises(ValidationError, match="USER messages cannot contain ToolCall"):
            Message(role=MessageRole.USER, content=[tool_call("toolu_1", "search_papers")])

    def test_assistant_message_cannot_hold_tool_result(self):
        with pytest.raises(ValidationError, match="ASSISTANT messages cannot contain ToolResult"):
            Message(
                role=MessageRole.ASSISTANT,
                content=[ToolResult(tool_id="toolu_1", result="x")],
            )

    def test_block_order_is_preserved(self):
        msg = assistant(text("a"), tool_call("toolu_1", "search_papers"), text("b"))

        assert [type(c) for c in msg.content] == [TextMessage, ToolCall, TextMessage]
        assert msg.text == "a\nb"
        assert [tc.tool_id for tc in msg.tool_calls] == ["toolu_1"]

    def test_content_parsed_from_dicts(self):
        msg = Message.model_validate(
            {
                "role": "assistant",
                "content": [
                    {"type": "text", "text": "Searching"},
                    {
                        "type": "tool_invocation",
                        "tool_id": "toolu_1",
                        "tool_name": "search_papers",
                        "tool_input": {"topic": "llm"},
                    },
                ],
            }
        )

        assert isinstance(msg.content[1], ToolCall)
        assert msg.content[1].tool_input == {"topic": "llm"}


class TestConversationContext:
    def test_unanswered_tool_calls(self):
        context = ConversationContext()
        context.add_user_text("Find papers")
        context.add_message(
            assistant(tool_call("toolu_1", "search_papers"), tool_call("toolu_2", "extract_info"))
        )
        context.add_message(tool_result_msg("toolu_1", "[]"))

        assert [tc.tool_id for tc in context.unanswered_tool_calls()] == ["toolu_2"]


class TestAnthropicConversion:
    def test_tool_use_and_result(self):
        context = ConversationContext()
        context.add_user_text("Find papers")
        context.add_message(
            assistant(text("Searching"), tool_call("toolu_1", "search_papers", topic="llm"))
        )
        context.add_message(tool_result_msg("toolu_1", "['2401.00001']"))

        messages = context.to_anthropic_messages()

        assert messages[0] == {"role": "user", "content": [{"type": "text", "text": "Find papers"}]}
        assert messages[1]["content"][1] == {
            "type": "tool_use",
            "id": "toolu_1",
            "name": "search_papers",
            "input": {"topic": "llm"},
        }
        assert messages[2] == {
            "role": "user",
            "content": [
                {"type": "tool_result", "tool_use_id": "toolu_1", "content": "['2401.00001']"}
            ],
        }

    def test_error_result_flagged(self):
        block = tool_result_msg("toolu_1", "Error running tool: boom", is_error=True)
        assert block.to_anthropic_message()["content"][0]["is_error"] is True


class TestOpenAIConversion:
    def test_assistant_tool_calls(self):
        msg = assistant(text("Searching"), tool_call("toolu_1", "search_papers", topic="llm"))

        [result] = msg.to_openai_messages()

        assert result["role"] == "assistant"
        assert result["content"] == "Searching"
        assert result["tool_calls"][0]["id"] == "toolu_1"
        assert result["tool_calls"][0]["function"]["name"] == "search_papers"
        assert result["tool_calls"][0]["function"]["arguments"] == '{"topic": "llm"}'

    def test_assistant_without_text(self):
        [result] = assistant(tool_call("toolu_1", "search_papers")).to_openai_messages()
        assert result["content"] is None

    def test_tool_result_becomes_tool_message(self):
        [result] = tool_result_msg("toolu_1", "['2401.00001']").to_openai_messages()

        assert result == {
            "role": "tool",
            "tool_call_id": "toolu_1",
            "content": "['2401.00001']",
        }

    def test_context_flattens_messages(self):
        context = ConversationContext()
        context.add_user_text("Find papers")
        context.add_message(assistant(tool_call("toolu_1", "search_papers")))
        context.add_message(tool_result_msg("toolu_1", "[]"))

        assert [m["role"] for m in context.to_openai_messages()] == ["user", "assistant", "tool"]

    def test_result_and_text_in_one_turn(self):
        msg = Message(
            role=MessageRole.USER,
            content=[
                ToolResult(tool_id="toolu_1", result="aborted", is_error=True),
                TextMessage(text="next"),
            ],
        )

        assert [m["role"] for m in msg.to_openai_messages()] == ["tool", "user"]
