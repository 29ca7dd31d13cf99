"""
Tests for the interactive shell: command parsing and routing.
"""

import pytest

from fakes import assistant, text, tool_call

from mcp_chatbot.agents.engine import ConversationEngine
from mcp_chatbot.prompts.executor import PromptExecutor
from mcp_chatbot.shell import CommandType, InteractiveShell, parse_command
from mcp_chatbot.tools.resource_resolver import ResourceResolver


class TestParseCommand:
    """Tests for parse_command."""

    @pytest.mark.parametrize("line", ["", "   ", "\n"])
    def test_empty(self, line):
        assert parse_command(line).type == CommandType.EMPTY

    @pytest.mark.parametrize("line", ["quit", "QUIT", "  Quit  "])
    def test_quit_is_case_insensitive(self, line):
        assert parse_command(line).type == CommandType.QUIT

    def test_resource_shorthand_uses_scheme(self):
        command = parse_command("@folders")

        assert command.type == CommandType.RESOURCE
        assert command.uri == "papers://folders"

    def test_resource_shorthand_custom_scheme(self):
        assert parse_command("@monday", resource_scheme="notes").uri == "notes://monday"

    def test_resource_full_uri_kept(self):
        assert parse_command("@notes://monday").uri == "notes://monday"

    def test_list_prompts(self):
        assert parse_command("/prompts").type == CommandType.LIST_PROMPTS

    def test_prompt_with_arguments(self):
        command = parse_command("/prompt generate_search_prompt topic=llm num_papers=3")

        assert command.type == CommandType.PROMPT
        assert command.prompt_name == "generate_search_prompt"
        assert command.arguments == {"topic": "llm", "num_papers": "3"}

    def test_prompt_quoted_value(self):
        command = parse_command('/prompt generate_search_prompt topic="machine learning"')

        assert command.arguments == {"topic": "machine learning"}

    def test_prompt_ignores_malformed_pairs(self):
        command = parse_command("/prompt generate_search_prompt topic= =x junk topic2=a=b")

        assert command.arguments == {"topic2": "a=b"}

    def test_prompt_without_name(self):
        with pytest.raises(ValueError):
            parse_command("/prompt")

    def test_plain_text_is_query(self):
        command = parse_command("  Find papers on interpretability ")

        assert command.type == CommandType.QUERY
        assert command.text == "Find papers on interpretability"

    def test_prompts_prefix_is_not_prompt(self):
        assert parse_command("/promptsy").type == CommandType.QUERY


@pytest.fixture
def shell(registry, research_server, scripted_llm):
    registry.register(research_server)
    engine = ConversationEngine(registry, scripted_llm, output=print)
    return InteractiveShell(engine, ResourceResolver(registry), PromptExecutor(registry))


class TestHandle:
    """Tests for InteractiveShell.handle."""

    @pytest.mark.asyncio
    async def test_quit_stops(self, shell):
        assert await shell.handle("quit") is False

    @pytest.mark.asyncio
    async def test_empty_line_continues(self, shell, scripted_llm):
        assert await shell.handle("") is True
        assert scripted_llm.requests == []

    @pytest.mark.asyncio
    async def test_query_runs_engine(self, shell, scripted_llm, research_server, capsys):
        """Test that a plain query goes through the engine and prints model text."""
        scripted_llm.script(
            assistant(tool_call("toolu_1", "search_papers", topic="llm")),
            assistant(text("Here are the papers.")),
        )

        assert await shell.handle("Find papers on llm") is True

        assert "Here are the papers." in capsys.readouterr().out
        assert research_server.calls == [("search_papers", {"topic": "llm"})]

    @pytest.mark.asyncio
    async def test_resource_is_printed(self, shell, scripted_llm, capsys):
        """Test that @name prints the resource without calling the model."""
        await shell.handle("@folders")

        assert "# Available Topics" in capsys.readouterr().out
        assert scripted_llm.requests == []

    @pytest.mark.asyncio
    async def test_unknown_resource_reports_error(self, shell, capsys):
        """Test that a missing resource prints an error and keeps the shell alive."""
        assert await shell.handle("@notes://monday") is True

        assert "Error: Resource not found: notes://monday" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_list_prompts(self, shell, capsys):
        await shell.handle("/prompts")

        out = capsys.readouterr().out
        assert "- generate_search_prompt:" in out
        assert "topic (required)" in out

    @pytest.mark.asyncio
    async def test_prompt_runs_as_query(self, shell, scripted_llm, research_server):
        """Test that a rendered prompt becomes the query text."""
        scripted_llm.script(assistant(text("ok")))

        await shell.handle("/prompt generate_search_prompt topic=llm")

        assert research_server.prompt_calls == [("generate_search_prompt", {"topic": "llm"})]
        first_turn = scripted_llm.requests[0]["messages"][0]
        assert first_turn.text == "Search for 5 academic papers about 'llm'"

    @pytest.mark.asyncio
    async def test_failed_query_reports_error(self, shell, scripted_llm, capsys):
        """Test that a query ending on an error prints it and keeps going."""
        scripted_llm.script(assistant(tool_call("toolu_1", "delete_everything")))

        assert await shell.handle("Do something bad") is True

        assert "Error: No session found for tool delete_everything" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_bad_prompt_line_reports_usage(self, shell, capsys):
        assert await shell.handle("/prompt") is True

        assert "Usage: /prompt" in capsys.readouterr().out
