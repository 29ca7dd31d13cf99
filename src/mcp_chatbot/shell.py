"""
Interactive shell for mcp-chatbot.

Reads lines from the user and routes them:
- plain text            -> query for the conversation engine
- @<name>               -> resource fetch (<scheme>://<name>)
- /prompts              -> list registered prompts
- /prompt <name> k=v .. -> render a prompt, then run it as a query
- quit                  -> leave the shell
"""

import asyncio
import logging
import shlex
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field

from mcp_chatbot.agents.engine import ConversationEngine
from mcp_chatbot.prompts.executor import PromptExecutor
from mcp_chatbot.tools.resource_resolver import ResourceResolver

logger = logging.getLogger(__name__)

DEFAULT_RESOURCE_SCHEME = "papers"


class CommandType(str, Enum):
    EMPTY = "empty"
    QUIT = "quit"
    QUERY = "query"
    RESOURCE = "resource"
    LIST_PROMPTS = "list_prompts"
    PROMPT = "prompt"


class ShellCommand(BaseModel):
    """One parsed line of user input."""

    type: CommandType
    text: str = ""
    uri: Optional[str] = None
    prompt_name: Optional[str] = None
    arguments: Dict[str, str] = Field(default_factory=dict)


def parse_command(line: str, resource_scheme: str = DEFAULT_RESOURCE_SCHEME) -> ShellCommand:
    """
    Classify a line of user input.

    Raises:
        ValueError: If a /prompt line has no name or unbalanced quotes
    """
    text = line.strip()
    if not text:
        return ShellCommand(type=CommandType.EMPTY)
    if text.lower() == "quit":
        return ShellCommand(type=CommandType.QUIT)

    if text.startswith("@"):
        name = text[1:].strip()
        uri = name if "://" in name else f"{resource_scheme}://{name}"
        return ShellCommand(type=CommandType.RESOURCE, text=text, uri=uri)

    if text == "/prompts":
        return ShellCommand(type=CommandType.LIST_PROMPTS, text=text)

    if text == "/prompt" or text.startswith("/prompt "):
        tokens = shlex.split(text[len("/prompt"):])
        if not tokens:
            raise ValueError("Usage: /prompt <name> <arg1=value1> <arg2=value2>")
        arguments = {}
        for token in tokens[1:]:
            key, _, value = token.partition("=")
            if key and value:
                arguments[key] = value
        return ShellCommand(
            type=CommandType.PROMPT, text=text, prompt_name=tokens[0], arguments=arguments
        )

    return ShellCommand(type=CommandType.QUERY, text=text)


class InteractiveShell:
    """Line-oriented front end; one command runs to completion before the next is read."""

    def __init__(
        self,
        engine: ConversationEngine,
        resolver: ResourceResolver,
        executor: PromptExecutor,
        resource_scheme: str = DEFAULT_RESOURCE_SCHEME,
    ):
        self._engine = engine
        self._resolver = resolver
        self._executor = executor
        self._resource_scheme = resource_scheme

    async def run(self) -> None:
        """Read and handle commands until quit or end of input."""
        print("\nMCP Chatbot Started!")
        print('Type your queries or "quit" to exit.')
        print("Special commands:")
        print("  @<resource> - Access a resource (e.g., @folders, @ai_interpretability)")
        print("  /prompts - List available prompts")
        print("  /prompt <name> <arg1=value1> - Execute a prompt")

        while True:
            try:
                line = await asyncio.to_thread(input, "\nQuery: ")
            except EOFError:
                break
            if not await self.handle(line):
                break

    async def handle(self, line: str) -> bool:
        """
        Execute one line of input.

        Errors are reported and swallowed so the session keeps going.

        Returns:
            False when the user asked to quit, True otherwise
        """
        try:
            command = parse_command(line, self._resource_scheme)
            if command.type == CommandType.QUIT:
                return False
            await self._execute(command)
        except Exception as e:
            logger.debug("Command failed", exc_info=True)
            print(f"\nError: {e}")
        return True

    async def _execute(self, command: ShellCommand) -> None:
        if command.type == CommandType.EMPTY:
            return

        if command.type == CommandType.RESOURCE:
            print(await self._resolver.resolve(command.uri))

        elif command.type == CommandType.LIST_PROMPTS:
            self._print_prompts()

        elif command.type == CommandType.PROMPT:
            text = await self._executor.execute(command.prompt_name, command.arguments)
            await self._run_query(text)

        else:
            await self._run_query(command.text)

    async def _run_query(self, query: str) -> None:
        result = await self._engine.run(query)
        if not result.succeeded:
            print(f"\nError: {result.error}")

    def _print_prompts(self) -> None:
        prompts = self._executor.list_prompts()
        if not prompts:
            print("No prompts available.")
            return

        print("\nAvailable prompts:")
        for prompt in prompts:
            print(f"- {prompt.name}: {prompt.description}")
            if prompt.arguments:
                print("  Arguments:")
                for arg in prompt.arguments:
                    required = " (required)" if arg.required else ""
                    print(f"    - {arg.name}{required}: {arg.description}")
