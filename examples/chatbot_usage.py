"""
Example: Using the capability registry and conversation engine directly.

This demonstrates:
- Connecting to several MCP servers from a server_config.json
- Reading a resource by shorthand URI
- Rendering a server-side prompt and running it as a query
- Running a free-form query that calls tools on whichever server owns them
"""

import asyncio
from pathlib import Path

from dotenv import load_dotenv

# Load .env file from project root
load_dotenv()

from mcp_chatbot.agents import ConversationEngine
from mcp_chatbot.llm import LLMConfig, get_llm
from mcp_chatbot.prompts import PromptExecutor
from mcp_chatbot.tools import CapabilityRegistry, ResourceResolver, load_servers_config

CONFIG_PATH = Path(__file__).parent / "server_config.json"

llm_config = LLMConfig(
    provider="anthropic",
    model="claude-3-7-sonnet-20250219",
    max_tokens=2024,
)


async def main():
    servers_config = load_servers_config(CONFIG_PATH)

    async with CapabilityRegistry() as registry:
        connected = await registry.connect_all(servers_config.servers)
        print(f"Connected to: {connected}")
        print(f"Tools: {[t.name for t in registry.tools]}")

        resolver = ResourceResolver(registry)
        print(await resolver.resolve("papers://folders"))

        engine = ConversationEngine(registry, get_llm(llm_config), output=print)

        executor = PromptExecutor(registry)
        query = await executor.execute(
            "generate_search_prompt", {"topic": "interpretability", "num_papers": 3}
        )
        result = await engine.run(query)
        print(f"\nTools used: {[v.tool_name for v in result.llm_response.verbose if v.type == 'tool']}")

        result = await engine.run("Fetch https://modelcontextprotocol.io and summarize it")
        if not result.succeeded:
            print(f"Error ({result.error_type}): {result.error}")


if __name__ == "__main__":
    asyncio.run(main())
