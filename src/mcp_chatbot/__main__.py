"""
Command-line entry point: connect to the configured MCP servers and start
the interactive shell.

    python -m mcp_chatbot --config server_config.json
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from mcp_chatbot.agents.engine import ConversationEngine
from mcp_chatbot.llm import LLMConfig, get_llm
from mcp_chatbot.prompts.executor import PromptExecutor
from mcp_chatbot.shell import DEFAULT_RESOURCE_SCHEME, InteractiveShell
from mcp_chatbot.tools.config import ServersConfig, load_servers_config
from mcp_chatbot.tools.registry import CapabilityRegistry
from mcp_chatbot.tools.resource_resolver import ResourceResolver

logger = logging.getLogger("mcp_chatbot")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcp-chatbot",
        description="Chat with a language model that can use tools, resources "
        "and prompts from several MCP servers.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path(os.getenv("MCP_CHATBOT_CONFIG", "server_config.json")),
        help="JSON or YAML file with an 'mcpServers' mapping (default: server_config.json)",
    )
    parser.add_argument("--provider", choices=["anthropic", "openai"], help="Model backend")
    parser.add_argument("--model", help="Model id (default: the backend's default model)")
    parser.add_argument("--max-tokens", type=int, help="Token limit per completion")
    parser.add_argument(
        "--resource-scheme",
        default=DEFAULT_RESOURCE_SCHEME,
        help="URI scheme used for @<name> shorthands (default: %(default)s)",
    )
    parser.add_argument(
        "--feed-tool-errors",
        action="store_true",
        help="Report tool failures to the model instead of aborting the query",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("MCP_CHATBOT_LOG_LEVEL", "WARNING"),
        help="Logging level (default: %(default)s)",
    )
    return parser


def build_llm_config(args: argparse.Namespace) -> LLMConfig:
    overrides = {
        "provider": args.provider,
        "model": args.model,
        "max_tokens": args.max_tokens,
    }
    return LLMConfig(**{k: v for k, v in overrides.items() if v is not None})


async def run_chatbot(
    servers_config: ServersConfig,
    llm_config: LLMConfig,
    resource_scheme: str = DEFAULT_RESOURCE_SCHEME,
    feed_tool_errors: bool = False,
) -> None:
    """Connect to every provider, run the shell, and close all connections on exit."""
    async with CapabilityRegistry() as registry:
        connected = await registry.connect_all(servers_config.servers)
        if not connected:
            logger.warning("No MCP server could be connected; continuing without tools")

        engine = ConversationEngine(
            registry,
            get_llm(llm_config),
            output=print,
            system_prompt=llm_config.system_prompt,
            feed_tool_errors=feed_tool_errors,
        )
        shell = InteractiveShell(
            engine,
            ResourceResolver(registry),
            PromptExecutor(registry),
            resource_scheme=resource_scheme,
        )
        await shell.run()


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        servers_config = load_servers_config(args.config)
        llm_config = build_llm_config(args)
        asyncio.run(
            run_chatbot(
                servers_config,
                llm_config,
                resource_scheme=args.resource_scheme,
                feed_tool_errors=args.feed_tool_errors,
            )
        )
    except KeyboardInterrupt:
        return 130
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
