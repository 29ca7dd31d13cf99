"""
mcp-chatbot - multi-server MCP chat agent

Connects to several MCP servers, aggregates their tools, resources and
prompts, and lets a language model use them in a multi-turn conversation.

Key components:
- Tools: provider connections, capability registry, resource resolution
- Prompts: rendering of provider prompt templates into queries
- Agents: the conversation engine (turn loop)
- LLM: model backends for Anthropic and OpenAI
"""

__version__ = "0.1.0"

from .agents import *
from .llm import *
from .models import *
from .prompts import *
from .tools import *

__all__ = [
    "agents",
    "models",
    "llm",
    "prompts",
    "tools",
]
