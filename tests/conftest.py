"""
Pytest configuration for tests.

Adds the tests directory to the Python path so tests can import the
shared fakes module.
"""

import sys
from pathlib import Path

import pytest
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

tests_path = Path(__file__).parent

if str(tests_path) not in sys.path:
    sys.path.insert(0, str(tests_path))

from fakes import FakeConnection, ScriptedLLM  # noqa: E402

from mcp_chatbot.tools.registry import CapabilityRegistry  # noqa: E402


@pytest.fixture
def registry() -> CapabilityRegistry:
    return CapabilityRegistry()


@pytest.fixture
def research_server() -> FakeConnection:
    """Provider shaped like the research server: tools, resources, a template and a prompt."""
    return FakeConnection(
        "research",
        tools={
            "search_papers": "['2401.00001', '2401.00002']",
            "extract_info": '{"title": "Attention"}',
        },
        resources={
            "papers://folders": "# Available Topics\n\n- ai_interpretability",
            "papers://ai_interpretability": "# Papers on AI Interpretability",
        },
        templates=["papers://{topic}"],
        prompts={"generate_search_prompt": "Search for 5 academic papers about 'llm'"},
    )


@pytest.fixture
def scripted_llm() -> ScriptedLLM:
    return ScriptedLLM()
