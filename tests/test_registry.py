"""
Tests for the capability registry: registration, routing and teardown.
"""

import pytest

from fakes import FakeConnection, connection_error, failing_factory

from mcp_chatbot.tools.registry import CapabilityRegistry
from mcp_chatbot.tools.schemas import (
    MCPConfigError,
    MCPConnectionError,
    MCPInvocationError,
    MCPNotFoundError,
    MCPServerConfig,
)


def stdio_config(script: str) -> MCPServerConfig:
    return MCPServerConfig(command="uv", args=["run", script])


class TestRegistration:
    """Tests for name -> owner maps."""

    def test_registers_every_capability(self, registry, research_server):
        """Test that tools, resources, templates and prompts are all registered."""
        registry.register(research_server)

        assert [t.name for t in registry.tools] == ["search_papers", "extract_info"]
        assert [r.uri for r in registry.resources] == [
            "papers://folders",
            "papers://ai_interpretability",
        ]
        assert [t.uri_template for t in registry.resource_templates] == ["papers://{topic}"]
        assert [p.name for p in registry.prompts] == ["generate_search_prompt"]
        assert registry.connections == [research_server]

    def test_last_registered_provider_wins_tool(self, registry):
        """Test that a tool declared by two providers routes to the later one."""
        first = FakeConnection("first", tools={"search_papers": "from first"})
        second = FakeConnection("second", tools={"search_papers": "from second"})

        registry.register(first)
        registry.register(second)

        assert registry.get_tool_owner("search_papers") is second

    def test_last_registered_wins_across_many_providers(self, registry):
        """Test last-wins ordering across three providers."""
        providers = [
            FakeConnection(f"p{i}", tools={"shared": f"p{i}", f"own_{i}": "x"})
            for i in range(3)
        ]
        for provider in providers:
            registry.register(provider)

        assert registry.get_tool_owner("shared") is providers[2]
        assert registry.get_tool_owner("own_0") is providers[0]

    def test_collision_keeps_one_tool_per_name(self, registry):
        """Test that the exported tool list never holds duplicate names."""
        registry.register(FakeConnection("first", tools={"search_papers": "a"}))
        registry.register(FakeConnection("second", tools={"search_papers": "b"}))

        names = [t.name for t in registry.tools]
        assert names == ["search_papers"]
        assert registry.tools[0].server_id == "second"

    def test_last_registered_wins_resource_and_prompt(self, registry):
        """Test that resources and prompts follow the same overwrite rule."""
        first = FakeConnection(
            "first", resources={"papers://folders": "a"}, prompts={"summarize": "a"}
        )
        second = FakeConnection(
            "second", resources={"papers://folders": "b"}, prompts={"summarize": "b"}
        )
        registry.register(first)
        registry.register(second)

        assert registry.get_resource_owner("papers://folders") is second
        assert registry.get_prompt_owner("summarize") is second

    def test_unknown_lookups_raise_not_found(self, registry, research_server):
        """Test that unknown names raise MCPNotFoundError."""
        registry.register(research_server)

        with pytest.raises(MCPNotFoundError):
            registry.get_tool_owner("unknown")
        with pytest.raises(MCPNotFoundError):
            registry.get_prompt_owner("unknown")
        with pytest.raises(MCPNotFoundError):
            registry.get_resource_owner("papers://unknown")
        assert registry.find_resource_owner("papers://unknown") is None

    def test_resource_schemes(self, registry, research_server):
        """Test that schemes come from resources and templates."""
        registry.register(research_server)
        registry.register(FakeConnection("notes", templates=["notes://{day}"]))

        assert registry.resource_schemes == {"papers", "notes"}

    def test_duplicate_server_id_rejected(self, registry):
        """Test that a second connection under a registered id is refused."""
        first = FakeConnection("research", tools={"search_papers": "a"})
        registry.register(first)

        with pytest.raises(MCPConfigError, match="research"):
            registry.register(FakeConnection("research", tools={"search_papers": "b"}))

        assert registry.connections == [first]
        assert registry.get_tool_owner("search_papers") is first

    def test_provider_without_optional_capabilities(self, registry):
        """Test that a tools-only provider registers cleanly."""
        registry.register(FakeConnection("tools_only", tools={"fetch": "ok"}))

        assert registry.resources == []
        assert registry.prompts == []
        assert registry.resource_templates == []


class TestInvokeTool:
    """Tests for routing tool invocations."""

    @pytest.mark.asyncio
    async def test_routes_to_owner(self, registry, research_server):
        """Test that invoke_tool forwards to the owning connection."""
        registry.register(research_server)

        result = await registry.invoke_tool("search_papers", {"topic": "llm"})

        assert result == "['2401.00001', '2401.00002']"
        assert research_server.calls == [("search_papers", {"topic": "llm"})]

    @pytest.mark.asyncio
    async def test_routes_collision_to_later_provider(self, registry):
        """Test that invocation reaches the last-registered provider only."""
        first = FakeConnection("first", tools={"search_papers": "from first"})
        second = FakeConnection("second", tools={"search_papers": "from second"})
        registry.register(first)
        registry.register(second)

        result = await registry.invoke_tool("search_papers", {})

        assert result == "from second"
        assert first.calls == []

    @pytest.mark.asyncio
    async def test_tool_runs_on_its_connection(self, registry, research_server):
        """Test that a registered MCPTool executes on the connection that published it."""
        registry.register(research_server)
        tool = registry.tools[0]

        assert tool.server_id == "research"
        assert tool.to_anthropic_schema()["input_schema"]["type"] == "object"
        assert await tool.run(topic="llm") == "['2401.00001', '2401.00002']"
        assert research_server.calls == [("search_papers", {"topic": "llm"})]

    @pytest.mark.asyncio
    async def test_unknown_tool_raises_not_found(self, registry, research_server):
        """Test that an unregistered tool raises MCPNotFoundError."""
        registry.register(research_server)

        with pytest.raises(MCPNotFoundError):
            await registry.invoke_tool("delete_everything", {})
        assert research_server.calls == []

    @pytest.mark.asyncio
    async def test_provider_failure_propagates(self, registry):
        """Test that provider-side failures surface unchanged."""
        registry.register(
            FakeConnection("broken", tools={"search_papers": MCPInvocationError("boom")})
        )

        with pytest.raises(MCPInvocationError, match="boom"):
            await registry.invoke_tool("search_papers", {})


class TestConnect:
    """Tests for startup discovery."""

    @pytest.mark.asyncio
    async def test_connect_all_in_order(self):
        """Test that providers are connected in configuration order."""
        connections = {
            "research": FakeConnection("research", tools={"search_papers": "a"}),
            "fetch": FakeConnection("fetch", tools={"search_papers": "b", "fetch": "c"}),
        }
        registry = CapabilityRegistry(connection_factory=failing_factory({}, connections))

        connected = await registry.connect_all(
            {"research": stdio_config("research_server.py"), "fetch": stdio_config("fetch.py")}
        )

        assert connected == ["research", "fetch"]
        assert all(c.connected and c.discovered for c in connections.values())
        assert registry.get_tool_owner("search_papers") is connections["fetch"]

    @pytest.mark.asyncio
    async def test_connect_all_excludes_failing_provider(self):
        """Test that a provider failing its handshake is skipped."""
        connections = {"fetch": FakeConnection("fetch", tools={"fetch": "ok"})}
        registry = CapabilityRegistry(
            connection_factory=failing_factory(
                {"research": connection_error("research")}, connections
            )
        )

        connected = await registry.connect_all(
            {"research": stdio_config("research_server.py"), "fetch": stdio_config("fetch.py")}
        )

        assert connected == ["fetch"]
        assert [c.server_id for c in registry.connections] == ["fetch"]
        with pytest.raises(MCPNotFoundError):
            registry.get_tool_owner("search_papers")

    @pytest.mark.asyncio
    async def test_connect_raises_connection_error(self):
        """Test that connect itself surfaces MCPConnectionError."""
        registry = CapabilityRegistry(
            connection_factory=failing_factory({"research": connection_error("research")}, {})
        )

        with pytest.raises(MCPConnectionError):
            await registry.connect("research", stdio_config("research_server.py"))

    @pytest.mark.asyncio
    async def test_failed_discovery_closes_connection(self):
        """Test that a half-open connection is closed and not registered."""
        broken = FakeConnection(
            "research",
            tools={"search_papers": "a"},
            discover_error=MCPConnectionError("list_tools failed"),
        )
        registry = CapabilityRegistry(connection_factory=lambda sid, cfg: broken)

        with pytest.raises(MCPConnectionError):
            await registry.connect("research", stdio_config("research_server.py"))

        assert broken.closed is True
        assert registry.tools == []

    @pytest.mark.asyncio
    async def test_transport_failure_during_discovery_excludes_provider(self):
        """Test that a provider dying mid-discovery is closed and skipped."""
        flaky = FakeConnection(
            "flaky",
            tools={"search_papers": "a"},
            discover_error=RuntimeError("provider process exited"),
        )
        connections = {
            "flaky": flaky,
            "good": FakeConnection("good", tools={"fetch": "ok"}),
        }
        registry = CapabilityRegistry(connection_factory=failing_factory({}, connections))

        connected = await registry.connect_all(
            {"flaky": stdio_config("flaky.py"), "good": stdio_config("good.py")}
        )

        assert connected == ["good"]
        assert flaky.closed is True
        assert [c.server_id for c in registry.connections] == ["good"]

    @pytest.mark.asyncio
    async def test_discovery_failure_is_wrapped(self):
        """Test that non-connection discovery errors surface as MCPConnectionError."""
        cause = RuntimeError("provider process exited")
        broken = FakeConnection("research", discover_error=cause)
        registry = CapabilityRegistry(connection_factory=lambda sid, cfg: broken)

        with pytest.raises(MCPConnectionError) as exc_info:
            await registry.connect("research", stdio_config("research_server.py"))

        assert exc_info.value.__cause__ is cause

    @pytest.mark.asyncio
    async def test_duplicate_server_id_refused(self, research_server):
        """Test that connecting an id that is already live does not spawn a second provider."""
        built = []
        registry = CapabilityRegistry(
            connection_factory=lambda sid, cfg: built.append(sid) or research_server
        )
        await registry.connect("research", stdio_config("research_server.py"))

        with pytest.raises(MCPConfigError):
            await registry.connect("research", stdio_config("research_server.py"))

        assert built == ["research"]
        assert research_server.closed is False


class TestCloseAll:
    """Tests for partial-failure tolerant teardown."""

    @pytest.mark.asyncio
    async def test_close_all_survives_one_failure(self, registry):
        """Test that every connection is closed even if one close raises."""
        providers = [
            FakeConnection("a"),
            FakeConnection("b", close_error=RuntimeError("cancel scope")),
            FakeConnection("c"),
        ]
        for provider in providers:
            registry.register(provider)

        await registry.close_all()

        assert [p.closed for p in providers] == [True, True, True]

    @pytest.mark.asyncio
    async def test_context_manager_closes_connections(self):
        """Test that leaving the registry context closes every connection."""
        provider = FakeConnection("a")

        async with CapabilityRegistry() as registry:
            registry.register(provider)

        assert provider.closed is True
