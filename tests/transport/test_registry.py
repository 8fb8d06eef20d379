"""Tests for TransportRegistry and the memory transport."""

import pytest

from arbor.core.errors import TransportNotFoundError
from arbor.store import MemoryRepository
from arbor.transport import MemoryTransport, TransportRegistry


class TestTransportRegistry:
    """Tests for transport lookup."""

    def test_register_and_get(self):
        """Registered transports are found by name."""
        registry = TransportRegistry()
        transport = MemoryTransport()
        registry.register(transport)
        assert registry.get_transport("memory") is transport
        assert registry.has_transport("memory")
        assert registry.get_transport_names() == ["memory"]

    def test_unknown_transport(self):
        """Unknown names list the available transports."""
        registry = TransportRegistry()
        registry.register(MemoryTransport())
        with pytest.raises(TransportNotFoundError, match="Unknown transport 'jackrabbit'") as exc:
            registry.get_transport("jackrabbit")
        assert exc.value.known == ["memory"]

    def test_empty_registry_message(self):
        """An empty registry says so."""
        with pytest.raises(TransportNotFoundError, match="available: none"):
            TransportRegistry().get_transport("memory")


class TestMemoryTransport:
    """Tests for the memory transport."""

    def test_same_repository_every_time(self):
        """Saved content survives new logins through the transport."""
        transport = MemoryTransport()
        session = transport.get_repository({}).login()
        session.get_root_node().add_node("content")
        session.save()
        assert transport.get_repository({}).login().node_exists("/content")

    def test_wraps_given_repository(self):
        """A repository can be injected."""
        repository = MemoryRepository()
        assert MemoryTransport(repository).get_repository({"name": "memory"}) is repository
