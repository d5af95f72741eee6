"""Unit tests for the live connection registry."""

from booking_core.services.connections import ConnectionRegistry


class TestConnectionRegistry:
    """At most one live connection per user."""

    def test_add_and_lookup(self) -> None:
        registry: ConnectionRegistry[object] = ConnectionRegistry()
        socket = object()

        assert registry.add("guest-1", socket) is None
        assert registry.get("guest-1") is socket
        assert "guest-1" in registry
        assert len(registry) == 1

    def test_new_connection_replaces_previous(self) -> None:
        registry: ConnectionRegistry[object] = ConnectionRegistry()
        first, second = object(), object()
        registry.add("guest-1", first)

        replaced = registry.add("guest-1", second)

        assert replaced is first
        assert registry.get("guest-1") is second

    def test_re_adding_same_connection_replaces_nothing(self) -> None:
        registry: ConnectionRegistry[object] = ConnectionRegistry()
        socket = object()
        registry.add("guest-1", socket)

        assert registry.add("guest-1", socket) is None

    def test_late_close_of_replaced_socket_keeps_successor(self) -> None:
        registry: ConnectionRegistry[object] = ConnectionRegistry()
        first, second = object(), object()
        registry.add("guest-1", first)
        registry.add("guest-1", second)

        assert registry.remove("guest-1", first) is False
        assert registry.get("guest-1") is second

    def test_remove(self) -> None:
        registry: ConnectionRegistry[object] = ConnectionRegistry()
        registry.add("guest-1", object())

        assert registry.remove("guest-1") is True
        assert registry.remove("guest-1") is False
        assert "guest-1" not in registry
        assert registry.get("guest-1") is None

    def test_registries_are_independent(self) -> None:
        first: ConnectionRegistry[object] = ConnectionRegistry()
        second: ConnectionRegistry[object] = ConnectionRegistry()
        first.add("guest-1", object())

        assert len(second) == 0
