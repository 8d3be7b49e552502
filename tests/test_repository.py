"""Tests for local, composite, and registry-backed repositories."""

import pytest

from esa_resolver.repository import CompositeRepository
from esa_resolver.repository import ExternalRepository
from esa_resolver.repository import LocalRepository
from esa_resolver.repository import RepositoryRegistry
from stub_resources import StubResource
from stub_resources import package_requirement


def test_local_repository_returns_matches_in_resource_order():
    first = StubResource("first", provides=["com.a"])
    second = StubResource("second", provides=["com.a", "com.b"])
    repository = LocalRepository([first, second])

    providers = repository.find_providers(package_requirement("com.a"))

    assert [c.resource for c in providers] == [first, second]
    assert repository.find_providers(package_requirement("com.missing")) == []


def test_composite_concatenates_members_in_order():
    local = StubResource("local", provides=["com.a"])
    remote = StubResource("remote", provides=["com.a"])
    composite = CompositeRepository(LocalRepository([local]), LocalRepository([remote]))

    providers = composite.find_providers(package_requirement("com.a"))

    assert [c.resource for c in providers] == [local, remote]


def test_composite_keeps_duplicates():
    resource = StubResource("dup", provides=["com.a"])
    local = LocalRepository([resource])
    assert len(CompositeRepository(local, local).find_providers(package_requirement("com.a"))) == 2


class TestRepositoryRegistry:
    def test_empty_registry_finds_nothing(self):
        assert ExternalRepository().find_providers(package_requirement("com.a")) == []

    def test_queries_in_registration_order(self):
        registry = RepositoryRegistry()
        one = StubResource("one", provides=["com.a"])
        two = StubResource("two", provides=["com.a"])
        registry.register("one", LocalRepository([one]))
        registry.register("two", LocalRepository([two]))

        external = ExternalRepository(registry)

        assert registry.names() == ["one", "two"]
        assert [c.resource for c in external.find_providers(package_requirement("com.a"))] == [one, two]

    def test_duplicate_name_rejected(self):
        registry = RepositoryRegistry()
        registry.register("one", LocalRepository([]))
        with pytest.raises(ValueError, match="already registered"):
            registry.register("one", LocalRepository([]))

    def test_unregister(self):
        registry = RepositoryRegistry()
        registry.register("one", LocalRepository([StubResource("one", provides=["com.a"])]))
        registry.unregister("one")
        registry.unregister("never-registered")
        assert registry.names() == []
        assert registry.find_providers(package_requirement("com.a")) == []

    def test_from_entry_points(self, monkeypatch):
        provider = StubResource("plugin", provides=["com.a"])

        class FakeEntryPoint:
            name = "plugin"

            def load(self):
                return lambda: LocalRepository([provider])

        def fake_entry_points(group):
            assert group == "esa_resolver.repositories"
            return [FakeEntryPoint()]

        monkeypatch.setattr("importlib.metadata.entry_points", fake_entry_points)

        registry = RepositoryRegistry.from_entry_points()

        assert registry.names() == ["plugin"]
        assert registry.find_providers(package_requirement("com.a"))[0].resource is provider
