"""
Namespace registry tests.
"""

import json

import pytest

from artreg_authz.config.constants import Namespace
from artreg_authz.core.exceptions import ConfigurationError, InvalidRelationError
from artreg_authz.core.value_objects import SubjectRef
from artreg_authz.features.namespaces import NamespaceRegistry, get_namespace_registry


class TestNamespaceRegistry:
    """Lookups and tuple validation against the default config."""

    def test_relations_for_known_namespace(self, registry):
        assert registry.relations_for("artwork") == {"owner", "editor", "viewer"}
        assert registry.relations_for(Namespace.SYSTEM) == {"admin", "user_manager", "statistics_viewer"}

    def test_relations_for_unknown_namespace_is_empty(self, registry):
        assert registry.relations_for("painting") == frozenset()

    def test_is_valid_relation(self, registry):
        assert registry.is_valid_relation("group", "member")
        assert not registry.is_valid_relation("group", "owner")
        assert not registry.is_valid_relation("painting", "owner")

    def test_user_namespace_declares_no_relations(self, registry):
        assert Namespace.USER in registry.namespaces
        assert registry.relations_for("user") == frozenset()

    def test_validate_accepts_direct_user(self, registry, tup):
        registry.validate_tuple(tup("artwork:A#editor@user:alice"))

    def test_validate_accepts_group_userset(self, registry, tup):
        registry.validate_tuple(tup("artwork:A#editor@group:G#member"))

    def test_validate_accepts_wildcard_object(self, registry, tup):
        registry.validate_tuple(tup("artwork:*#viewer@user:bob"))

    def test_validate_rejects_undeclared_relation(self, registry, tup):
        with pytest.raises(InvalidRelationError) as exc_info:
            registry.validate_tuple(tup("artwork:A#curator@user:alice"))
        assert exc_info.value.details["relation"] == "curator"

    def test_validate_rejects_disallowed_subject_namespace(self, registry, tup):
        with pytest.raises(InvalidRelationError):
            registry.validate_tuple(tup("artwork:A#editor@artwork:B"))

    def test_validate_rejects_nested_groups_by_default(self, registry, tup):
        with pytest.raises(InvalidRelationError):
            registry.validate_tuple(tup("group:outer#member@group:inner#member"))

    def test_validate_rejects_undeclared_subject_relation(self, registry, tup):
        with pytest.raises(InvalidRelationError):
            registry.validate_tuple(tup("artwork:A#editor@group:G#owner"))

    def test_allows_subject(self, registry):
        assert registry.allows_subject("nfc_tag", "manager", SubjectRef.user("u1"))
        assert registry.allows_subject("nfc_tag", "manager", SubjectRef("group", "g", "member"))
        assert not registry.allows_subject("nfc_tag", "owner", SubjectRef.user("u1"))

    def test_describe_is_serializable(self, registry):
        description = registry.describe()
        assert description["group"]["relations"]["member"]["usersets"] == []
        json.dumps(description)


class TestNamespaceRegistryLoading:
    """Building registries from config."""

    def test_from_config_rejects_unknown_userset_relation(self):
        config = {
            "group": {"relations": {"member": {"direct_subjects": ["user"]}}},
            "artwork": {"relations": {"owner": {"usersets": ["group#admin"]}}},
        }
        with pytest.raises(ConfigurationError):
            NamespaceRegistry.from_config(config)

    def test_from_config_rejects_malformed_userset(self):
        config = {"artwork": {"relations": {"owner": {"usersets": ["group"]}}}}
        with pytest.raises(ConfigurationError):
            NamespaceRegistry.from_config(config)

    def test_from_config_rejects_unknown_namespace(self):
        with pytest.raises(ConfigurationError):
            NamespaceRegistry.from_config({"painting": {"relations": {}}})

    def test_from_json_file(self, tmp_path):
        path = tmp_path / "namespaces.json"
        path.write_text(json.dumps({
            "user": {"relations": {}},
            "group": {"relations": {"member": {"direct_subjects": ["user"], "usersets": ["group#member"]}}},
        }))
        registry = NamespaceRegistry.from_json_file(path)
        assert registry.is_valid_relation("group", "member")
        assert registry.get_relation("group", "member").is_indirection_point
        assert not registry.is_valid_relation("artwork", "owner")

    def test_from_json_file_missing(self, tmp_path):
        with pytest.raises(ConfigurationError):
            NamespaceRegistry.from_json_file(tmp_path / "missing.json")

    def test_get_namespace_registry_is_cached(self):
        assert get_namespace_registry() is get_namespace_registry()
