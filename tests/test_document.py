"""
Tests for configurability.config.document module.

Tests configuration documents including:
- Loading from files and text, with error handling
- Defaults merged underneath loaded data
- Staleness detection against the backing file
- Reload (re-read and re-install)
- Dump, write and round-tripping
- Dirty tracking and merging
"""

from __future__ import annotations

from datetime import datetime

import pytest
import yaml

from configurability.config.document import ConfigDocument
from configurability.config.tree import ConfigTree
from configurability.exceptions import ConfigurabilityError, LoadError
from configurability.registry import Configurable


class TestLoading:
    """Tests for creating documents."""

    def test_load_file(self, sample_config_path):
        """Test loading sections from a YAML file."""
        config = ConfigDocument.load(sample_config_path)

        assert config.sections() == ["database", "ldap", "branding"]
        assert config.ldap.bind_pass == "s3cr3t"
        assert config["branding"]["title"] == "Acme Widgets"

    def test_load_records_path_and_mtime(self, sample_config_path):
        """Test that path and modification time are recorded together."""
        config = ConfigDocument.load(str(sample_config_path))

        assert config.path == sample_config_path
        assert config.mtime_ns == sample_config_path.stat().st_mtime_ns
        assert isinstance(config.loaded_at, datetime)

    def test_root_is_a_tree(self, sample_config_path):
        """Test that the root node is a map."""
        config = ConfigDocument.load(sample_config_path)
        assert isinstance(config.root, ConfigTree)

    def test_missing_file_raises(self, tmp_test_dir):
        """Test that a missing file raises LoadError."""
        with pytest.raises(LoadError, match="not found") as exc_info:
            ConfigDocument.load(tmp_test_dir / "nonexistent.yml")
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)

    def test_malformed_yaml_raises(self, tmp_test_dir):
        """Test that invalid YAML raises LoadError chained to the parser."""
        path = tmp_test_dir / "broken.yml"
        path.write_text("database: [unclosed\n")

        with pytest.raises(LoadError) as exc_info:
            ConfigDocument.load(path)
        assert isinstance(exc_info.value.__cause__, yaml.YAMLError)

    def test_non_mapping_top_level_raises(self, tmp_test_dir):
        """Test that the top level must be a mapping."""
        path = tmp_test_dir / "list.yml"
        path.write_text("- one\n- two\n")

        with pytest.raises(LoadError, match="mapping"):
            ConfigDocument.load(path)

    def test_empty_file_is_empty_document(self, tmp_test_dir):
        """Test that an empty file loads as an empty document."""
        path = tmp_test_dir / "empty.yml"
        path.write_text("")

        config = ConfigDocument.load(path)
        assert len(config) == 0
        assert config.path == path

    def test_empty_document(self):
        """Test creating an in-memory document with no path."""
        config = ConfigDocument.empty()
        assert len(config) == 0
        assert config.path is None
        assert config.mtime_ns is None

    def test_from_text(self, sample_config_text):
        """Test creating a document from YAML text."""
        config = ConfigDocument.from_text(sample_config_text)
        assert config.database.development.adapter == "sqlite3"
        assert config.path is None

    def test_from_text_malformed_raises(self):
        """Test that bad text raises LoadError."""
        with pytest.raises(LoadError):
            ConfigDocument.from_text("database: [unclosed\n")


class TestDefaults:
    """Tests for defaults merged under loaded data."""

    def test_defaults_fill_missing_values(self, sample_config_path):
        """Test that defaults apply where the file is silent."""
        defaults = {
            "ldap": {"port": 389, "uri": "ldap://localhost"},
            "cache": {"ttl": 60},
        }
        config = ConfigDocument.load(sample_config_path, defaults=defaults)

        assert config.ldap.port == 389
        assert config.ldap.uri == "ldap://ldap.acme.com/dc=acme,dc=com"
        assert config.cache.ttl == 60

    def test_defaults_keep_file_key_order(self, tmp_test_dir):
        """Test that loaded keys keep file order, defaults-only keys follow."""
        path = tmp_test_dir / "ordered.yml"
        path.write_text("ldap:\n  host: a\n")
        defaults = {"mailer": {"x": 1}, "ldap": {"port": 389}}

        config = ConfigDocument.load(path, defaults=defaults)

        assert list(config) == ["ldap", "mailer"]
        assert list(config.ldap) == ["host", "port"]
        assert config.dump() == "ldap:\n  host: a\n  port: 389\nmailer:\n  x: 1\n"

    def test_write_saves_defaults_after_file_keys(self, tmp_test_dir):
        """Test that written files keep file order and include defaults."""
        path = tmp_test_dir / "ordered.yml"
        path.write_text("ldap:\n  host: a\n")
        config = ConfigDocument.load(
            path, defaults={"ldap": {"port": 389}, "mailer": {"x": 1}}
        )

        config.write()

        assert path.read_text() == "ldap:\n  host: a\n  port: 389\nmailer:\n  x: 1\n"

    def test_file_values_win_over_defaults(self, tmp_test_dir):
        """Test that defaults never override loaded values."""
        path = tmp_test_dir / "override.yml"
        path.write_text("ldap:\n  port: 636\n  tags: [a]\n")

        config = ConfigDocument.load(
            path, defaults={"ldap": {"port": 389, "tags": ["x", "y"]}}
        )

        assert config.ldap.port == 636
        assert config.ldap.tags == ["a"]

    def test_defaults_survive_reload(self, sample_config_path, registry):
        """Test that reload() merges the same defaults again."""
        config = ConfigDocument.load(
            sample_config_path, defaults={"cache": {"ttl": 60}}, registry=registry
        )
        config.reload()
        assert config.cache.ttl == 60

    def test_from_defaults(self, registry):
        """Test building a document from registered components' defaults."""

        class Mailer(Configurable):
            config_defaults = {"host": "localhost", "port": 25}

        mailer = Mailer()
        registry.register(mailer)

        config = ConfigDocument.from_defaults(registry)
        assert config.to_dict() == {"mailer": {"host": "localhost", "port": 25}}


class TestStaleness:
    """Tests for changed() and changed_reason()."""

    def test_unchanged_after_load(self, sample_config_path):
        """Test that a freshly loaded document is current."""
        config = ConfigDocument.load(sample_config_path)
        assert config.changed() is False
        assert config.changed_reason() is None

    def test_changed_after_mtime_advances(self, sample_config_path, bump_mtime):
        """Test that a newer file marks the document stale."""
        config = ConfigDocument.load(sample_config_path)
        bump_mtime(sample_config_path)

        assert config.changed() is True
        assert "modified" in config.changed_reason()

    def test_changed_when_file_removed(self, sample_config_path):
        """Test that a deleted file marks the document stale."""
        config = ConfigDocument.load(sample_config_path)
        sample_config_path.unlink()

        assert config.changed() is True
        assert "removed" in config.changed_reason()

    def test_no_path_never_changed(self):
        """Test that in-memory documents are never stale."""
        config = ConfigDocument({"a": 1})
        config.a = 2
        assert config.changed() is False

    def test_unchanged_after_write(self, sample_config_path, bump_mtime):
        """Test that writing resynchronizes the recorded mtime."""
        config = ConfigDocument.load(sample_config_path)
        bump_mtime(sample_config_path)
        assert config.changed()

        config.write()
        assert config.changed() is False


class TestReload:
    """Tests for reload()."""

    def test_reload_picks_up_new_content(self, sample_config_path, registry, bump_mtime):
        """Test that reload() replaces the root with the file's contents."""
        config = ConfigDocument.load(sample_config_path, registry=registry)
        sample_config_path.write_text("ldap:\n  uri: ldap://new.acme.com\n")
        bump_mtime(sample_config_path)

        config.reload()

        assert config.sections() == ["ldap"]
        assert config.ldap.uri == "ldap://new.acme.com"
        assert config.changed() is False

    def test_reload_discards_unsaved_edits(self, sample_config_path, registry):
        """Test that in-memory edits are dropped by reload()."""
        config = ConfigDocument.load(sample_config_path, registry=registry)
        config.ldap.bind_pass = "changed"
        assert config.dirty

        config.reload()
        assert config.ldap.bind_pass == "s3cr3t"
        assert not config.dirty

    def test_reload_installs_even_if_unchanged(self, sample_config_path, registry):
        """Test that reload() always dispatches."""

        class Ldap:
            calls = 0

            def configure(self, section):
                self.calls += 1
                self.section = section

        ldap = Ldap()
        registry.register(ldap)
        config = ConfigDocument.load(sample_config_path, registry=registry)

        result = config.reload()
        config.reload()

        assert ldap.calls == 2
        assert ldap.section.bind_dn == "cn=web,dc=acme,dc=com"
        assert result.keys == ("ldap",)

    def test_reload_without_path_raises(self):
        """Test that in-memory documents cannot reload."""
        with pytest.raises(LoadError):
            ConfigDocument.empty().reload()

    def test_failed_reload_keeps_document(self, sample_config_path, registry):
        """Test that a broken file leaves the loaded data in place."""
        config = ConfigDocument.load(sample_config_path, registry=registry)
        sample_config_path.write_text("ldap: [broken\n")

        with pytest.raises(LoadError):
            config.reload()
        assert config.ldap.bind_pass == "s3cr3t"


class TestSerialization:
    """Tests for dump(), write() and merge()."""

    def test_round_trip(self, sample_config_path):
        """Test that parsing the dump gives back the same tree."""
        config = ConfigDocument.load(sample_config_path)
        assert yaml.safe_load(config.dump()) == config.to_dict()

    def test_dump_keeps_section_order(self):
        """Test that sections are dumped in insertion order, not sorted."""
        config = ConfigDocument({"zeta": 1, "alpha": 2, "mid": 3})
        assert [line.split(":")[0] for line in config.dump().splitlines()] == [
            "zeta",
            "alpha",
            "mid",
        ]

    def test_dump_reflects_mutation(self, sample_config_path):
        """Test that edits are serialized."""
        config = ConfigDocument.load(sample_config_path)
        config.database.testing.adapter = "mysql"
        assert yaml.safe_load(config.dump())["database"]["testing"]["adapter"] == "mysql"

    def test_write_to_own_path(self, sample_config_path):
        """Test writing back to the loaded file."""
        config = ConfigDocument.load(sample_config_path)
        config.branding.title = "Acme Gadgets"
        config.write()

        reloaded = ConfigDocument.load(sample_config_path)
        assert reloaded.branding.title == "Acme Gadgets"

    def test_write_to_new_path(self, sample_config_path, tmp_test_dir):
        """Test that writing elsewhere adopts the new path."""
        config = ConfigDocument.load(sample_config_path)
        target = tmp_test_dir / "out" / "copy.yml"

        written = config.write(target)

        assert written == target
        assert config.path == target
        assert config.mtime_ns == target.stat().st_mtime_ns
        assert ConfigDocument.load(target) == config

    def test_write_without_path_raises(self):
        """Test that an in-memory document needs a destination."""
        with pytest.raises(ConfigurabilityError, match="No path"):
            ConfigDocument({"a": 1}).write()

    def test_write_clears_dirty(self, tmp_test_dir):
        """Test dirty tracking across mutation and write."""
        config = ConfigDocument({"a": {"b": 1}})
        assert not config.dirty
        config.a.b = 2
        assert config.dirty

        config.write(tmp_test_dir / "a.yml")
        assert not config.dirty

    def test_merge(self):
        """Test that merge() deep-merges into a new document."""
        base = ConfigDocument({"ldap": {"host": "a", "port": 389}, "tags": [1, 2]})
        merged = base.merge({"ldap": {"host": "b"}, "tags": [3]})

        assert merged.to_dict() == {"ldap": {"host": "b", "port": 389}, "tags": [3]}
        assert base.ldap.host == "a"
        assert merged.path is None


class TestSectionAccess:
    """Tests for access delegated from the document to its root."""

    def test_deep_mutation_visible_both_ways(self, sample_config_path):
        """Test that attribute writes land in the document's tree."""
        config = ConfigDocument.load(sample_config_path)
        config.database.testing.adapter = "mysql"

        assert config["database"]["testing"]["adapter"] == "mysql"
        assert config.database.testing.adapter == "mysql"
        assert config.root.database.testing.adapter == "mysql"

    def test_set_section_as_attribute(self):
        """Test creating a section through attribute assignment."""
        config = ConfigDocument.empty()
        config.mailer = {"host": "smtp.acme.com"}
        assert config["mailer"]["host"] == "smtp.acme.com"
        assert "mailer" in config

    def test_read_only_properties(self, sample_config_path):
        """Test that document properties are not treated as sections."""
        config = ConfigDocument.load(sample_config_path)
        with pytest.raises(AttributeError):
            config.path = None
        assert "path" not in config

    def test_missing_section_is_none(self, sample_config_path):
        """Test lenient access to absent sections."""
        config = ConfigDocument.load(sample_config_path)
        assert config.mailer is None
        assert config.get("mailer", {}) == {}

    def test_section_named_like_method_reachable_as_item(self):
        """Test that a section shadowed by a document attribute is an item."""
        config = ConfigDocument.from_text("defaults:\n  a: 1\nsections:\n  b: 2\n")

        assert config["defaults"]["a"] == 1
        assert config["sections"] == {"b": 2}
        assert config.defaults == {}

    def test_assigning_method_name_raises(self):
        """Test that assigning to a method name does not hide the method."""
        config = ConfigDocument.empty()

        with pytest.raises(AttributeError, match="sections"):
            config.sections = {"a": 1}

        assert "sections" not in config
        assert config.sections() == []
        config["sections"] = {"a": 1}
        assert config.sections() == ["sections"]
