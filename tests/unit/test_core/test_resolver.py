"""Unit tests for the namespace resolver."""

import pytest

from subwrap.core.introspector import NamespacePattern
from subwrap.core.resolver import expand_loaded, partition, validate_names
from subwrap.exceptions import ConfigError


class TestPartition:
    """Test splitting packages into wildcards and literals."""

    def test_partition(self):
        wildcards, literals = partition(["orchard.tree.*", "orchard.shed", "pine.*"])
        assert [str(p) for p in wildcards] == ["orchard.tree.*", "pine.*"]
        assert [str(p) for p in literals] == ["orchard.shed"]

    def test_none_is_empty(self):
        assert partition(None) == ([], [])

    def test_tuple_and_set_accepted(self):
        wildcards, literals = partition(("a.*",))
        assert wildcards == [NamespacePattern("a", wildcard=True)]
        _, literals = partition({"b"})
        assert literals == [NamespacePattern("b")]

    @pytest.mark.parametrize("bad", ["orchard.tree", {"orchard": 1}, 42, b"orchard"])
    def test_bad_shape(self, bad):
        with pytest.raises(ConfigError):
            partition(bad)

    @pytest.mark.parametrize("bad", [[1], [""], [None]])
    def test_bad_items(self, bad):
        with pytest.raises(ConfigError):
            partition(bad)

    def test_config_error_is_type_error(self):
        with pytest.raises(TypeError):
            validate_names("not a list", "subs")


class TestExpandLoaded:
    """Test expansion against sys.modules."""

    def test_literal_loaded(self, make_module, unique_name):
        name = unique_name()
        make_module(name, "def f():\n    pass\n")
        assert expand_loaded([NamespacePattern(name)]) == [name]

    def test_literal_not_loaded(self, unique_name):
        assert expand_loaded([NamespacePattern(unique_name())]) == []

    def test_literal_class(self, make_module, unique_name):
        name = unique_name()
        make_module(name, "class Pear:\n    pass\n")
        assert expand_loaded([NamespacePattern(f"{name}.Pear")]) == [f"{name}.Pear"]

    def test_wildcard_family(self, make_module, unique_name):
        root = unique_name("Orchard")
        make_module(root, "")
        make_module(f"{root}.Tree", "class Trunk:\n    pass\n")
        make_module(f"{root}.Tree.Pear", "")
        make_module(f"{root}.Apple.KingstonBlack", "")
        make_module(f"Pine_{root}.Tree", "")

        found = expand_loaded([NamespacePattern.parse(f"{root}.Tree.*")])
        assert set(found) == {f"{root}.Tree", f"{root}.Tree.Trunk", f"{root}.Tree.Pear"}

    def test_wildcard_rejects_string_prefix_sibling(self, make_module, unique_name):
        root = unique_name("Pine")
        make_module(f"{root}.Tree", "")
        assert expand_loaded([NamespacePattern.parse(f"{root}.Tre.*")]) == []

    def test_wildcard_reaches_classes_of_ancestor_module(self, make_module, unique_name):
        name = unique_name()
        make_module(name, "class Shed:\n    class Rake:\n        pass\n\nclass Barn:\n    pass\n")
        found = expand_loaded([NamespacePattern.parse(f"{name}.Shed.*")])
        assert found == [f"{name}.Shed", f"{name}.Shed.Rake"]

    def test_unmatched_wildcard_is_empty(self, unique_name):
        assert expand_loaded([NamespacePattern.parse(f"{unique_name()}.*")]) == []

    def test_deduplicates(self, make_module, unique_name):
        name = unique_name()
        make_module(name, "")
        patterns = [NamespacePattern(name), NamespacePattern.parse(f"{name}.*")]
        assert expand_loaded(patterns) == [name]
