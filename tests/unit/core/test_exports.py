"""Unit tests for export value classification and resolution."""

import pytest

from esmap.core.exports import (
    ABSENT,
    ConditionsMap,
    FilePath,
    MAX_EXPORT_NESTING,
    SubpathMap,
    classify_export,
    iter_subpaths,
    resolve_target,
    root_target,
    select_condition,
)


class TestClassifyExport:
    def test_string_is_file_path(self):
        assert classify_export("./index.js") == FilePath("./index.js")

    def test_empty_and_missing_are_absent(self):
        assert classify_export(None) is ABSENT
        assert classify_export("") is ABSENT
        assert classify_export({}) is ABSENT
        assert classify_export(42) is ABSENT

    def test_condition_keys_make_conditions_map(self):
        value = classify_export({"import": "./a.mjs", "require": "./a.cjs"})
        assert isinstance(value, ConditionsMap)
        assert list(value.entries) == ["import", "require"]

    def test_dot_keys_make_subpath_map(self):
        value = classify_export({".": "./a.js", "./b": "./b.js"})
        assert isinstance(value, SubpathMap)

    def test_array_picks_first_resolvable(self):
        assert classify_export([None, "", "./fallback.js"]) == FilePath("./fallback.js")
        assert classify_export([None]) is ABSENT

    def test_nesting_beyond_limit_raises(self):
        raw = "./deep.js"
        for _ in range(MAX_EXPORT_NESTING + 1):
            raw = {"import": raw}
        with pytest.raises(ValueError, match="nested deeper"):
            classify_export(raw)

    def test_nesting_at_limit_is_accepted(self):
        raw = "./deep.js"
        for _ in range(MAX_EXPORT_NESTING):
            raw = {"import": raw}
        assert resolve_target(classify_export(raw)) == "./deep.js"


class TestConditionPrecedence:
    def test_default_beats_everything(self):
        value = classify_export({"node": "./n.js", "import": "./i.js", "default": "./d.js"})
        assert resolve_target(value) == "./d.js"

    def test_browser_beats_import_and_node(self):
        value = classify_export({"node": "./n.js", "import": "./i.js", "browser": "./b.js"})
        assert resolve_target(value) == "./b.js"

    def test_import_beats_node(self):
        value = classify_export({"node": "./n.js", "import": "./i.js"})
        assert resolve_target(value) == "./i.js"

    def test_falls_back_to_first_value(self):
        value = classify_export({"types": "./t.d.ts", "require": "./r.cjs"})
        assert resolve_target(value) == "./t.d.ts"

    def test_empty_condition_is_skipped(self):
        value = classify_export({"default": "", "import": "./i.js"})
        assert resolve_target(value) == "./i.js"

    def test_nested_conditions_resolve(self):
        value = classify_export({"import": {"types": "./x.d.ts", "default": "./x.mjs"}})
        assert resolve_target(value) == "./x.mjs"

    def test_select_condition_on_unknown_keys_only(self):
        value = classify_export({"worker": "./w.js"})
        assert select_condition(value) == FilePath("./w.js")

    def test_present_condition_wins_even_if_it_resolves_to_nothing(self):
        value = classify_export({"default": {"types": None}, "import": "./i.js"})
        assert resolve_target(value) is None


class TestRootAndSubpaths:
    def test_root_from_dot_key(self):
        value = classify_export({".": {"import": "./esm/index.mjs"}, "./feature": "./f.js"})
        assert root_target(value) == "./esm/index.mjs"

    def test_subpath_map_without_root(self):
        value = classify_export({"./a": "./a.js"})
        assert root_target(value) is None
        assert list(iter_subpaths(value)) == [("/a", "./a.js")]

    def test_subpaths_resolve_conditions(self):
        value = classify_export(
            {
                ".": "./index.js",
                "./feature": {"node": "./feature-node.js", "default": "./feature.js"},
                "./plain": "./plain.js",
            }
        )
        assert list(iter_subpaths(value)) == [
            ("/feature", "./feature.js"),
            ("/plain", "./plain.js"),
        ]

    def test_unresolvable_and_pattern_subpaths_are_skipped(self):
        value = classify_export(
            {
                "./private": None,
                "./utils/*": "./utils/*.js",
                "./": "./dir/",
                "./ok": "./ok.js",
            }
        )
        assert list(iter_subpaths(value)) == [("/ok", "./ok.js")]

    def test_non_subpath_values_have_no_subpaths(self):
        assert list(iter_subpaths(classify_export("./index.js"))) == []
        assert list(iter_subpaths(classify_export({"import": "./i.js"}))) == []
