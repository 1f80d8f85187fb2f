"""
test_placeholders.py - placeholder lexicon, grouping and variant detection
"""

from pathlib import Path

import pytest

from faftemplate_lib.placeholders import (
    build_replacements,
    detect_variant,
    find_placeholders,
    find_placeholders_in_string,
    group_placeholders,
    include_reference,
    normalize_key,
    strip_case_marker,
    token_variant,
)
from faftemplate_lib.resolver import build_lookup, list_templates

# =============================================================================
# Tokens in strings
# =============================================================================


class TestFindInString:
    def test_finds_tokens(self):
        assert find_placeholders_in_string("class __NameCase__ extends __base__") == {
            "__NameCase__",
            "__base__",
        }

    def test_include_token_excluded(self):
        assert find_placeholders_in_string("__INCLUDE__(parts)") == set()

    def test_tokens_inside_include_reference_found(self):
        assert find_placeholders_in_string("__INCLUDE__(__kind__)") == {"__kind__"}

    def test_ignore_list(self):
        assert find_placeholders_in_string("__init__ __name__", ignore={"__init__"}) == {"__name__"}

    def test_no_tokens(self):
        assert find_placeholders_in_string("plain _text_ here") == set()

    def test_duplicates_collapse(self):
        assert find_placeholders_in_string("__a__ and __a__") == {"__a__"}


class TestIncludeReference:
    def test_reference(self):
        assert include_reference("__INCLUDE__(common)") == "common"
        assert include_reference("__INCLUDE__((common))") == "(common)"

    def test_not_include(self):
        assert include_reference("__name__") is None
        assert include_reference("x__INCLUDE__(common)") is None


# =============================================================================
# Directory scan
# =============================================================================


class TestFindPlaceholders:
    def test_names_and_contents(self, make_tree):
        root = make_tree(
            "t",
            {
                "__name__": {"__Name__.py": "VALUE = '__NAME_CASE__'\n"},
                "static.txt": "no tokens",
            },
        )
        assert find_placeholders(root) == {"__name__", "__Name__", "__NAME_CASE__"}

    def test_binary_content_skipped_but_name_scanned(self, make_tree):
        root = make_tree("t", {"__logo__.png": b"\x89PNG\r\n\x1a\n\xff__hidden__\xfe"})
        assert find_placeholders(root) == {"__logo__"}

    def test_missing_dir_is_empty(self, tmp_path: Path):
        assert find_placeholders(tmp_path / "nope") == set()

    def test_follows_resolvable_include(self, make_tree, tmp_path: Path):
        roots = [make_tree("templates", {
            "app": {"__INCLUDE__(common)": {}, "main.py": "__app__"},
            "common": {"README.md": "__title__"},
        })]
        lookup = build_lookup(list_templates(roots))
        assert find_placeholders(roots[0] / "app", roots, lookup) == {"__app__", "__title__"}

    def test_include_directory_children_not_scanned(self, make_tree):
        root = make_tree("t", {"__INCLUDE__(missing)": {"stray.txt": "__stray__"}})
        assert find_placeholders(root) == set()

    def test_cyclic_includes_terminate(self, make_tree):
        roots = [make_tree("templates", {
            "a": {"__INCLUDE__(b)": {}, "a.txt": "__alpha__"},
            "b": {"__INCLUDE__(a)": {}, "b.txt": "__beta__"},
        })]
        lookup = build_lookup(list_templates(roots))
        assert find_placeholders(roots[0] / "a", roots, lookup) == {"__alpha__", "__beta__"}

    def test_ignore(self, make_tree):
        root = make_tree("t", {"pkg": {"__init__.py": "__name__ = 1"}})
        assert find_placeholders(root, ignore=["__init__"]) == {"__name__"}

    def test_placeholder_include_deferred(self, make_tree):
        roots = [make_tree("templates", {
            "svc": {"__INCLUDE__(__kind__)": {}, "__INCLUDE__(later)": {}, "main.py": "__app__"},
            "common": {"README.md": "__title__"},
        })]
        lookup = build_lookup(list_templates(roots))
        pending: list[str] = []

        found = find_placeholders(roots[0] / "svc", roots, lookup, pending=pending)

        assert found == {"__kind__", "__app__"}
        assert pending == ["__kind__", "later"]

    def test_shared_visited_scans_once(self, make_tree):
        roots = [make_tree("templates", {"common": {"README.md": "__title__"}})]
        visited: set[str] = set()
        assert find_placeholders(roots[0] / "common", visited=visited) == {"__title__"}
        assert find_placeholders(roots[0] / "common", visited=visited) == set()


# =============================================================================
# Normalization / grouping
# =============================================================================


class TestNormalizeKey:
    @pytest.mark.parametrize(
        "token",
        [
            "__name__", "__Name__", "__NAME__", "__NameCase__", "__NAME_CASE__",
            "__name-case__", "__nameCase__", "__nameCASE__",
        ],
    )
    def test_family_of_name(self, token):
        assert normalize_key(token) == "name"

    def test_separators_removed(self):
        assert normalize_key("__my_thing__") == "mything"
        assert normalize_key("__my-thing__") == "mything"
        assert normalize_key("__MyThing__") == "mything"

    def test_case_word_not_a_marker(self):
        assert normalize_key("__showcase__") == "showcase"
        assert normalize_key("__case__") == "case"
        assert normalize_key("__CASE__") == "case"


class TestStripCaseMarker:
    def test_markers(self):
        assert strip_case_marker("NAME_CASE") == "NAME"
        assert strip_case_marker("NameCase") == "Name"
        assert strip_case_marker("NAMECASE") == "NAME"
        assert strip_case_marker("my_thing-case") == "my_thing"

    def test_upper_marker_after_any_letter(self):
        assert strip_case_marker("nameCASE") == "name"
        assert strip_case_marker("myThingCASE") == "myThing"

    def test_nothing_left_keeps_marker(self):
        assert strip_case_marker("_case") == "_case"


class TestGroupPlaceholders:
    def test_partition(self):
        tokens = {"__name__", "__NameCase__", "__NAME_CASE__", "__owner__", "__Owner__", "__x-y__"}
        groups = group_placeholders(tokens)

        assert groups == {
            "name": {"__name__", "__NameCase__", "__NAME_CASE__"},
            "owner": {"__owner__", "__Owner__"},
            "xy": {"__x-y__"},
        }
        flattened = [t for ts in groups.values() for t in ts]
        assert sorted(flattened) == sorted(tokens)

    def test_empty(self):
        assert group_placeholders(set()) == {}


# =============================================================================
# Variant detection
# =============================================================================


class TestDetectVariant:
    @pytest.mark.parametrize(
        "inner, expected",
        [
            ("my-thing", "kebab"),
            ("My-Thing", "kebab"),
            ("my_thing", "snake"),
            ("MY_THING", "snake"),
            ("NAME", "upper"),
            ("NAME2", "upper"),
            ("123", "upper"),
            ("name", "lower"),
            ("name2", "lower"),
            ("myThing", "camel"),
            ("naMe", "camel"),
            ("MyThing", "pascal"),
            ("Name", "pascal"),
            ("2Fa", "pascal"),
            ("", "pascal"),
        ],
    )
    def test_rules(self, inner, expected):
        assert detect_variant(inner) == expected

    @pytest.mark.parametrize(
        "token, expected",
        [
            ("__NAME_CASE__", "upper"),
            ("__NameCase__", "pascal"),
            ("__nameCase__", "lower"),
            ("__nameCASE__", "lower"),
            ("__my_thing_case__", "snake"),
            ("__name__", "lower"),
        ],
    )
    def test_token_variant_ignores_marker(self, token, expected):
        assert token_variant(token) == expected


class TestBuildReplacements:
    def test_example(self):
        groups = {"name": {"__name__", "__NameCase__", "__NAME_CASE__", "__name-x__"}}
        repl = build_replacements(groups, {"name": "my thing"})
        assert repl == {
            "__name__": "mything",
            "__NameCase__": "MyThing",
            "__NAME_CASE__": "MYTHING",
            "__name-x__": "my-thing",
        }

    def test_total_over_tokens(self):
        groups = {"a": {"__a__"}, "b": {"__B__"}}
        repl = build_replacements(groups, {"a": "x"})
        assert set(repl) == {"__a__", "__B__"}
        assert repl["__B__"] == ""
