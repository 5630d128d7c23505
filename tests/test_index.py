"""Tests for index building and self-name resolution."""

from __future__ import annotations

import pytest

from conftest import doc
from lazylinks.config import HeaderLevels, LinkerConfig
from lazylinks.index import EMPTY_INDEX, LinkIndex, build_index, self_names
from lazylinks.models import LinkTarget

HEADERS_ON = LinkerConfig(include_headers=True)


# ─────────────────────────────────────────────────────────────────────────────
# build_index
# ─────────────────────────────────────────────────────────────────────────────


class TestBuildIndex:
    """Tests for build_index."""

    def test_every_basename_indexed(self):
        """Each non-ignored document is reachable through its lowercased basename."""
        docs = [doc("Apple"), doc("Banana Bread"), doc("kiwi")]

        index = build_index(docs, LinkerConfig())

        for d in docs:
            target = index[d.basename.lower()]
            assert target.document_id == d.document_id
            assert target.actual_name == d.basename
            assert target.is_alias is False
            assert target.subpath is None

    def test_ignored_document_contributes_nothing(self):
        """ignore_linking removes the document entirely, basename included."""
        ignored = doc("Secret", aliases=["Hidden"], headings=[("Plans", 1)], ignore_linking=True)

        index = build_index([ignored, doc("Apple")], HEADERS_ON)

        assert set(index) == {"apple"}
        assert all(t.document_id != ignored.document_id for t in index.values())
        assert index.stats.ignored == 1
        assert index.stats.documents == 1

    def test_aliases_indexed(self):
        """String aliases map to their document with is_alias set."""
        index = build_index([doc("Apple", aliases=["Pomme", "Malus"])], LinkerConfig())

        assert index["pomme"] == LinkTarget(
            document_id="Apple.md", basename="Apple", is_alias=True, actual_name="Pomme"
        )
        assert index["malus"].actual_name == "Malus"
        assert index.stats.aliases == 2

    def test_scalar_alias_normalized(self):
        """A single alias string is treated as a one-element list."""
        index = build_index([doc("Apple", aliases="Pomme")], LinkerConfig())

        assert "pomme" in index

    @pytest.mark.parametrize("bad_alias", [42, None, {"name": "x"}, ["nested"], True])
    def test_non_string_alias_skipped(self, bad_alias):
        """Malformed alias values are skipped without error."""
        index = build_index([doc("Apple", aliases=["Pomme", bad_alias])], LinkerConfig())

        assert set(index) == {"apple", "pomme"}

    def test_headings_skipped_when_disabled(self):
        """Headings are not indexed unless include_headers is on."""
        index = build_index([doc("Business", headings=[("Staff", 1)])], LinkerConfig())

        assert "staff" not in index

    def test_heading_entry_has_subpath(self):
        """Indexed headings point at the section of their document."""
        index = build_index([doc("Business", headings=[("Staff", 2)])], HEADERS_ON)

        target = index["staff"]
        assert target.basename == "Business"
        assert target.actual_name == "Staff"
        assert target.subpath == "#Staff"
        assert target.is_alias is False
        assert index.stats.headers == 1

    def test_heading_levels_respected(self):
        """Only enabled heading levels are indexed."""
        config = LinkerConfig(include_headers=True, header_levels=HeaderLevels(h1=False, h4=True))
        d = doc("Notes", headings=[("Alpha", 1), ("Bravo", 2), ("Delta", 4), ("Echo", 5)])

        index = build_index([d], config)

        assert "alpha" not in index
        assert "bravo" in index
        assert "delta" in index
        assert "echo" not in index

    def test_short_headings_skipped(self):
        """Heading text shorter than min_match_length is not indexed."""
        config = LinkerConfig(include_headers=True, min_match_length=4)
        index = build_index([doc("Notes", headings=[("Abc", 1), ("Abcd", 1)])], config)

        assert "abc" not in index
        assert "abcd" in index

    def test_basename_wins_within_document(self):
        """The basename entry overrides a same-text heading or alias of its document."""
        d = doc("Apple", aliases=["apple"], headings=[("APPLE", 1)])

        index = build_index([d], HEADERS_ON)

        assert index["apple"].actual_name == "Apple"
        assert index["apple"].is_alias is False
        assert index["apple"].subpath is None

    def test_alias_wins_over_heading_within_document(self):
        """Aliases are inserted after headings."""
        d = doc("Fruit", aliases=["Citrus"], headings=[("Citrus", 1)])

        index = build_index([d], HEADERS_ON)

        assert index["citrus"].is_alias is True

    def test_later_document_overwrites(self):
        """Collisions across documents are last-write-wins in iteration order."""
        first = doc("Apple", document_id="a/Apple.md")
        second = doc("Apple", document_id="b/Apple.md")

        assert build_index([first, second], LinkerConfig())["apple"].document_id == "b/Apple.md"
        assert build_index([second, first], LinkerConfig())["apple"].document_id == "a/Apple.md"

    def test_later_alias_overwrites_earlier_basename(self):
        """A later document's alias replaces an earlier document's basename entry."""
        index = build_index([doc("Apple"), doc("Malus", aliases=["Apple"])], LinkerConfig())

        assert index["apple"].document_id == "Malus.md"
        assert index["apple"].is_alias is True

    def test_rebuild_is_idempotent(self):
        """Two builds from the same documents are equal key for key."""
        docs = [doc("Apple", aliases=["Pomme"], headings=[("Taste", 1)]), doc("Kiwi")]

        first = build_index(docs, HEADERS_ON)
        second = build_index(docs, HEADERS_ON)

        assert first is not second
        assert dict(first) == dict(second)

    def test_empty_input(self):
        index = build_index([], LinkerConfig())

        assert len(index) == 0
        assert not index


# ─────────────────────────────────────────────────────────────────────────────
# LinkIndex
# ─────────────────────────────────────────────────────────────────────────────


class TestLinkIndex:
    """Tests for the immutable index snapshot."""

    def test_read_only(self):
        """Snapshots cannot be modified in place."""
        index = build_index([doc("Apple")], LinkerConfig())

        with pytest.raises(TypeError):
            index["pear"] = index["apple"]  # type: ignore[index]

    def test_detached_from_source_dict(self):
        """Changing the dict used to create a snapshot does not affect it."""
        target = LinkTarget(document_id="a.md", basename="a", actual_name="a")
        entries = {"a": target}
        index = LinkIndex(entries)

        entries["b"] = target

        assert "b" not in index

    def test_empty_index(self):
        assert len(EMPTY_INDEX) == 0
        assert "anything" not in EMPTY_INDEX


# ─────────────────────────────────────────────────────────────────────────────
# self_names
# ─────────────────────────────────────────────────────────────────────────────


class TestSelfNames:
    """Tests for self-name resolution."""

    def test_collects_all_names(self):
        """Basename, aliases and headings are all lowercased self-names."""
        d = doc("Apple", aliases=["Pomme"], headings=[("Taste", 1), ("Deep Section", 6)])

        assert self_names(d) == {"apple", "pomme", "taste", "deep section"}

    def test_ignores_heading_levels_and_config(self):
        """Self-names include headings even of levels that are never indexed."""
        d = doc("Notes", headings=[("Appendix", 6)])

        assert "appendix" in self_names(d)

    def test_non_string_aliases_skipped(self):
        d = doc("Apple", aliases=[1, "Pomme", None])

        assert self_names(d) == {"apple", "pomme"}

    def test_ignored_document_still_has_self_names(self):
        """Self-names do not depend on the index."""
        d = doc("Secret", ignore_linking=True)

        assert self_names(d) == {"secret"}

    def test_no_document(self):
        assert self_names(None) == frozenset()
