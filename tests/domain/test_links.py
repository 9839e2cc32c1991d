"""Tests for wikilink extraction."""

from __future__ import annotations

from kbctl.domain.links import WikiLink, extract_wikilinks


class TestExtractWikilinks:
    def test_single_link(self) -> None:
        links = extract_wikilinks("This relates to [[avl-tree]].")
        assert links == [WikiLink(target="avl-tree", line=1)]

    def test_display_heading_and_embed(self) -> None:
        body = "See [[heap|heaps]], [[graph#Traversal]] and ![[diagram]]."
        links = extract_wikilinks(body)
        assert [lnk.target for lnk in links] == ["heap", "graph", "diagram"]
        assert links[0].display == "heaps"
        assert links[1].heading == "Traversal"
        assert links[2].embed is True

    def test_strips_whitespace(self) -> None:
        links = extract_wikilinks("[[ Padded | Display ]]")
        assert links[0].target == "Padded"
        assert links[0].display == "Display"

    def test_empty_target_ignored(self) -> None:
        assert extract_wikilinks("[[#Only a heading]] and [[ ]]") == []

    def test_ignores_single_brackets(self) -> None:
        assert extract_wikilinks("This has [single brackets].") == []

    def test_skips_fenced_and_inline_code(self) -> None:
        body = "Real [[a]].\n```\n[[b]]\n```\nInline `[[c]]` and [[d]]."
        assert [lnk.target for lnk in extract_wikilinks(body)] == ["a", "d"]

    def test_line_numbers_use_offset(self) -> None:
        body = "first\n\nthird [[x]]"
        links = extract_wikilinks(body, line_offset=5)
        assert links[0].line == 8

    def test_path_form_target(self) -> None:
        links = extract_wikilinks("[[data-structures/heap]]")
        assert links[0].target == "data-structures/heap"
