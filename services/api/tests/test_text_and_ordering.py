"""
Tests for plain-text excerpts and the position helpers.
"""
from types import SimpleNamespace

import pytest
from fastapi import HTTPException

from core.ordering import CARD_POSITION_STEP, apply_order, renumber
from core.text import note_excerpt, strip_html
from models.converters import progress_percent


def _items(*ids):
    return [SimpleNamespace(id=i, position=None) for i in ids]


class TestStripHtml:

    def test_tags_and_style_removed(self):
        html = "<style>p{color:red}</style><p>Hello&nbsp;<b>world</b></p>"
        assert strip_html(html) == "Hello world"

    def test_whitespace_collapsed(self):
        assert strip_html("<div>a</div>\n\n<div>  b </div>") == "a b"

    def test_empty(self):
        assert strip_html(None) == ""
        assert strip_html("") == ""


class TestNoteExcerpt:

    def test_short_text_untouched(self):
        assert note_excerpt("<p>short</p>") == "short"

    def test_long_text_truncated(self):
        out = note_excerpt("<p>" + "x" * 300 + "</p>", limit=20)
        assert len(out) == 20
        assert out.endswith("…")


class TestApplyOrder:

    def test_listed_first_rest_kept(self):
        items = _items("a", "b", "c", "d")
        out = apply_order(items, ["c", "a"], what="card")
        assert [i.id for i in out] == ["c", "a", "b", "d"]

    def test_unknown_id_rejected(self):
        with pytest.raises(HTTPException) as exc:
            apply_order(_items("a", "b"), ["a", "zzz"], what="card")
        assert exc.value.status_code == 400
        assert "zzz" in exc.value.detail


class TestRenumber:

    def test_contiguous(self):
        items = renumber(_items("a", "b", "c"))
        assert [i.position for i in items] == [0, 1, 2]

    def test_card_step(self):
        items = renumber(_items("a", "b", "c"), CARD_POSITION_STEP)
        assert [i.position for i in items] == [0, 10, 20]


class TestProgress:

    def test_empty_checklist(self):
        assert progress_percent([]) == 0

    def test_partial(self):
        notes = [SimpleNamespace(done=True), SimpleNamespace(done=False), SimpleNamespace(done=False)]
        assert progress_percent(notes) == 33

    def test_half_rounds_up(self):
        one_of_eight = [SimpleNamespace(done=True)] + [SimpleNamespace(done=False)] * 7
        assert progress_percent(one_of_eight) == 13

        five_of_eight = [SimpleNamespace(done=True)] * 5 + [SimpleNamespace(done=False)] * 3
        assert progress_percent(five_of_eight) == 63

    def test_complete(self):
        notes = [SimpleNamespace(done=True), SimpleNamespace(done=True)]
        assert progress_percent(notes) == 100
