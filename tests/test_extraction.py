"""Tests for page threshold extraction heuristics."""

from __future__ import annotations

import json

import pytest

from threshold_tracker.sources.extraction import (
    extract_figures,
    extract_twaps,
    figures_from_next_data,
    find_in_object,
    find_percentages,
    loose_threshold,
    parse_html,
    reconcile_threshold,
    threshold_from_context,
    threshold_from_scripts,
)

PADDING = " lorem " * 60


class TestNextData:
    def test_find_in_object_nested(self):
        blob = {"props": {"items": [{"x": 1}, {"proposal": {"threshold": 4.2}}]}}
        assert find_in_object(blob, "proposal") == {"threshold": 4.2}
        assert find_in_object(blob, "missing") is None

    def test_threshold_and_prices(self):
        blob = {"props": {"pageProps": {"proposal": {"threshold": "4.5", "passPrice": 1.1, "failPrice": 1.0}}}}
        figures = figures_from_next_data(blob)
        assert figures.threshold == 4.5
        assert figures.pass_price == 1.1
        assert figures.fail_price == 1.0
        assert figures.method == "next_data"

    def test_details_fallback(self):
        blob = {"props": {"proposalData": {"details": {"threshold_percent": 2.25, "pass_price": 1.5}}}}
        figures = figures_from_next_data(blob)
        assert figures.threshold == 2.25
        assert figures.pass_price == 1.5

    def test_no_proposal_data(self):
        figures = figures_from_next_data({"props": {"other": 1}})
        assert figures.threshold is None
        assert figures.method == ""


class TestVisibleText:
    def test_find_percentages_with_context(self):
        matches = find_percentages("The market is APPROVED +5.51% now")
        assert len(matches) == 1
        assert matches[0].value == 5.51
        assert "approved" in matches[0].context

    def test_integer_percent_not_matched(self):
        assert find_percentages("up 5% today") == []

    def test_approved_preferred_over_pass_threshold(self):
        text = "Pass threshold 3.00%" + PADDING + "APPROVED +5.51%"
        assert threshold_from_context(find_percentages(text)) == 5.51

    def test_pass_threshold_when_no_approved(self):
        text = "Pass threshold 3.00%" + PADDING + "volume 12.50%"
        assert threshold_from_context(find_percentages(text)) == 3.00

    def test_negative_values_rejected(self):
        assert threshold_from_context(find_percentages("approved -4.00%")) is None

    def test_out_of_range_rejected(self):
        assert threshold_from_context(find_percentages("approved 250.00%")) is None

    def test_loose_threshold(self):
        assert loose_threshold("threshold sits at 1.75%") == 1.75
        assert loose_threshold("pass and fail both 1.75%") is None

    def test_extract_twaps(self):
        assert extract_twaps("Approve TWAP $1.2000 | Reject TWAP $0.9000") == (1.2, 0.9)
        assert extract_twaps("nothing here") == (None, None)


class TestParseHtml:
    def test_splits_text_data_and_scripts(self):
        blob = {"props": {"pageProps": {"proposal": {"threshold": 1.5}}}}
        html = (
            "<html><head><style>.x{}</style></head><body>"
            "<p>Hello <b>world</b></p>"
            f'<script id="__NEXT_DATA__" type="application/json">{json.dumps(blob)}</script>'
            "<script>window.x = 1</script>"
            "</body></html>"
        )
        parsed = parse_html(html)
        assert parsed.text == "Hello world"
        assert parsed.next_data == blob
        assert len(parsed.scripts) == 2

    def test_invalid_next_data(self):
        parsed = parse_html('<script id="__NEXT_DATA__">{not json</script><p>x</p>')
        assert parsed.next_data is None
        assert parsed.text == "x"

    def test_threshold_from_scripts(self):
        assert threshold_from_scripts(('var a = {"threshold": 2.5}',)) == 2.5
        assert threshold_from_scripts(("var a = 1",)) is None


class TestReconcile:
    def test_prices_override_disagreeing_text(self):
        value, from_prices = reconcile_threshold(10.0, 1.2, 0.9, 0.1)
        assert value == pytest.approx(33.3333333)
        assert from_prices is True

    def test_text_kept_when_close(self):
        assert reconcile_threshold(33.30, 1.2, 0.9, 0.1) == (33.30, False)

    def test_no_prices(self):
        assert reconcile_threshold(5.0, None, 0.9, 0.1) == (5.0, False)
        assert reconcile_threshold(5.0, 1.2, 0.0, 0.1) == (5.0, False)


class TestExtractFigures:
    def test_next_data_threshold_wins(self):
        blob = {"props": {"pageProps": {"proposal": {"threshold": 4.0, "pass_price": 1.2, "fail_price": 0.9}}}}
        figures = extract_figures("approved +9.99%", blob)
        assert figures is not None
        # No reconciliation for the embedded value.
        assert figures.threshold == 4.0
        assert figures.pass_twap == 1.2
        assert figures.method == "next_data"

    def test_text_threshold_reconciled_against_twaps(self):
        text = "Approve TWAP $1.2000 Reject TWAP $0.9000" + PADDING + "APPROVED +10.00%"
        figures = extract_figures(text)
        assert figures is not None
        assert figures.threshold == pytest.approx(33.3333333)
        assert figures.pass_price == 1.2
        assert figures.fail_twap == 0.9
        assert figures.method == "prices"

    def test_text_threshold_agreeing_with_prices(self):
        text = "Approve TWAP $1.2000 Reject TWAP $0.9000" + PADDING + "APPROVED +33.30%"
        figures = extract_figures(text)
        assert figures is not None
        assert figures.threshold == 33.30
        assert figures.method == "text"

    def test_script_threshold(self):
        figures = extract_figures("no numbers", scripts=('{"threshold": 2.5}',), html="")
        assert figures is not None
        assert figures.threshold == 2.5
        assert figures.method == "script"

    def test_html_prices(self):
        html = '<script>{"pass_price": 1.1, "fail_price": 1.0}</script>'
        figures = extract_figures("nothing", html=html)
        assert figures is not None
        assert figures.threshold == pytest.approx(10.0)
        assert figures.method == "prices"

    def test_loose_fallback(self):
        figures = extract_figures("the threshold is 1.75%")
        assert figures is not None
        assert figures.threshold == 1.75
        assert figures.method == "loose_text"

    def test_nothing_found(self):
        assert extract_figures("just some text") is None
