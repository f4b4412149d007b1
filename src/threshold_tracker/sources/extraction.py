"""Heuristics for pulling threshold and prices out of a proposal page.

Shared by the rendered-page and static-HTML sources. Everything here is a
pure function over page text, the embedded ``__NEXT_DATA__`` blob and
(for static fetches) the raw HTML.

Order of preference:

1. a threshold in the embedded JSON data,
2. a ``"threshold": n`` literal inside any script tag (static HTML only),
3. a percentage whose surrounding text mentions "approved", then one
   mentioning "pass threshold",
4. the threshold computed from pass/fail prices, which also overrides a
   text-derived value when the two disagree by more than the tolerance,
5. any positive percentage near threshold/pass wording.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, replace
from typing import Any

from bs4 import BeautifulSoup

from threshold_tracker.pricing import compute_threshold, thresholds_disagree

PERCENT_PATTERN = re.compile(r"([+-]?\d+\.\d{2,})\s*%")
APPROVE_TWAP_PATTERN = re.compile(r"approve\s+twap\s*\$?(\d+\.\d+)", re.IGNORECASE)
REJECT_TWAP_PATTERN = re.compile(r"reject\s+twap\s*\$?(\d+\.\d+)", re.IGNORECASE)
SCRIPT_THRESHOLD_PATTERNS = (
    re.compile(r'"threshold"[^:]*:\s*([+-]?\d+\.?\d*)', re.IGNORECASE),
    re.compile(r'threshold["\s:]+([+-]?\d+\.?\d*)', re.IGNORECASE),
)
PASS_PRICE_PATTERN = re.compile(r'"pass[_-]?price"[^:]*:\s*(\d+\.?\d*)', re.IGNORECASE)
FAIL_PRICE_PATTERN = re.compile(r'"fail[_-]?price"[^:]*:\s*(\d+\.?\d*)', re.IGNORECASE)

PROPOSAL_KEYS = ("proposal", "proposalData", "pageProps")
CONTEXT_RADIUS = 150
LOOSE_CONTEXT_RADIUS = 100


@dataclass(frozen=True)
class PercentMatch:
    value: float
    context: str


@dataclass(frozen=True)
class PageFigures:
    """Numbers recovered from a page; any field may be missing."""

    threshold: float | None = None
    pass_price: float | None = None
    fail_price: float | None = None
    pass_twap: float | None = None
    fail_twap: float | None = None
    method: str = ""


@dataclass(frozen=True)
class ParsedHtml:
    text: str
    next_data: dict | None
    scripts: tuple[str, ...]


# ── Embedded JSON ───────────────────────────────────────────────


def find_in_object(obj: Any, key: str) -> Any:
    """Depth-first search for *key* anywhere in a JSON structure."""
    if isinstance(obj, dict):
        if key in obj:
            return obj[key]
        children = obj.values()
    elif isinstance(obj, list):
        children = obj
    else:
        return None
    for child in children:
        found = find_in_object(child, key)
        if found is not None:
            return found
    return None


def locate_proposal_data(next_data: Any) -> dict | None:
    for key in PROPOSAL_KEYS:
        found = find_in_object(next_data, key)
        if found:
            return found if isinstance(found, dict) else None
    return None


def _as_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _first_number(data: dict, *keys: str) -> float | None:
    for key in keys:
        if data.get(key) is not None:
            return _as_float(data[key])
    return None


def figures_from_next_data(next_data: Any) -> PageFigures:
    data = locate_proposal_data(next_data)
    if data is None:
        return PageFigures()

    threshold = _first_number(data, "threshold", "threshold_percent")
    pass_price = _first_number(data, "pass_price", "passPrice")
    fail_price = _first_number(data, "fail_price", "failPrice")

    details = data.get("details")
    if threshold is None and isinstance(details, dict):
        threshold = _first_number(details, "threshold", "threshold_percent")
        pass_price = _first_number(details, "pass_price", "passPrice") or pass_price
        fail_price = _first_number(details, "fail_price", "failPrice") or fail_price

    return PageFigures(
        threshold=threshold,
        pass_price=pass_price,
        fail_price=fail_price,
        method="next_data" if threshold is not None else "",
    )


# ── Visible text ────────────────────────────────────────────────


def is_threshold_candidate(value: float) -> bool:
    return -100 <= value <= 100 and abs(value) > 0.01


def find_percentages(text: str, radius: int = CONTEXT_RADIUS) -> list[PercentMatch]:
    """Every percentage-looking token with its lower-cased surroundings."""
    matches: list[PercentMatch] = []
    for m in PERCENT_PATTERN.finditer(text):
        start = max(0, m.start() - radius)
        end = min(len(text), m.end() + radius)
        matches.append(PercentMatch(value=float(m.group(1)), context=text[start:end].lower()))
    return matches


def threshold_from_context(matches: list[PercentMatch]) -> float | None:
    """Positive percentage labelled "approved", else one near "pass threshold"."""
    candidates = [m for m in matches if is_threshold_candidate(m.value) and m.value > 0]
    for phrase in ("approved", "pass threshold"):
        for match in candidates:
            if phrase in match.context:
                return match.value
    return None


def loose_threshold(text: str) -> float | None:
    for match in find_percentages(text, radius=LOOSE_CONTEXT_RADIUS):
        if not is_threshold_candidate(match.value) or match.value <= 0:
            continue
        ctx = match.context
        if "threshold" in ctx or ("pass" in ctx and "fail" not in ctx):
            return match.value
    return None


def extract_twaps(text: str) -> tuple[float | None, float | None]:
    """Return (approve_twap, reject_twap) from "Approve TWAP $x" wording."""
    approve = APPROVE_TWAP_PATTERN.search(text)
    reject = REJECT_TWAP_PATTERN.search(text)
    return (
        float(approve.group(1)) if approve else None,
        float(reject.group(1)) if reject else None,
    )


# ── Raw HTML ────────────────────────────────────────────────────


def parse_html(html: str) -> ParsedHtml:
    """Split a static page into visible text, the data blob and script bodies."""
    soup = BeautifulSoup(html, "html.parser")

    next_data: dict | None = None
    tag = soup.find("script", id="__NEXT_DATA__")
    if tag is not None and tag.string:
        try:
            loaded = json.loads(tag.string)
        except ValueError:
            loaded = None
        if isinstance(loaded, dict):
            next_data = loaded

    scripts = tuple(s.string or "" for s in soup.find_all("script"))
    for hidden in soup(["script", "style", "noscript"]):
        hidden.decompose()

    return ParsedHtml(text=soup.get_text(" ", strip=True), next_data=next_data, scripts=scripts)


def threshold_from_scripts(scripts: tuple[str, ...]) -> float | None:
    for body in scripts:
        for pattern in SCRIPT_THRESHOLD_PATTERNS:
            m = pattern.search(body)
            if m:
                return _as_float(m.group(1))
    return None


def prices_from_html(html: str) -> tuple[float | None, float | None]:
    pass_match = PASS_PRICE_PATTERN.search(html)
    fail_match = FAIL_PRICE_PATTERN.search(html)
    return (
        float(pass_match.group(1)) if pass_match else None,
        float(fail_match.group(1)) if fail_match else None,
    )


# ── Combination ─────────────────────────────────────────────────


def reconcile_threshold(
    text_threshold: float | None,
    pass_price: float | None,
    fail_price: float | None,
    tolerance: float,
) -> tuple[float | None, bool]:
    """Prefer price arithmetic over a text reading that disagrees with it.

    Returns (threshold, derived_from_prices).
    """
    if pass_price is None or fail_price is None or fail_price <= 0:
        return text_threshold, False
    computed = compute_threshold(pass_price, fail_price)
    if text_threshold is None or thresholds_disagree(text_threshold, computed, tolerance):
        return computed, True
    return text_threshold, False


def extract_figures(
    text: str,
    next_data: dict | None = None,
    *,
    scripts: tuple[str, ...] = (),
    html: str | None = None,
    tolerance: float = 0.1,
) -> PageFigures | None:
    """Run the full heuristic chain; None if no threshold could be found."""
    figures = figures_from_next_data(next_data) if next_data else PageFigures()
    if figures.threshold is not None:
        return replace(
            figures,
            pass_twap=figures.pass_price,
            fail_twap=figures.fail_price,
        )

    pass_price, fail_price = figures.pass_price, figures.fail_price
    threshold: float | None = None
    method = ""

    if scripts:
        threshold = threshold_from_scripts(scripts)
        method = "script" if threshold is not None else ""
    if html is not None:
        html_pass, html_fail = prices_from_html(html)
        pass_price = pass_price if pass_price is not None else html_pass
        fail_price = fail_price if fail_price is not None else html_fail

    approve_twap, reject_twap = extract_twaps(text)
    pass_price = pass_price if pass_price is not None else approve_twap
    fail_price = fail_price if fail_price is not None else reject_twap

    if threshold is None:
        threshold = threshold_from_context(find_percentages(text))
        method = "text" if threshold is not None else ""

    threshold, from_prices = reconcile_threshold(threshold, pass_price, fail_price, tolerance)
    if from_prices:
        method = "prices"

    if threshold is None:
        threshold = loose_threshold(text)
        method = "loose_text"
    if threshold is None:
        return None

    return PageFigures(
        threshold=threshold,
        pass_price=pass_price,
        fail_price=fail_price,
        pass_twap=approve_twap if approve_twap is not None else pass_price,
        fail_twap=reject_twap if reject_twap is not None else fail_price,
        method=method,
    )
