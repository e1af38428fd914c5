"""Unit tests for page slug derivation."""

from __future__ import annotations

import re

import pytest

from sitedesk.common.slug import page_slug, short_sha

_SLUG_SHAPE = re.compile(r"^[a-z0-9-]+$")


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("Landing Page", "landing-page"),
        ("LANDING PAGE", "landing-page"),
        ("landing   page", "landing-page"),
        ("landing page!!", "landing-page-"),
        ("  Nav  ", "-nav-"),
        ("Über uns", "-ber-uns"),
        ("2024 Roadmap", "2024-roadmap"),
    ],
)
def test_page_slug_replaces_runs_of_non_alphanumerics(name: str, expected: str) -> None:
    """Each maximal run outside [a-z0-9] becomes one hyphen; edges are kept."""
    assert page_slug(name) == expected


@pytest.mark.parametrize(
    "name",
    ["a", "!", "   ", "日本語", "Ω≈ç√", "Mixed CASE / with_symbols & more", "-"],
)
def test_page_slug_is_total(name: str) -> None:
    """Every non-empty name yields a non-empty slug of [a-z0-9-]."""
    slug = page_slug(name)
    assert slug, f"slug of {name!r} should be non-empty"
    assert _SLUG_SHAPE.match(slug), f"slug {slug!r} has characters outside [a-z0-9-]"


def test_short_sha_keeps_seven_characters() -> None:
    """short_sha abbreviates like git's default."""
    assert short_sha("0123456789abcdef") == "0123456"
