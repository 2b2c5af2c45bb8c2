# app/connectors/listing/document.py
from __future__ import annotations

import json
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any

from bs4 import BeautifulSoup, Comment


@dataclass(frozen=True)
class PageDocument:
    """One fetched listing page, parsed once and shared by every strategy."""

    url: str
    html: str
    soup: BeautifulSoup = field(repr=False, compare=False)

    @classmethod
    def from_html(cls, url: str, html: str) -> "PageDocument":
        return cls(url=url, html=html, soup=BeautifulSoup(html, "lxml"))

    @cached_property
    def visible_text(self) -> str:
        """Page text a reader sees; <script>, <style> and <template> bodies and comments left out."""
        parts = (
            s for s in self.soup.find_all(string=True)
            if not isinstance(s, Comment)
            and s.parent is not None
            and s.parent.name not in ("script", "style", "template")
        )
        return " ".join(" ".join(parts).split())

    def script_json(self, **attrs: Any) -> list[Any]:
        """Decoded JSON bodies of <script> tags matching attrs; undecodable ones skipped."""
        out: list[Any] = []
        for tag in self.soup.find_all("script", attrs=attrs):
            raw = tag.string or tag.get_text() or ""
            if not raw.strip():
                continue
            try:
                out.append(json.loads(raw))
            except json.JSONDecodeError:
                continue
        return out

    def meta_content(self, *names: str) -> str | None:
        for name in names:
            tag = self.soup.find("meta", attrs={"name": name}) or self.soup.find("meta", attrs={"property": name})
            if tag is not None:
                content = (tag.get("content") or "").strip()
                if content:
                    return content
        return None
