"""Shared pytest fixtures for all tests."""

from typing import Dict, List, Optional, Tuple

import pytest

from gryffs_archiver.archive.listing import EntryReference
from gryffs_archiver.archive.session import HttpResponse
from gryffs_archiver.config import ArchiveConfig
from gryffs_archiver.errors import SessionNotReadyError
from gryffs_archiver.utils.constants import DESCRIPTION_SELECTOR


BASE_URL = "https://gryffs.com"


def detail_page(
    title: str = "Gryff - Luna",
    separator: str = "Fire Gryff Level 12 (3450 exp)",
    stats: Optional[str] = "14 Wins / 3 Losses",
    hunting: Optional[str] = "220 Hunting Exp",
    description: Optional[str] = "<p>Hello <b>world</b></p>",
) -> str:
    """Build a detail page shaped like the catalog's markup."""
    parts = ['<html><head><title>Gryffs</title></head><body><div id="wrapper">']
    if title is not None:
        parts.append(f'<h1 class="page-title">{title}</h1>')
    parts.append(f'<div class="pageSeparator">{separator}</div>')
    parts.append('<div class="gryffStats">')
    if stats is not None:
        parts.append(f'<div class="battle">{stats}</div>')
    if hunting is not None:
        parts.append(f'<div class="hunting">{hunting}</div>')
    parts.append('</div>')
    if description is not None:
        parts.append(f'<div id="gryffsDesc">{description}</div>')
    parts.append('</div></body></html>')
    return "".join(parts)


DESCRIPTION_OPEN = '<div id="gryffsDesc">'
PAGE_CLOSE = "</div></div></body></html>"


def description_markup(page: str) -> Optional[str]:
    """Return the description exactly as detail_page() embedded it."""
    start = page.find(DESCRIPTION_OPEN)
    if start < 0:
        return None
    return page[start + len(DESCRIPTION_OPEN):page.rindex(PAGE_CLOSE)]


class FakeSession:
    """In-memory stand-in for CatalogSession."""

    def __init__(self, pages: Optional[Dict[str, str]] = None, ready: bool = True):
        self.pages = pages or {}
        self.assets: Dict[str, Tuple[int, bytes]] = {}
        self.selector_results: Dict[str, object] = {}
        self.navigated: List[str] = []
        self.requested: List[str] = []
        self.current_url = ""
        self._ready = ready

    @property
    def ready(self) -> bool:
        return self._ready

    def mark_ready(self) -> None:
        self._ready = True

    def require_ready(self) -> None:
        if not self._ready:
            raise SessionNotReadyError("not logged in")

    def add_asset(self, url: str, body: bytes = b"\x89PNG", status: int = 200) -> None:
        self.assets[url] = (status, body)

    async def navigate(self, url: str) -> None:
        self.navigated.append(url)
        self.current_url = url

    async def content(self) -> str:
        return self.pages[self.current_url]

    async def eval_on_selector(self, selector: str, expression: str):
        if selector in self.selector_results:
            return self.selector_results[selector]
        if selector == DESCRIPTION_SELECTOR:
            return description_markup(self.pages.get(self.current_url, ""))
        return None

    async def eval_on_selector_all(self, selector: str, expression: str):
        return self.selector_results.get(selector, [])

    async def authenticated_get(self, url: str) -> HttpResponse:
        self.requested.append(url)
        status, body = self.assets.get(url, (404, b""))
        reason = "OK" if status == 200 else "Not Found"
        return HttpResponse(url=url, status=status, reason=reason, body=body)


@pytest.fixture
def fake_session():
    """An authenticated fake session with no pages or assets."""
    return FakeSession()


@pytest.fixture
def archive_config(tmp_path):
    """Archive configuration rooted in a temporary directory."""
    return ArchiveConfig(archive_root=str(tmp_path / "archive"), base_url=BASE_URL, delay=0)


@pytest.fixture
def entry():
    """The gryff used across pipeline tests."""
    return EntryReference(id="5193", url=f"{BASE_URL}/gryff.php?id=5193")


def add_entry_assets(session: FakeSession, entry_id: str = "5193") -> None:
    """Register the primary image and thumbnail of an entry."""
    bucket = int(entry_id) // 1000
    session.add_asset(f"{BASE_URL}/static/gryffs/{bucket}/{entry_id}.png", b"primary")
    session.add_asset(f"{BASE_URL}/static/gryffs/thumbs/{bucket}/{entry_id}.png", b"thumb")
