"""Unit tests for the listing enumerator."""

import pytest

from conftest import BASE_URL, FakeSession
from gryffs_archiver.archive.listing import EntryReference, ListingEnumerator
from gryffs_archiver.errors import ParseError, SessionNotReadyError
from gryffs_archiver.utils.constants import LISTING_LINK_SELECTOR, PROFILE_LINK_SELECTOR


@pytest.mark.asyncio
async def test_list_entries_navigates_to_all_boxes(fake_session, archive_config):
    fake_session.selector_results[LISTING_LINK_SELECTOR] = [
        f"{BASE_URL}/gryff.php?id=5193",
        f"{BASE_URL}/gryff.php?id=17",
    ]
    listing = ListingEnumerator(fake_session, archive_config)

    entries = await listing.list_entries("42")

    assert fake_session.navigated == [f"{BASE_URL}/ghf.php?id=42&box=-1"]
    assert entries == [
        EntryReference(id="5193", url=f"{BASE_URL}/gryff.php?id=5193"),
        EntryReference(id="17", url=f"{BASE_URL}/gryff.php?id=17"),
    ]


@pytest.mark.asyncio
async def test_list_entries_deduplicates_and_skips_bad_links(fake_session, archive_config):
    fake_session.selector_results[LISTING_LINK_SELECTOR] = [
        f"{BASE_URL}/gryff.php?id=5",
        f"{BASE_URL}/gryff.php?id=abc",
        f"{BASE_URL}/gryff.php?id=5&tab=info",
        f"{BASE_URL}/gryff.php?id=6",
    ]
    listing = ListingEnumerator(fake_session, archive_config)

    entries = await listing.list_entries("42")

    assert [e.id for e in entries] == ["5", "6"]


@pytest.mark.asyncio
async def test_list_entries_empty(fake_session, archive_config):
    listing = ListingEnumerator(fake_session, archive_config)

    assert await listing.list_entries("42") == []


@pytest.mark.asyncio
async def test_current_user_id(fake_session, archive_config):
    fake_session.selector_results[PROFILE_LINK_SELECTOR] = f"{BASE_URL}/profile.php?id=314"
    listing = ListingEnumerator(fake_session, archive_config)

    assert await listing.current_user_id() == "314"


@pytest.mark.asyncio
async def test_current_user_id_missing_raises(fake_session, archive_config):
    listing = ListingEnumerator(fake_session, archive_config)

    with pytest.raises(ParseError) as exc_info:
        await listing.current_user_id()

    assert exc_info.value.field == "userId"


@pytest.mark.asyncio
async def test_listing_requires_confirmed_login(archive_config):
    listing = ListingEnumerator(FakeSession(ready=False), archive_config)

    with pytest.raises(SessionNotReadyError):
        await listing.list_entries("42")
