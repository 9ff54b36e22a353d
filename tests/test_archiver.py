"""Integration tests for the per-entry pipeline and the batch supervisor."""

import os
from dataclasses import replace

import pytest

from conftest import BASE_URL, FakeSession, add_entry_assets, detail_page
from gryffs_archiver.archive.archiver import CatalogArchiver, EntryArchiver
from gryffs_archiver.archive.listing import EntryReference
from gryffs_archiver.errors import FetchError, InvalidIdentifier, ParseError, SessionNotReadyError
from gryffs_archiver.utils.constants import LISTING_LINK_SELECTOR, PROFILE_LINK_SELECTOR
from gryffs_archiver.utils.paths import read_json


def make_entry(entry_id):
    return EntryReference(id=entry_id, url=f"{BASE_URL}/gryff.php?id={entry_id}")


@pytest.mark.asyncio
async def test_archive_entry_end_to_end(fake_session, archive_config, entry):
    description = (
        '<p>Best gryff</p>'
        '<img src="https://img.example/one.png">'
        '<img src="https://img.example/two.jpg">'
        '<img src="https://img.example/three.gif">'
    )
    fake_session.pages[entry.url] = detail_page(description=description)
    add_entry_assets(fake_session)
    fake_session.add_asset("https://img.example/one.png", b"1")
    fake_session.add_asset("https://img.example/three.gif", b"3")

    outcome = await EntryArchiver(archive_config, fake_session).archive(entry)

    assert outcome.ok
    assert outcome.images_downloaded == 2
    assert outcome.images_failed == ["https://img.example/two.jpg"]

    manifest = read_json(os.path.join(outcome.path, "info.json"))
    assert manifest['id'] == "5193"
    assert manifest['name'] == "Luna"
    assert manifest['species'] == "Fire"
    assert manifest['level'] == 12
    assert manifest['exp'] == 3450
    assert manifest['totalBattles'] == 17
    assert manifest['huntingExp'] == 220
    assert manifest['descriptionHtml'] == (
        '<p>Best gryff</p>'
        '<img src="./desc_1.png">'
        '<img src="https://img.example/two.jpg">'
        '<img src="./desc_2.gif">'
    )
    assert sorted(os.listdir(outcome.path)) == ["desc_1.png", "desc_2.gif", "image.png", "info.json"]


@pytest.mark.asyncio
async def test_manifest_keeps_raw_description_markup(fake_session, archive_config, entry):
    """Test void tags and entities are stored as the page serves them."""
    fake_session.pages[entry.url] = detail_page(
        description='Line one<br>Two&nbsp;words <img src="https://img.example/a.png">'
    )
    add_entry_assets(fake_session)
    fake_session.add_asset("https://img.example/a.png", b"a")

    outcome = await EntryArchiver(archive_config, fake_session).archive(entry)

    manifest = read_json(os.path.join(outcome.path, "info.json"))
    assert manifest['descriptionHtml'] == 'Line one<br>Two&nbsp;words <img src="./desc_1.png">'


@pytest.mark.asyncio
async def test_missing_stats_block_writes_no_manifest(fake_session, archive_config, entry):
    fake_session.pages[entry.url] = detail_page(stats=None)
    add_entry_assets(fake_session)

    with pytest.raises(ParseError):
        await EntryArchiver(archive_config, fake_session).archive(entry)

    entry_dir = os.path.join(archive_config.entries_root, entry.id)
    assert not os.path.exists(os.path.join(entry_dir, "info.json"))
    assert fake_session.requested == []


@pytest.mark.asyncio
async def test_invalid_identifier_fails_before_navigation(fake_session, archive_config):
    bad = EntryReference(id="abc", url=f"{BASE_URL}/gryff.php?id=abc")

    with pytest.raises(InvalidIdentifier):
        await EntryArchiver(archive_config, fake_session).archive(bad)

    assert fake_session.navigated == []


@pytest.mark.asyncio
async def test_padded_identifier_is_rejected(fake_session, archive_config):
    padded = EntryReference(id=" 5193", url=f"{BASE_URL}/gryff.php?id=5193")
    fake_session.pages[padded.url] = detail_page()
    add_entry_assets(fake_session)

    with pytest.raises(InvalidIdentifier):
        await EntryArchiver(archive_config, fake_session).archive(padded)

    assert fake_session.navigated == []
    assert not os.path.exists(os.path.join(archive_config.entries_root, " 5193"))


@pytest.mark.asyncio
async def test_image_counts_are_reported_per_entry(fake_session, archive_config):
    """Test a downloader shared across the batch does not leak counts between entries."""
    first, second = make_entry("1"), make_entry("2")
    fake_session.pages[first.url] = detail_page(
        description='<img src="https://img.example/a.png"><img src="https://img.example/gone.png">'
    )
    fake_session.pages[second.url] = detail_page(description='<img src="https://img.example/b.png">')
    fake_session.add_asset("https://img.example/a.png", b"a")
    fake_session.add_asset("https://img.example/b.png", b"b")
    for entry_id in ("1", "2"):
        add_entry_assets(fake_session, entry_id)

    result = await CatalogArchiver(archive_config, fake_session).archive_entries([first, second])

    assert [o.images_downloaded for o in result.outcomes] == [1, 1]
    assert [o.images_failed for o in result.outcomes] == [["https://img.example/gone.png"], []]


@pytest.mark.asyncio
async def test_missing_primary_image_is_fatal(fake_session, archive_config, entry):
    fake_session.pages[entry.url] = detail_page()

    with pytest.raises(FetchError):
        await EntryArchiver(archive_config, fake_session).archive(entry)


@pytest.mark.asyncio
async def test_entry_archiver_requires_confirmed_login(archive_config, entry):
    with pytest.raises(SessionNotReadyError):
        await EntryArchiver(archive_config, FakeSession(ready=False)).archive(entry)


@pytest.mark.asyncio
async def test_batch_isolates_failures(fake_session, archive_config):
    """Test one broken entry does not stop the others."""
    good, broken, also_good = make_entry("1"), make_entry("2"), make_entry("3")
    fake_session.pages[good.url] = detail_page(title="Gryff - One")
    fake_session.pages[broken.url] = detail_page(hunting=None)
    fake_session.pages[also_good.url] = detail_page(title="Gryff - Three")
    for entry_id in ("1", "2", "3"):
        add_entry_assets(fake_session, entry_id)

    result = await CatalogArchiver(archive_config, fake_session).archive_entries(
        [good, broken, also_good]
    )

    assert [o.entry.id for o in result.archived] == ["1", "3"]
    assert [o.entry.id for o in result.failed] == ["2"]
    assert result.failed[0].error_type == "ParseError"

    errors = read_json(os.path.join(archive_config.archive_root, "errors.json"))
    assert errors == [{
        'id': "2",
        'url': broken.url,
        'error': result.failed[0].error,
        'type': "ParseError",
    }]


@pytest.mark.asyncio
async def test_batch_without_failures_writes_no_error_log(fake_session, archive_config, entry):
    fake_session.pages[entry.url] = detail_page()
    add_entry_assets(fake_session)

    result = await CatalogArchiver(archive_config, fake_session).archive_entries([entry])

    assert len(result.archived) == 1
    assert not os.path.exists(os.path.join(archive_config.archive_root, "errors.json"))


@pytest.mark.asyncio
async def test_archive_all_uses_listing_and_writes_index(fake_session, archive_config):
    fake_session.selector_results[PROFILE_LINK_SELECTOR] = f"{BASE_URL}/profile.php?id=42"
    fake_session.selector_results[LISTING_LINK_SELECTOR] = [
        f"{BASE_URL}/gryff.php?id=1",
        f"{BASE_URL}/gryff.php?id=2",
    ]
    for entry_id in ("1", "2"):
        fake_session.pages[f"{BASE_URL}/gryff.php?id={entry_id}"] = detail_page()
        add_entry_assets(fake_session, entry_id)

    result = await CatalogArchiver(archive_config, fake_session).archive_all()

    assert result.user_id == "42"
    assert [o.entry.id for o in result.archived] == ["1", "2"]

    index = read_json(archive_config.listing_index_path)
    assert index['userId'] == "42"
    assert index['total'] == 2
    assert [g['id'] for g in index['gryffs']] == ["1", "2"]


@pytest.mark.asyncio
async def test_archive_all_respects_limit(fake_session, archive_config):
    fake_session.selector_results[LISTING_LINK_SELECTOR] = [
        f"{BASE_URL}/gryff.php?id=1",
        f"{BASE_URL}/gryff.php?id=2",
    ]
    fake_session.pages[f"{BASE_URL}/gryff.php?id=1"] = detail_page()
    add_entry_assets(fake_session, "1")
    config = replace(archive_config, limit=1)

    result = await CatalogArchiver(config, fake_session).archive_all(user_id="42")

    assert [o.entry.id for o in result.outcomes] == ["1"]


@pytest.mark.asyncio
async def test_archive_all_with_explicit_ids_skips_listing(fake_session, archive_config):
    fake_session.pages[f"{BASE_URL}/gryff.php?id=5193"] = detail_page()
    add_entry_assets(fake_session)
    config = replace(archive_config, only_ids=["5193"])

    result = await CatalogArchiver(config, fake_session).archive_all()

    assert fake_session.navigated == [f"{BASE_URL}/gryff.php?id=5193"]
    assert [o.entry.id for o in result.archived] == ["5193"]
    assert not os.path.exists(config.listing_index_path)


@pytest.mark.asyncio
async def test_archive_all_requires_confirmed_login(archive_config):
    with pytest.raises(SessionNotReadyError):
        await CatalogArchiver(archive_config, FakeSession(ready=False)).archive_all()
