from pathlib import Path

import pytest

from chalkraw.catalog.catalog import Catalog
from chalkraw.catalog.errors import RecordNotFoundError
from chalkraw.core.collection import Collection
from chalkraw.core.photo import ImageFormat, Photo


@pytest.fixture
def cat(tmp_path):
    with Catalog.open_or_create(tmp_path / "t.chalkraw", "t") as catalog:
        yield catalog


def _photo(path, hash_byte):
    return Photo(Path(path), bytes([hash_byte]) * 32, 100, 100, ImageFormat.JPEG)


def test_collections_roundtrip_membership_and_survive_reopen(tmp_path):
    path = tmp_path / "t.chalkraw"
    p1 = _photo("/x/a.jpg", 1)
    p2 = _photo("/x/b.jpg", 2)
    with Catalog.open_or_create(path, "t") as cat:
        cat.insert_photos([p1, p2])
        collection = cat.create_collection("  Downloads  ")
        cat.add_photos_to_collection(collection.id, [p1.id, p2.id])
        collection_id = collection.id

    with Catalog.open_or_create(path, "ignored") as cat:
        collections = cat.list_collections()
        assert len(collections) == 1
        assert collections[0].id == collection_id
        assert collections[0].name == "Downloads"
        members = sorted(cat.list_collection_photo_ids(collection_id))
        assert members == sorted([p1.id, p2.id])


def test_same_photo_can_belong_to_multiple_collections(cat):
    p = _photo("/x/a.jpg", 1)
    cat.insert_photo(p)
    first = cat.create_collection("First")
    second = cat.create_collection("Second")
    cat.add_photo_to_collection(first.id, p.id)
    cat.add_photo_to_collection(second.id, p.id)
    assert cat.list_collection_photo_ids(first.id) == [p.id]
    assert cat.list_collection_photo_ids(second.id) == [p.id]


def test_removing_photo_removes_collection_memberships(cat):
    p = _photo("/x/a.jpg", 1)
    cat.insert_photo(p)
    collection = cat.create_collection("Downloads")
    cat.add_photo_to_collection(collection.id, p.id)
    cat.remove_photo_with_edit(p.id)
    assert cat.list_collection_photo_ids(collection.id) == []


def test_adding_same_photo_twice_keeps_one_membership(cat):
    p = _photo("/x/a.jpg", 1)
    collection = cat.create_collection("Downloads")
    cat.add_photo_to_collection(collection.id, p.id)
    cat.add_photo_to_collection(collection.id, p.id)
    assert cat.list_collection_photo_ids(collection.id) == [p.id]


def test_remove_photo_from_collection_leaves_other_collections(cat):
    p = _photo("/x/a.jpg", 1)
    first = cat.create_collection("First")
    second = cat.create_collection("Second")
    cat.add_photo_to_collection(first.id, p.id)
    cat.add_photo_to_collection(second.id, p.id)
    cat.remove_photo_from_collection(first.id, p.id)
    assert cat.list_collection_photo_ids(first.id) == []
    assert cat.list_collection_photo_ids(second.id) == [p.id]


def test_remove_photo_from_all_collections(cat):
    p = _photo("/x/a.jpg", 1)
    other = _photo("/x/b.jpg", 2)
    first = cat.create_collection("First")
    second = cat.create_collection("Second")
    cat.add_photos_to_collection(first.id, [p.id, other.id])
    cat.add_photo_to_collection(second.id, p.id)
    cat.remove_photo_from_all_collections(p.id)
    assert cat.list_collection_photo_ids(first.id) == [other.id]
    assert cat.list_collection_photo_ids(second.id) == []


def test_delete_collection_removes_record_and_members(cat):
    p = _photo("/x/a.jpg", 1)
    doomed = cat.create_collection("Doomed")
    kept = cat.create_collection("Kept")
    cat.add_photo_to_collection(doomed.id, p.id)
    cat.add_photo_to_collection(kept.id, p.id)
    cat.delete_collection(doomed.id)
    assert [c.id for c in cat.list_collections()] == [kept.id]
    assert cat.list_collection_photo_ids(doomed.id) == []
    assert cat.list_collection_photo_ids(kept.id) == [p.id]


def test_rename_collection_persists_normalised_name(cat):
    collection = cat.create_collection("Old")
    renamed = cat.rename_collection(collection.id, "  New  ")
    assert renamed.name == "New"
    assert cat.get_collection(collection.id).name == "New"


def test_get_missing_collection_raises(cat):
    missing = Collection("ghost")
    with pytest.raises(RecordNotFoundError) as info:
        cat.get_collection(missing.id)
    assert str(missing.id) in str(info.value.path)


def test_list_collections_oldest_first(cat):
    created = [cat.create_collection(name) for name in ("A", "B", "C")]
    listed = cat.list_collections()
    stamps = [c.created_at for c in listed]
    assert stamps == sorted(stamps)
    assert {c.id for c in listed} == {c.id for c in created}


def test_insert_collection_round_trips(cat):
    collection = Collection("Portfolio")
    cat.insert_collection(collection)
    assert cat.get_collection(collection.id) == collection