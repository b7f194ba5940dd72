"""
BookingDesk Backend — SQL Document Store Tests
================================================

What:  SQLDocumentStore against an in-memory SQLite database.
How:   Uses the `document_store` fixture (schema already created).
"""

import pytest

from bookingdesk.services.document_store import DocumentNotFoundError


class TestInsertAndGet:

    @pytest.mark.asyncio
    async def test_insert_assigns_id_and_get_returns_body(self, document_store):
        doc_id = await document_store.insert("businesses", {"name": "Barky", "category": "pets"})

        stored = await document_store.get("businesses", doc_id)

        assert stored.id == doc_id
        assert stored.data == {"name": "Barky", "category": "pets"}

    @pytest.mark.asyncio
    async def test_ids_are_unique(self, document_store):
        first = await document_store.insert("clients", {"firstName": "A"})
        second = await document_store.insert("clients", {"firstName": "A"})
        assert first != second

    @pytest.mark.asyncio
    async def test_get_unknown_id_raises_not_found(self, document_store):
        with pytest.raises(DocumentNotFoundError):
            await document_store.get("businesses", "missing")

    @pytest.mark.asyncio
    async def test_collections_are_isolated(self, document_store):
        doc_id = await document_store.insert("businesses", {"name": "Barky"})
        with pytest.raises(DocumentNotFoundError):
            await document_store.get("clients", doc_id)


class TestQuery:

    @pytest.mark.asyncio
    async def test_no_predicates_returns_whole_collection_in_insertion_order(self, document_store):
        ids = [
            await document_store.insert("appointments", {"businessId": b})
            for b in ("google", "apple", "google")
        ]
        await document_store.insert("businesses", {"name": "other collection"})

        results = await document_store.query("appointments")

        assert [doc.id for doc in results] == ids

    @pytest.mark.asyncio
    async def test_predicates_are_anded(self, document_store):
        await document_store.insert("appointments", {"clientId": "c1", "businessId": "google"})
        match = await document_store.insert("appointments", {"clientId": "c2", "businessId": "google"})
        await document_store.insert("appointments", {"clientId": "c2", "businessId": "apple"})

        results = await document_store.query(
            "appointments", {"clientId": "c2", "businessId": "google"}
        )

        assert [doc.id for doc in results] == [match]

    @pytest.mark.asyncio
    async def test_no_match_returns_empty_list(self, document_store):
        await document_store.insert("businesses", {"category": "pets"})
        assert await document_store.query("businesses", {"category": "home"}) == []


class TestArrayUnion:

    @pytest.mark.asyncio
    async def test_appends_in_order(self, document_store):
        doc_id = await document_store.insert("businesses", {"images": []})

        await document_store.array_union("businesses", doc_id, "images", "a")
        await document_store.array_union("businesses", doc_id, "images", "b")

        stored = await document_store.get("businesses", doc_id)
        assert stored.data["images"] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_duplicate_value_is_not_added_twice(self, document_store):
        doc_id = await document_store.insert("businesses", {"images": []})

        await document_store.array_union("businesses", doc_id, "images", "a")
        await document_store.array_union("businesses", doc_id, "images", "a")

        stored = await document_store.get("businesses", doc_id)
        assert stored.data["images"] == ["a"]

    @pytest.mark.asyncio
    async def test_missing_field_starts_empty(self, document_store):
        doc_id = await document_store.insert("clients", {"firstName": "Ann"})

        await document_store.array_union("clients", doc_id, "images", "a")

        stored = await document_store.get("clients", doc_id)
        assert stored.data == {"firstName": "Ann", "images": ["a"]}

    @pytest.mark.asyncio
    async def test_unknown_id_raises_not_found(self, document_store):
        with pytest.raises(DocumentNotFoundError):
            await document_store.array_union("clients", "missing", "images", "a")


class TestDelete:

    @pytest.mark.asyncio
    async def test_delete_removes_record(self, document_store):
        doc_id = await document_store.insert("clients", {"firstName": "Ann"})

        await document_store.delete("clients", doc_id)

        with pytest.raises(DocumentNotFoundError):
            await document_store.get("clients", doc_id)

    @pytest.mark.asyncio
    async def test_delete_unknown_id_is_not_an_error(self, document_store):
        await document_store.delete("clients", "missing")


@pytest.mark.asyncio
async def test_ping_reports_reachable_database(document_store):
    assert await document_store.ping() is True
