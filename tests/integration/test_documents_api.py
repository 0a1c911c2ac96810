"""Integration tests for the document endpoints.

Requests go through the FastAPI app with mocked Gemini and the in-memory
vector store.
"""

from unittest.mock import AsyncMock

import pytest

from ragvec.core.exceptions import DeletionError, IngestionError
from tests.conftest import EMBEDDING_DIM, fake_vector, make_document_payload

pytestmark = pytest.mark.integration

DOCUMENTS_API = "/api/v1/documents"


async def _add(client, *payloads: dict) -> dict:
    resp = await client.post(DOCUMENTS_API, json={"documents": list(payloads)})
    assert resp.status_code == 201
    return resp.json()


async def test_add_documents_201(client, mock_vector_store):
    body = await _add(
        client,
        make_document_payload(),
        make_document_payload(text="A second document", metadata={"source": "doc2"}),
    )

    assert body["requested"] == 2
    assert body["applied"] == 2
    assert body["complete"] is True
    assert len(body["ids"]) == 2
    assert await mock_vector_store.count() == 2


async def test_add_documents_with_precomputed_embedding(client, mock_gemini_client):
    payload = make_document_payload(embedding=fake_vector("given", EMBEDDING_DIM))
    await _add(client, payload)
    mock_gemini_client.aio.models.embed_content.assert_not_awaited()


async def test_add_documents_metadata_stringified(client):
    await _add(client, make_document_payload(text="typed", metadata={"page": 3, "draft": True}))

    resp = await client.post(f"{DOCUMENTS_API}/search", json={"query": "typed", "top_k": 1})

    assert resp.json()["documents"][0]["metadata"] == {"page": "3", "draft": "true"}


async def test_add_blank_text_422(client):
    resp = await client.post(DOCUMENTS_API, json={"documents": [{"text": "   "}]})
    assert resp.status_code == 422


async def test_add_wrong_dimension_422(client, mock_vector_store, mock_gemini_client):
    resp = await client.post(
        DOCUMENTS_API, json={"documents": [make_document_payload(embedding=[0.1, 0.2])]}
    )
    assert resp.status_code == 422
    assert "2-dimension embedding" in resp.json()["detail"]
    mock_gemini_client.aio.models.embed_content.assert_not_awaited()
    assert await mock_vector_store.count() == 0


async def test_add_store_failure_502(client, mock_vector_store):
    mock_vector_store.add = AsyncMock(side_effect=IngestionError("connection lost"))
    resp = await client.post(DOCUMENTS_API, json={"documents": [make_document_payload()]})
    assert resp.status_code == 502
    assert "connection lost" in resp.json()["detail"]


async def test_search_returns_closest_first(client):
    await _add(
        client,
        make_document_payload(text="vectors in postgres"),
        make_document_payload(text="baking bread"),
        make_document_payload(text="jazz history"),
    )

    resp = await client.post(
        f"{DOCUMENTS_API}/search", json={"query": "baking bread", "top_k": 2}
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 2
    assert body["documents"][0]["text"] == "baking bread"
    assert body["documents"][0]["embedding"] is None


async def test_search_include_embeddings(client):
    await _add(client, make_document_payload(text="with vector"))

    resp = await client.post(
        f"{DOCUMENTS_API}/search",
        json={"query": "with vector", "top_k": 1, "include_embeddings": True},
    )

    assert len(resp.json()["documents"][0]["embedding"]) == EMBEDDING_DIM


async def test_search_empty_store(client):
    resp = await client.post(f"{DOCUMENTS_API}/search", json={"query": "anything"})
    assert resp.status_code == 200
    assert resp.json() == {"documents": [], "total": 0}


async def test_search_failure_reports_empty_documents(client, mock_gemini_client):
    mock_gemini_client.aio.models.embed_content = AsyncMock(side_effect=RuntimeError("quota"))

    resp = await client.post(f"{DOCUMENTS_API}/search", json={"query": "anything"})

    assert resp.status_code == 502
    detail = resp.json()["detail"]
    assert detail["documents"] == []
    assert "quota" in detail["error"]


async def test_search_top_k_out_of_range_422(client):
    resp = await client.post(f"{DOCUMENTS_API}/search", json={"query": "q", "top_k": 0})
    assert resp.status_code == 422


async def test_delete_documents(client, mock_vector_store):
    added = await _add(client, make_document_payload(), make_document_payload(text="other"))

    resp = await client.request("DELETE", DOCUMENTS_API, json={"ids": added["ids"]})

    assert resp.status_code == 200
    assert resp.json()["complete"] is True
    assert await mock_vector_store.count() == 0


async def test_delete_partial_match(client):
    added = await _add(client, make_document_payload())

    resp = await client.request("DELETE", DOCUMENTS_API, json={"ids": [added["ids"][0], 999]})

    body = resp.json()
    assert body["complete"] is False
    assert body["applied"] == 1
    assert body["missing"] == [999]


async def test_delete_empty_list(client):
    resp = await client.request("DELETE", DOCUMENTS_API, json={"ids": []})
    assert resp.status_code == 200
    assert resp.json()["complete"] is True


async def test_delete_failure_502(client, mock_vector_store):
    mock_vector_store.delete = AsyncMock(side_effect=DeletionError("lock timeout"))
    resp = await client.request("DELETE", DOCUMENTS_API, json={"ids": [1]})
    assert resp.status_code == 502
    assert resp.json()["detail"] == "Deletion failed: lock timeout"


async def test_delete_out_of_range_id_422(client, mock_vector_store):
    mock_vector_store.delete = AsyncMock()
    resp = await client.request("DELETE", DOCUMENTS_API, json={"ids": [1, 2**63]})
    assert resp.status_code == 422
    mock_vector_store.delete.assert_not_awaited()


async def test_delete_non_positive_id_422(client):
    resp = await client.request("DELETE", DOCUMENTS_API, json={"ids": [0]})
    assert resp.status_code == 422


async def test_embedding_width_follows_the_store(client, mock_vector_store, mock_gemini_client):
    mock_vector_store._dimensions = 16
    await _add(client, make_document_payload(text="sized"))

    resp = await client.post(
        f"{DOCUMENTS_API}/search",
        json={"query": "sized", "top_k": 1, "include_embeddings": True},
    )

    assert resp.status_code == 200
    assert len(resp.json()["documents"][0]["embedding"]) == 16
    calls = mock_gemini_client.aio.models.embed_content.call_args_list
    assert {c.kwargs["config"]["output_dimensionality"] for c in calls} == {16}


async def test_supplied_embedding_checked_against_store_width(client, mock_vector_store):
    mock_vector_store._dimensions = 4
    resp = await client.post(
        DOCUMENTS_API,
        json={"documents": [make_document_payload(embedding=[0.1, 0.2, 0.3, 0.4])]},
    )
    assert resp.status_code == 201
