"""Tests for the current user's history endpoints."""
from httpx import AsyncClient


async def _visit(client: AsyncClient, alias: str, content: str = "content") -> None:
    """Create a note and read it once so it lands in the history."""
    await client.post("/notes/", json={"content": content, "alias": alias})
    response = await client.get(f"/notes/{alias}")
    assert response.status_code == 200


async def test_get_history_empty(client: AsyncClient) -> None:
    """Test getting the history when nothing was visited."""
    response = await client.get("/me/history")
    assert response.status_code == 200
    assert response.json() == []


async def test_get_history_after_visits(client: AsyncClient) -> None:
    """Test that every visited note appears once."""
    await _visit(client, "h1")
    await _visit(client, "h2")
    await client.get("/notes/h1")

    response = await client.get("/me/history")

    assert response.status_code == 200
    assert sorted(entry["identifier"] for entry in response.json()) == ["h1", "h2"]


async def test_pin_history_entry(client: AsyncClient) -> None:
    """Test pinning keeps the last-visited time."""
    await _visit(client, "pinned")
    before = (await client.get("/me/history")).json()[0]

    response = await client.put("/me/history/pinned", json={"pin_status": True})

    assert response.status_code == 200
    data = response.json()
    assert data["pin_status"] is True
    assert data["last_visited_at"] == before["last_visited_at"]


async def test_pin_survives_revisit(client: AsyncClient) -> None:
    """Test that visiting a pinned note keeps it pinned."""
    await _visit(client, "sticky")
    await client.put("/me/history/sticky", json={"pin_status": True})

    await client.get("/notes/sticky")

    history = (await client.get("/me/history")).json()
    assert history[0]["pin_status"] is True


async def test_update_history_entry_not_visited(client: AsyncClient) -> None:
    """Test that updating a never-visited note returns 404 and creates nothing."""
    await client.post("/notes/", json={"content": "x", "alias": "unseen"})

    response = await client.put("/me/history/unseen", json={"pin_status": True})

    assert response.status_code == 404
    assert (await client.get("/me/history")).json() == []


async def test_update_history_entry_unknown_note(client: AsyncClient) -> None:
    """Test updating history of an unknown note returns 404."""
    response = await client.put("/me/history/unknown", json={"pin_status": True})
    assert response.status_code == 404


async def test_update_history_entry_forbidden_identifier(client: AsyncClient) -> None:
    """Test updating history of a reserved identifier returns 400."""
    response = await client.put("/me/history/api", json={"pin_status": True})
    assert response.status_code == 400


async def test_delete_history_entry(client: AsyncClient) -> None:
    """Test deleting one entry."""
    await _visit(client, "keep")
    await _visit(client, "drop")

    response = await client.delete("/me/history/drop")

    assert response.status_code == 204
    history = (await client.get("/me/history")).json()
    assert [entry["identifier"] for entry in history] == ["keep"]


async def test_delete_history_entry_not_visited(client: AsyncClient) -> None:
    """Test deleting a missing entry returns 404."""
    await client.post("/notes/", json={"content": "x", "alias": "never"})

    response = await client.delete("/me/history/never")

    assert response.status_code == 404


async def test_delete_history(client: AsyncClient) -> None:
    """Test clearing the whole history, also when it is already empty."""
    await _visit(client, "gone")

    assert (await client.delete("/me/history")).status_code == 204
    assert (await client.get("/me/history")).json() == []
    assert (await client.delete("/me/history")).status_code == 204


async def test_import_history_replaces(client: AsyncClient) -> None:
    """Test replacing the history with an imported list."""
    await _visit(client, "old")
    await client.post("/notes/", json={"content": "# New one", "alias": "new-one"})

    response = await client.post(
        "/me/history",
        json={
            "history": [
                {"note": "new-one", "pin_status": True, "last_visited_at": "2024-05-01T10:00:00Z"},
            ],
        },
    )

    assert response.status_code == 204
    history = (await client.get("/me/history")).json()
    assert len(history) == 1
    assert history[0]["identifier"] == "new-one"
    assert history[0]["title"] == "New one"
    assert history[0]["pin_status"] is True
    assert history[0]["last_visited_at"].startswith("2024-05-01T10:00:00")


async def test_import_history_naive_timestamp_is_utc(client: AsyncClient) -> None:
    """Test that timestamps without offset are stored as UTC."""
    await client.post("/notes/", json={"content": "x", "alias": "naive"})

    await client.post(
        "/me/history",
        json={"history": [{"note": "naive", "pin_status": False, "last_visited_at": "2024-05-01T10:00:00"}]},
    )

    history = (await client.get("/me/history")).json()
    assert history[0]["last_visited_at"] in ("2024-05-01T10:00:00Z", "2024-05-01T10:00:00+00:00")


async def test_import_history_unknown_note_keeps_previous(client: AsyncClient) -> None:
    """Test that an unknown reference returns 404 and changes nothing."""
    await _visit(client, "existing")

    response = await client.post(
        "/me/history",
        json={
            "history": [
                {"note": "existing", "pin_status": True, "last_visited_at": "2024-05-01T10:00:00Z"},
                {"note": "nonexistent", "pin_status": False, "last_visited_at": "2024-05-01T10:00:00Z"},
            ],
        },
    )

    assert response.status_code == 404
    history = (await client.get("/me/history")).json()
    assert [entry["identifier"] for entry in history] == ["existing"]
    assert history[0]["pin_status"] is False


async def test_import_history_forbidden_identifier_keeps_previous(client: AsyncClient) -> None:
    """Test that a reserved reference returns 400 and changes nothing."""
    await _visit(client, "stays")

    response = await client.post(
        "/me/history",
        json={"history": [{"note": "public", "pin_status": False, "last_visited_at": "2024-05-01T10:00:00Z"}]},
    )

    assert response.status_code == 400
    assert [entry["identifier"] for entry in (await client.get("/me/history")).json()] == ["stays"]


async def test_import_history_invalid_body(client: AsyncClient) -> None:
    """Test that a malformed body fails validation."""
    response = await client.post("/me/history", json={"history": [{"note": "x"}]})
    assert response.status_code == 422


async def test_history_follows_alias_rename(client: AsyncClient) -> None:
    """Test that entries show the current alias of a note."""
    await _visit(client, "original")

    await client.put("/notes/original/alias", json={"alias": "renamed"})

    history = (await client.get("/me/history")).json()
    assert history[0]["identifier"] == "renamed"


async def test_update_history_entry_null_pin_status_rejected(client: AsyncClient) -> None:
    """Test that an explicit null pin_status is a validation error and changes nothing."""
    await _visit(client, "null-pin")
    await client.put("/me/history/null-pin", json={"pin_status": True})

    response = await client.put("/me/history/null-pin", json={"pin_status": None})

    assert response.status_code == 422
    history = (await client.get("/me/history")).json()
    assert history[0]["pin_status"] is True


async def test_update_history_entry_empty_body_keeps_pin(client: AsyncClient) -> None:
    """Test that omitting pin_status leaves the entry unchanged."""
    await _visit(client, "empty-body")
    await client.put("/me/history/empty-body", json={"pin_status": True})

    response = await client.put("/me/history/empty-body", json={})

    assert response.status_code == 200
    assert response.json()["pin_status"] is True
