"""Account routes — whole-account teardown of personas and edges."""

ANN = {"X-Account-Username": "ann", "X-Session-Id": "s-ann"}
BEN = {"X-Account-Username": "ben", "X-Session-Id": "s-ben"}


async def _create(client, headers, handle, name):
    res = await client.post(
        "/api/v1/personas", json={"handle": handle, "name": name}, headers=headers,
    )
    return res.json()["persona"]


async def test_delete_account_removes_personas_and_edges(client):
    alice = await _create(client, ANN, "alice", "Alice A")
    await _create(client, ANN, "carol", "Carol C")
    await _create(client, BEN, "bob", "Bob")
    await client.post("/api/v1/persona-session", json={"handle": "bob"}, headers=BEN)
    await client.post("/api/v1/follows", json={"persona_id": alice["id"]}, headers=BEN)

    # Active persona does not block account deletion
    await client.post("/api/v1/persona-session", json={"handle": "alice"}, headers=ANN)
    res = await client.delete("/api/v1/accounts/ann", headers=ANN)
    assert res.status_code == 200
    assert res.json()["message"] == "All personas of ann have been deleted."

    listed = (await client.get("/api/v1/personas", headers=ANN)).json()
    assert listed["personas"] == []
    assert (await client.get("/api/v1/follows/following", headers=BEN)).json() == []
    assert (await client.get("/api/v1/personas/handle/bob", headers=BEN)).status_code == 200


async def test_delete_other_account_is_403(client):
    await _create(client, BEN, "bob", "Bob")
    res = await client.delete("/api/v1/accounts/ben", headers=ANN)
    assert res.status_code == 403
    assert (await client.get("/api/v1/personas/handle/bob", headers=ANN)).status_code == 200


async def test_delete_account_without_personas_succeeds(client):
    res = await client.delete("/api/v1/accounts/ann", headers=ANN)
    assert res.status_code == 200
