import pytest


async def _create(client, payload, **overrides) -> int:
    response = await client.post("/api/v1/contracts", json={**payload, **overrides})
    assert response.status_code == 201, response.text
    return response.json()["id"]


@pytest.mark.asyncio
async def test_create_contract(sales_client, contract_payload):
    response = await sales_client.post("/api/v1/contracts", json=contract_payload)
    assert response.status_code == 201
    data = response.json()
    assert data["message"] == "Created"
    assert data["changes"] == []

    response = await sales_client.get(f"/api/v1/contracts/{data['id']}")
    assert response.status_code == 200
    contract = response.json()
    assert contract["draudejas"] == "UAB Testas"
    assert contract["policyNo"] == "POL-1"
    assert contract["galiojaIki"] == "2026-12-31"
    assert contract["metineIsmoka"] == "100.00"
    assert contract["ismoka"] == "15000.00"
    assert contract["status"] == "valid"
    assert contract["view"] == "active"
    assert contract["is_archived"] is False
    assert "atnaujinimoData" in contract


@pytest.mark.asyncio
async def test_create_accepts_python_field_names(sales_client):
    response = await sales_client.post(
        "/api/v1/contracts",
        json={"client_name": "UAB Kitas", "policy_no": "POL-9", "valid_until": "2026-06-30"},
    )
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_create_requires_login(client, contract_payload):
    response = await client.post("/api/v1/contracts", json=contract_payload)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_viewer_cannot_create(viewer_client, contract_payload):
    response = await viewer_client.post("/api/v1/contracts", json=contract_payload)
    assert response.status_code == 403

    response = await viewer_client.get("/api/v1/contracts")
    assert response.json() == []


@pytest.mark.asyncio
async def test_create_missing_required_fields(sales_client, contract_payload):
    response = await sales_client.post(
        "/api/v1/contracts", json={**contract_payload, "draudejas": "", "galiojaIki": ""}
    )
    assert response.status_code == 400
    assert "client name" in response.json()["detail"]
    assert "valid-until date" in response.json()["detail"]


@pytest.mark.asyncio
async def test_create_negative_premium_rejected(sales_client, contract_payload):
    response = await sales_client.post(
        "/api/v1/contracts", json={**contract_payload, "metineIsmoka": -1}
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_duplicate(sales_client, contract_payload):
    await _create(sales_client, contract_payload)

    response = await sales_client.post("/api/v1/contracts", json=contract_payload)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_get_missing_contract(viewer_client):
    response = await viewer_client.get("/api/v1/contracts/9999")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_views(sales_client, contract_payload):
    active_id = await _create(sales_client, contract_payload)
    warning_id = await _create(
        sales_client, contract_payload, policyNo="POL-2", galiojaIki="2026-04-01"
    )
    ended_id = await _create(
        sales_client, contract_payload, policyNo="POL-3", galiojaIki="2026-03-14"
    )

    response = await sales_client.get("/api/v1/contracts")
    active = response.json()
    assert [c["id"] for c in active] == [warning_id, active_id]
    assert [c["status"] for c in active] == ["warning", "valid"]

    response = await sales_client.get("/api/v1/contracts", params={"view": "ended"})
    ended = response.json()
    assert [c["id"] for c in ended] == [ended_id]
    assert ended[0]["status"] == "expired"
    assert ended[0]["view"] == "ended"


@pytest.mark.asyncio
async def test_unknown_view(viewer_client):
    response = await viewer_client.get("/api/v1/contracts", params={"view": "everything"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_archive_toggle(sales_client, contract_payload):
    contract_id = await _create(sales_client, contract_payload)

    response = await sales_client.post(f"/api/v1/contracts/{contract_id}/archive")
    assert response.status_code == 200
    assert response.json() == {"message": "ARCHIVED", "is_archived": True}

    archived = (await sales_client.get("/api/v1/contracts/archived")).json()
    assert [c["id"] for c in archived] == [contract_id]
    assert archived[0]["view"] == "archived"
    assert (await sales_client.get("/api/v1/contracts")).json() == []
    by_view = (await sales_client.get("/api/v1/contracts", params={"view": "archived"})).json()
    assert [c["id"] for c in by_view] == [contract_id]

    response = await sales_client.post(f"/api/v1/contracts/{contract_id}/archive")
    assert response.json() == {"message": "RESTORED", "is_archived": False}
    assert (await sales_client.get("/api/v1/contracts/archived")).json() == []


@pytest.mark.asyncio
async def test_archive_missing_contract(sales_client):
    response = await sales_client.post("/api/v1/contracts/424242/archive")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_viewer_cannot_archive(sales_client, viewer_client, contract_payload):
    contract_id = await _create(sales_client, contract_payload)
    response = await viewer_client.post(f"/api/v1/contracts/{contract_id}/archive")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_update_with_put(sales_client, contract_payload):
    contract_id = await _create(sales_client, contract_payload)

    response = await sales_client.put(
        f"/api/v1/contracts/{contract_id}", json={**contract_payload, "metineIsmoka": 150}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Updated"
    assert data["changes"] == ["Yearly Price: 100.00 -> 150.00"]


@pytest.mark.asyncio
async def test_identical_put_changes_nothing(sales_client, contract_payload):
    contract_id = await _create(sales_client, contract_payload)

    response = await sales_client.put(f"/api/v1/contracts/{contract_id}", json=contract_payload)
    assert response.status_code == 200
    assert response.json()["changes"] == []

    history = (await sales_client.get(f"/api/v1/contracts/{contract_id}/history")).json()
    assert [h["action"] for h in history] == ["CREATED"]


@pytest.mark.asyncio
async def test_update_through_post_with_id(sales_client, contract_payload):
    contract_id = await _create(sales_client, contract_payload)

    response = await sales_client.post(
        "/api/v1/contracts", json={**contract_payload, "id": contract_id, "draudejas": "UAB Naujas"}
    )
    assert response.status_code == 200
    data = response.json()
    assert data == {
        "message": "Updated",
        "id": contract_id,
        "changes": ["Client: UAB Testas -> UAB Naujas"],
    }


@pytest.mark.asyncio
async def test_patch_only_touches_sent_fields(sales_client, contract_payload):
    contract_id = await _create(sales_client, contract_payload)

    response = await sales_client.patch(
        f"/api/v1/contracts/{contract_id}", json={"notes": ["Called the client"]}
    )
    assert response.status_code == 200
    assert response.json()["changes"] == ['Added note: "Called the client"']

    contract = (await sales_client.get(f"/api/v1/contracts/{contract_id}")).json()
    assert contract["notes"] == ["Called the client"]
    assert contract["draudejas"] == "UAB Testas"
    assert contract["metineIsmoka"] == "100.00"


@pytest.mark.asyncio
async def test_update_missing_contract(sales_client, contract_payload):
    response = await sales_client.put("/api/v1/contracts/9999", json=contract_payload)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_viewer_cannot_update(sales_client, viewer_client, contract_payload):
    contract_id = await _create(sales_client, contract_payload)
    response = await viewer_client.patch(
        f"/api/v1/contracts/{contract_id}", json={"draudejas": "Hacked"}
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_delete_requires_admin(sales_client, contract_payload):
    contract_id = await _create(sales_client, contract_payload)

    response = await sales_client.delete(f"/api/v1/contracts/{contract_id}")
    assert response.status_code == 403
    assert (await sales_client.get(f"/api/v1/contracts/{contract_id}")).status_code == 200


@pytest.mark.asyncio
async def test_delete_keeps_history(admin_client, contract_payload):
    contract_id = await _create(admin_client, contract_payload)

    response = await admin_client.delete(f"/api/v1/contracts/{contract_id}")
    assert response.status_code == 200
    assert response.json() == {"message": "Deleted"}

    assert (await admin_client.get(f"/api/v1/contracts/{contract_id}")).status_code == 404
    assert (await admin_client.delete(f"/api/v1/contracts/{contract_id}")).status_code == 404

    history = (await admin_client.get(f"/api/v1/contracts/{contract_id}/history")).json()
    assert [h["action"] for h in history] == ["DELETED", "CREATED"]
    assert history[0]["username"] == "admin_test"


@pytest.mark.asyncio
async def test_history_newest_first(sales_client, contract_payload):
    contract_id = await _create(sales_client, contract_payload)
    await sales_client.patch(f"/api/v1/contracts/{contract_id}", json={"ismoka": 20000})
    await sales_client.post(f"/api/v1/contracts/{contract_id}/archive")

    response = await sales_client.get(f"/api/v1/contracts/{contract_id}/history")
    assert response.status_code == 200
    history = response.json()
    assert [h["action"] for h in history] == ["ARCHIVED", "UPDATED", "CREATED"]
    assert history[1]["details"] == "Payout: 15000.00 -> 20000.00"
    assert all(h["contract_id"] == contract_id for h in history)


@pytest.mark.asyncio
async def test_history_unknown_contract(viewer_client):
    response = await viewer_client.get("/api/v1/contracts/777/history")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
