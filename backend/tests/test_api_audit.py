"""Audit trail API tests."""


def test_roll_history(client, admin_headers, storekeeper_headers, make_roll):
    roll = make_roll("RC100")
    client.put(f"/api/rolls/{roll.id}", json={"status": "reserved"}, headers=storekeeper_headers)

    resp = client.get(f"/api/audit?entityType=roll&entityId={roll.id}", headers=admin_headers)
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["total"] == 2
    assert data["page"] == 1
    assert data["perPage"] == 50

    newest = data["items"][0]
    assert newest["action"] == "update"
    assert newest["changes"] == {"status": {"from": "in_stock", "to": "reserved"}}
    assert newest["timestamp"].endswith("Z")


def test_filters_and_paging(client, admin_headers, make_roll):
    for i in range(3):
        make_roll(f"P-{i}")

    resp = client.get("/api/audit?entityType=roll&action=create&perPage=2&page=2", headers=admin_headers)
    data = resp.get_json()["data"]
    assert data["total"] == 3
    assert len(data["items"]) == 1

    resp = client.get("/api/audit?perPage=5000", headers=admin_headers)
    assert resp.get_json()["data"]["perPage"] == 200


def test_invalid_filters(client, admin_headers):
    resp = client.get("/api/audit?entityType=invoice", headers=admin_headers)
    assert resp.status_code == 400

    resp = client.get("/api/audit?since=yesterday", headers=admin_headers)
    assert resp.status_code == 400
