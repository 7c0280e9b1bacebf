from fastapi.testclient import TestClient

from config import settings
from main import app


def _create(client, name, parent_id=None):
    body = {"name": name, "label": name.title()}
    if parent_id is not None:
        body["parentId"] = parent_id
    resp = client.post("/api/menus", json=body)
    assert resp.status_code == 201
    return resp.json()["data"]


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


def test_list_menus_empty(client):
    resp = client.get("/api/menus")
    assert resp.status_code == 200
    assert resp.json() == {"data": []}


def test_list_menus_returns_nested_tree(client):
    root = _create(client, "root")
    child = _create(client, "child", root["id"])

    data = client.get("/api/menus").json()["data"]

    assert len(data) == 1
    assert data[0]["id"] == root["id"]
    assert [c["id"] for c in data[0]["children"]] == [child["id"]]
    assert data[0]["children"][0]["parentId"] == root["id"]


def test_get_menu_with_children(client):
    root = _create(client, "root")
    child = _create(client, "child", root["id"])

    resp = client.get(f"/api/menus/{root['id']}")

    assert resp.status_code == 200
    assert resp.json()["data"]["children"][0]["id"] == child["id"]


def test_get_menu_not_found(client):
    resp = client.get("/api/menus/missing")
    assert resp.status_code == 404
    assert resp.json() == {"error": "NOT_FOUND", "message": "Menu not found"}


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


def test_create_menu_uses_camel_case_fields(client):
    data = _create(client, "settings")

    assert data["depth"] == 1
    assert data["order"] == 0
    assert data["parentId"] is None
    assert data["children"] == []
    assert "createdAt" in data and "updatedAt" in data


def test_create_menu_validation_error(client):
    resp = client.post("/api/menus", json={"name": "", "label": "Label"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "VALIDATION_ERROR"

    resp = client.post("/api/menus", json={"name": "only_name"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "VALIDATION_ERROR"
    assert "label" in resp.json()["message"]


def test_create_menu_parent_not_found(client):
    resp = client.post("/api/menus", json={"name": "x", "label": "X", "parentId": "nope"})
    assert resp.status_code == 404
    assert resp.json()["error"] == "PARENT_NOT_FOUND"


# ---------------------------------------------------------------------------
# Update
# ---------------------------------------------------------------------------


def test_update_menu_partial(client):
    menu = _create(client, "original")

    resp = client.put(f"/api/menus/{menu['id']}", json={"label": "Renamed"})

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["name"] == "original"
    assert data["label"] == "Renamed"


def test_update_menu_reparent(client):
    a = _create(client, "a")
    b = _create(client, "b", a["id"])
    c = _create(client, "c", b["id"])

    resp = client.put(f"/api/menus/{c['id']}", json={"parentId": None})

    assert resp.status_code == 200
    assert resp.json()["data"]["depth"] == 1


def test_update_menu_rejects_descendant_parent(client, service):
    a = _create(client, "a")
    b = _create(client, "b", a["id"])

    for target in (a["id"], b["id"]):
        resp = client.put(f"/api/menus/{a['id']}", json={"parentId": target})
        assert resp.status_code == 400
        assert resp.json()["error"] == "INVALID_OPERATION"

    assert service.get_by_id(a["id"]).parent_id is None


def test_update_menu_unknown_parent(client):
    menu = _create(client, "menu")
    resp = client.put(f"/api/menus/{menu['id']}", json={"parentId": "nope"})
    assert resp.status_code == 404
    assert resp.json()["error"] == "PARENT_NOT_FOUND"


def test_update_menu_not_found(client):
    resp = client.put("/api/menus/missing", json={"name": "x"})
    assert resp.status_code == 404
    assert resp.json()["error"] == "NOT_FOUND"


# ---------------------------------------------------------------------------
# Delete / move / reorder
# ---------------------------------------------------------------------------


def test_delete_menu_cascades(client):
    root = _create(client, "root")
    child = _create(client, "child", root["id"])

    resp = client.delete(f"/api/menus/{root['id']}")

    assert resp.status_code == 204
    assert client.get(f"/api/menus/{root['id']}").status_code == 404
    assert client.get(f"/api/menus/{child['id']}").status_code == 404


def test_delete_menu_not_found(client):
    resp = client.delete("/api/menus/missing")
    assert resp.status_code == 404
    assert resp.json()["error"] == "NOT_FOUND"


def test_move_menu(client):
    p1 = _create(client, "p1")
    p2 = _create(client, "p2")
    child = _create(client, "child", p1["id"])
    grandchild = _create(client, "grandchild", child["id"])

    resp = client.patch(f"/api/menus/{child['id']}/move", json={"parentId": p2["id"]})
    assert resp.status_code == 200
    assert resp.json()["data"]["parentId"] == p2["id"]

    resp = client.patch(f"/api/menus/{child['id']}/move", json={"parentId": None})
    assert resp.json()["data"]["depth"] == 1
    moved = client.get(f"/api/menus/{grandchild['id']}").json()["data"]
    assert moved["depth"] == 2


def test_move_menu_rejects_descendant(client):
    a = _create(client, "a")
    b = _create(client, "b", a["id"])

    resp = client.patch(f"/api/menus/{a['id']}/move", json={"parentId": b["id"]})

    assert resp.status_code == 400
    assert resp.json()["error"] == "INVALID_OPERATION"


def test_move_menu_not_found(client):
    resp = client.patch("/api/menus/missing/move", json={"parentId": None})
    assert resp.status_code == 404


def test_reorder_menu(client):
    parent = _create(client, "parent")
    b = _create(client, "b", parent["id"])
    c = _create(client, "c", parent["id"])

    resp = client.patch(f"/api/menus/{c['id']}/reorder", json={"order": 0})

    assert resp.status_code == 200
    assert resp.json()["data"]["order"] == 0
    children = client.get(f"/api/menus/{parent['id']}").json()["data"]["children"]
    assert [m["id"] for m in children] == [c["id"], b["id"]]


def test_reorder_menu_clamps_and_validates(client):
    parent = _create(client, "parent")
    first = _create(client, "first", parent["id"])
    _create(client, "second", parent["id"])

    resp = client.patch(f"/api/menus/{first['id']}/reorder", json={"order": 999})
    assert resp.json()["data"]["order"] == 1

    resp = client.patch(f"/api/menus/{first['id']}/reorder", json={"order": -1})
    assert resp.status_code == 400
    assert resp.json()["error"] == "VALIDATION_ERROR"


def test_reorder_menu_not_found(client):
    resp = client.patch("/api/menus/missing/reorder", json={"order": 0})
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Failures and application wiring
# ---------------------------------------------------------------------------


def test_unexpected_failure_returns_500(client, service, monkeypatch):
    def boom():
        raise RuntimeError("store exploded")

    monkeypatch.setattr(service, "list_as_tree", boom)

    resp = client.get("/api/menus")

    assert resp.status_code == 500
    assert resp.json() == {
        "error": "INTERNAL_SERVER_ERROR",
        "message": "Failed to fetch menus",
    }


def test_unknown_route_uses_error_shape(client):
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert resp.json()["error"] == "NOT_FOUND"


def test_ping(client, monkeypatch):
    monkeypatch.setattr(settings, "PING_MESSAGE", "pong")
    resp = client.get("/api/ping")
    assert resp.status_code == 200
    assert resp.json() == {"message": "pong"}


def test_startup_seeds_sample_hierarchy(monkeypatch):
    monkeypatch.setattr(settings, "SEED_SAMPLE_DATA", True)

    with TestClient(app) as client:
        data = client.get("/api/menus").json()["data"]

    assert [m["id"] for m in data] == ["1"]
    node, depth = data[0], 1
    while node["children"]:
        node = node["children"][0]
        depth += 1
        assert node["depth"] == depth
    assert depth == 5
    assert node["name"] == "code_registration"
