def test_list_and_get_seeded_recipes(client):
    resp = client.get("/api/v1/recipes")
    assert resp.status_code == 200
    assert [r["id"] for r in resp.json()] == ["recipe-1", "recipe-2"]

    resp = client.get("/api/v1/recipes", headers={"X-Store-Id": "store-9"})
    assert resp.json() == []

    resp = client.get("/api/v1/recipes/recipe-1")
    assert resp.status_code == 200
    assert resp.json()["name"] == "김치찌개"


def test_missing_recipe_is_404(client):
    resp = client.get("/api/v1/recipes/nope")
    assert resp.status_code == 404
    assert resp.json()["detail"]["code"] == "RECIPE_NOT_FOUND"


def test_create_update_delete(client):
    body = {"name": "된장찌개", "category": "한식", "base_servings": 2,
            "items": [{"name": "된장", "base_qty": 1, "unit": "tablespoon"}]}
    resp = client.post("/api/v1/recipes", json=body)
    assert resp.status_code == 201
    rid = resp.json()["id"]
    assert resp.json()["store_id"] == "store-1"

    resp = client.put(f"/api/v1/recipes/{rid}", json={"base_servings": 4})
    assert resp.status_code == 200
    assert resp.json()["base_servings"] == 4

    assert client.delete(f"/api/v1/recipes/{rid}").json() == {"ok": True}
    assert client.get(f"/api/v1/recipes/{rid}").status_code == 404


def test_import_into_another_store(client):
    resp = client.post("/api/v1/recipes/import",
                       json={"store_id": "store-2", "recipes": [{"name": "비빔밥", "base_servings": 1}]})
    assert resp.status_code == 201
    assert client.get("/api/v1/recipes", headers={"X-Store-Id": "store-2"}).json()[0]["name"] == "비빔밥"


def test_scale_endpoint(client):
    resp = client.get("/api/v1/recipes/recipe-1/scale", params={"servings": 8})
    assert resp.status_code == 200
    pork = resp.json()[0]
    assert (pork["scaled_qty"], pork["std_unit"]) == (400, "g")

    default = client.get("/api/v1/recipes/recipe-1/scale").json()
    assert default[0]["scaled_qty"] == 200


def test_zero_servings_is_a_validation_error(client):
    resp = client.get("/api/v1/recipes/recipe-1/scale", params={"servings": 0})
    assert resp.status_code == 422
    assert resp.json()["detail"]["code"] == "INVALID_SERVINGS"


def test_resolve_runs_the_whole_pipeline(client):
    resp = client.get("/api/v1/recipes/recipe-1/resolve", params={"servings": 8})
    assert resp.status_code == 200
    body = resp.json()
    assert body["servings"] == 8
    pork = body["matches"][0]
    assert pork["selected_product_id"] == "prod-1"
    assert pork["effective_qty"] == 1000
    assert pork["warning"] == "MOQ-adjusted"

    pasta = client.get("/api/v1/recipes/recipe-2/resolve").json()
    unmatched = [m for m in pasta["matches"] if not m["candidates"]]
    assert unmatched and all(m["warning"] == "no match" for m in unmatched)
