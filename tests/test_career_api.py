def career_payload(role="Engineer", company="Acme", period="2020-2022", **extra):
    payload = {"role": role, "company": company, "period": period, "description": "Built things"}
    payload.update(extra)
    return payload


class TestCareerCRUD:
    def test_create_applies_defaults(self, client, auth):
        res = client.post("/api/career", json=career_payload(), headers=auth)
        assert res.status_code == 200
        item = res.json()
        assert item["stack"] == []
        assert item["order"] == 0
        assert isinstance(item["id"], str)

    def test_higher_order_ranks_first(self, client, auth):
        client.post("/api/career", json=career_payload(role="Intern", order=0), headers=auth)
        client.post(
            "/api/career",
            json=career_payload(stack=["Go"], order=1),
            headers=auth,
        )
        items = client.get("/api/career").json()
        assert [i["role"] for i in items] == ["Engineer", "Intern"]
        assert items[0]["stack"] == ["Go"]
        assert items[0]["description"] == "Built things"

    def test_equal_order_keeps_insertion_order(self, client, auth):
        for role in ["First", "Second", "Third"]:
            client.post("/api/career", json=career_payload(role=role), headers=auth)
        items = client.get("/api/career").json()
        assert [i["role"] for i in items] == ["First", "Second", "Third"]

    def test_stack_order_preserved_and_blanks_dropped(self, client, auth):
        created = client.post(
            "/api/career", json=career_payload(stack=["Python", " ", "Rust ", "Go"]), headers=auth
        ).json()
        assert created["stack"] == ["Python", "Rust", "Go"]

    def test_put_stack_only(self, client, auth):
        created = client.post("/api/career", json=career_payload(stack=["Go"]), headers=auth).json()
        res = client.put(f"/api/career/{created['id']}", json={"stack": ["Go", "SQL"]}, headers=auth)
        assert res.status_code == 200
        [item] = client.get("/api/career").json()
        assert item["stack"] == ["Go", "SQL"]
        assert item["role"] == "Engineer"
        assert item["period"] == "2020-2022"

    def test_delete(self, client, auth):
        created = client.post("/api/career", json=career_payload(), headers=auth).json()
        assert client.delete(f"/api/career/{created['id']}", headers=auth).json() == {"success": True}
        assert client.get("/api/career").json() == []


class TestCareerValidation:
    def test_missing_required_fields(self, client, auth, store):
        for missing in ["role", "company", "period"]:
            payload = career_payload()
            del payload[missing]
            res = client.post("/api/career", json=payload, headers=auth)
            assert res.status_code == 400, missing
        assert store.list("career") == []

    def test_blank_company_rejected(self, client, auth):
        res = client.post("/api/career", json=career_payload(company="  "), headers=auth)
        assert res.status_code == 400
        assert res.json()["error"] == "company is required"

    def test_order_must_be_integer(self, client, auth):
        res = client.post("/api/career", json=career_payload(order="first"), headers=auth)
        assert res.status_code == 400
        assert isinstance(res.json()["detail"], list)

    def test_options_item_route(self, client):
        res = client.options("/api/career/abc")
        assert res.status_code == 200
        assert res.headers["access-control-allow-methods"] == "PUT, DELETE, OPTIONS"

    def test_write_without_id_is_400(self, client, auth):
        assert client.put("/api/career", json={"role": "x"}, headers=auth).status_code == 400
        assert client.delete("/api/career/", headers=auth).status_code == 400

    def test_browser_preflight_lists_route_verbs(self, client):
        preflight = {"Origin": "https://portfolio.dev", "Access-Control-Request-Method": "POST"}
        res = client.options("/api/career", headers=preflight)
        assert res.status_code == 200
        assert res.headers["access-control-allow-methods"] == "GET, POST, OPTIONS"

        preflight["Access-Control-Request-Method"] = "PUT"
        res = client.options("/api/career/abc", headers=preflight)
        assert res.status_code == 200
        assert res.headers["access-control-allow-methods"] == "PUT, DELETE, OPTIONS"
