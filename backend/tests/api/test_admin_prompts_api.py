from models.prompt import PromptType


def test_login_success(client):
    response = client.post("/api/admin/login", json={"password": "letmein"})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["tokenType"] == "bearer"
    assert body["accessToken"]


def test_login_wrong_password(client):
    response = client.post("/api/admin/login", json={"password": "nope"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid password"


def test_login_without_configured_password(client, monkeypatch):
    monkeypatch.delenv("ADMIN_PASSWORD")
    response = client.post("/api/admin/login", json={"password": "letmein"})
    assert response.status_code == 500
    assert response.json()["detail"] == "Admin authentication not configured."


def test_login_token_opens_admin_routes(client):
    token = client.post("/api/admin/login", json={"password": "letmein"}).json()["accessToken"]
    response = client.get("/api/admin/prompts", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 200


def test_admin_routes_require_token(client):
    assert client.get("/api/admin/prompts").status_code == 401
    response = client.get("/api/admin/prompts", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid or expired token"
    response = client.post(
        "/api/admin/add-prompt-version",
        json={"promptType": "validation", "content": "x", "changeDescription": "y"},
    )
    assert response.status_code == 401


def test_list_prompts_on_empty_store(client, admin_headers):
    body = client.get("/api/admin/prompts", headers=admin_headers).json()

    assert set(body) == {t.value for t in PromptType}
    entry = body["generation_main"]
    assert entry["displayName"] == "Generation Main"
    assert entry["filename"] == "generation_main.json"
    assert entry["versions"] == []
    assert entry["activeVersion"] is None
    assert "{{TRAINING_DATA}}" in entry["availableVariables"]
    assert body["validation"]["availableVariables"] == ["{{USER_PROMPT}}"]


def test_add_prompt_version_then_list(client, admin_headers):
    payload = {"promptType": "validation", "content": "Check {{USER_PROMPT}}", "changeDescription": "first"}
    first = client.post("/api/admin/add-prompt-version", json=payload, headers=admin_headers)
    second = client.post(
        "/api/admin/add-prompt-version",
        json={**payload, "content": "Check again {{USER_PROMPT}}", "changeDescription": "second"},
        headers=admin_headers,
    )

    assert first.status_code == 200
    assert first.json()["newVersion"]["version"] == 1
    new_version = second.json()["newVersion"]
    assert new_version["version"] == 2
    assert new_version["isActive"] is True
    assert new_version["changeDescription"] == "second"
    assert second.json()["unrecognizedVariables"] == []

    entry = client.get("/api/admin/prompts", headers=admin_headers).json()["validation"]
    assert entry["activeVersion"] == 2
    assert [(v["version"], v["isActive"]) for v in entry["versions"]] == [(1, False), (2, True)]
    assert entry["estimatedTokens"] > 0


def test_add_prompt_version_reports_unknown_placeholders(client, admin_headers):
    response = client.post(
        "/api/admin/add-prompt-version",
        json={"promptType": "validation", "content": "{{USER_PROMPT}} {{USER_PROMT}}", "changeDescription": "typo"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["unrecognizedVariables"] == ["{{USER_PROMT}}"]


def test_add_prompt_version_validation(client, admin_headers):
    bad_payloads = [
        {"promptType": "not_a_type", "content": "x", "changeDescription": "y"},
        {"promptType": "validation", "content": "", "changeDescription": "y"},
        {"promptType": "validation", "content": "x", "changeDescription": "   "},
        {"promptType": "validation", "content": "x"},
    ]
    for payload in bad_payloads:
        response = client.post("/api/admin/add-prompt-version", json=payload, headers=admin_headers)
        assert response.status_code == 422, payload


def test_add_prompt_version_on_corrupted_set(client, admin_headers, store):
    path = store.root_dir / "generation_guide.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("{oops", encoding="utf-8")

    response = client.post(
        "/api/admin/add-prompt-version",
        json={"promptType": "generation_guide", "content": "guide", "changeDescription": "first"},
        headers=admin_headers,
    )

    assert response.status_code == 500
    assert "generation_guide" in response.json()["detail"]
    assert path.read_text(encoding="utf-8") == "{oops"


def test_get_active_prompt(client, admin_headers, store):
    assert client.get("/api/admin/prompts/validation/active", headers=admin_headers).status_code == 404

    store.add_prompt_version(PromptType.VALIDATION, "v1 {{USER_PROMPT}}", "first")
    response = client.get("/api/admin/prompts/validation/active", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["content"] == "v1 {{USER_PROMPT}}"

    assert client.get("/api/admin/prompts/unknown/active", headers=admin_headers).status_code == 422


def test_token_estimate(client, admin_headers, store):
    store.add_prompt_version(PromptType.GENERATION_MAIN, "Build {{USER_NATURAL_LANGUAGE_PROMPT}}", "first")

    body = client.get("/api/admin/token-estimate", params={"model": "openai/gpt-4"}, headers=admin_headers).json()

    assert body["model"] == "openai/gpt-4"
    assert body["templateVersion"] == 1
    assert body["trainingDataVersion"] is None
    assert body["trainingDataTokens"] == 0
    assert body["totalTokens"] == body["templateTokens"] > 0


def test_guessable_key_tokens_rejected_without_secret(client, monkeypatch):
    import jwt
    from datetime import datetime, timedelta, timezone

    monkeypatch.delenv("JWT_SECRET_KEY")
    expire = datetime.now(timezone.utc) + timedelta(hours=1)
    for key in ["your-secret-key-change-in-production", "change-me-change-me-change-me-change-me"]:
        token = jwt.encode({"sub": "admin", "type": "admin", "exp": expire}, key, algorithm="HS256")
        response = client.post(
            "/api/admin/add-prompt-version",
            json={"promptType": "validation", "content": "pwned {{USER_PROMPT}}", "changeDescription": "x"},
            headers={"Authorization": f"Bearer {token}"},
        )
        assert response.status_code == 401, key

    assert client.get("/api/admin/prompts/validation/active", headers={"Authorization": "Bearer x"}).status_code == 401


def test_login_without_configured_secret(client, monkeypatch):
    monkeypatch.delenv("JWT_SECRET_KEY")
    response = client.post("/api/admin/login", json={"password": "letmein"})
    assert response.status_code == 500
    assert response.json()["detail"] == "Admin authentication not configured."
    # a wrong password is still reported as such
    assert client.post("/api/admin/login", json={"password": "nope"}).status_code == 401
