FORBIDDEN_KEYS = {"password", "password_hash", "passwordHash", "senha"}


def _assert_no_password(payload):
    if isinstance(payload, dict):
        assert not FORBIDDEN_KEYS & set(payload), payload
        for value in payload.values():
            _assert_no_password(value)
    elif isinstance(payload, list):
        for item in payload:
            _assert_no_password(item)


def test_health(client):
    res = client.get("/api/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok", "storage": "sql"}


def test_login_seeded_admin(client):
    res = client.post("/api/auth/login", json={"handle": "admin@agenda.com", "password": "admin123"})
    assert res.status_code == 200
    body = res.json()
    assert body["token"]
    assert body["user"]["role"] == "admin"
    assert body["user"]["email"] == "admin@agenda.com"
    _assert_no_password(body)


def test_login_accepts_legacy_field_names(client):
    res = client.post("/api/auth/login", json={"username": "admin@agenda.com", "senha": "admin123"})
    assert res.status_code == 200


def test_login_wrong_password(client):
    res = client.post("/api/auth/login", json={"handle": "admin@agenda.com", "password": "errada"})
    assert res.status_code == 401
    assert res.json()["code"] == "InvalidCredentials"
    assert "error" in res.json()


def test_login_missing_fields(client):
    res = client.post("/api/auth/login", json={"handle": "admin@agenda.com"})
    assert res.status_code == 400
    assert res.json()["code"] == "ValidationError"


def test_me(client, admin_headers):
    res = client.get("/api/auth/me", headers=admin_headers)
    assert res.status_code == 200
    assert res.json()["email"] == "admin@agenda.com"
    assert res.json()["isActive"] is True
    _assert_no_password(res.json())


def test_protected_routes_require_token(client):
    for method, path in [
        ("get", "/api/auth/me"),
        ("get", "/api/agendamentos"),
        ("post", "/api/agendamentos"),
        ("put", "/api/agendamentos/abc"),
        ("delete", "/api/agendamentos/abc"),
        ("get", "/api/users"),
        ("delete", "/api/users/abc"),
    ]:
        res = getattr(client, method)(path)
        assert res.status_code == 401, (method, path, res.text)
        assert res.json()["code"] == "MissingToken"


def test_invalid_token_is_rejected(client):
    res = client.get("/api/agendamentos", headers={"Authorization": "Bearer nao.e.jwt"})
    assert res.status_code == 401
    assert res.json()["code"] == "InvalidToken"


def test_non_bearer_scheme_is_missing_token(client):
    res = client.get("/api/agendamentos", headers={"Authorization": "Basic abc"})
    assert res.status_code == 401


def test_create_agendamento_defaults(client, user_headers):
    res = client.post("/api/agendamentos", json={"nomeCliente": "Ana", "loja": "Matriz"}, headers=user_headers)
    assert res.status_code == 201
    body = res.json()
    assert body["status"] == "pendente"
    assert body["servico"] == "Medição Padrão"
    assert body["ambientes"] == []
    assert body["nomeCliente"] == "Ana"
    assert body["id"]
    assert body["createdAt"] and body["updatedAt"]


def test_create_agendamento_missing_fields(client, user_headers):
    res = client.post("/api/agendamentos", json={"telefone": "123"}, headers=user_headers)
    assert res.status_code == 400
    assert res.json()["fields"] == ["nomeCliente", "loja"]


def test_create_agendamento_bad_date(client, user_headers):
    res = client.post(
        "/api/agendamentos",
        json={"nomeCliente": "Ana", "loja": "Matriz", "data": "ontem"},
        headers=user_headers,
    )
    assert res.status_code == 400
    assert res.json()["code"] == "ValidationError"


def test_agendamento_lifecycle(client, user_headers):
    payload = {
        "nomeCliente": "Carlos",
        "loja": "Filial Centro",
        "data": "2025-04-01",
        "hora": "09:30",
        "ambientes": ["Escritório"],
        "cidade": "São Paulo",
    }
    created = client.post("/api/agendamentos", json=payload, headers=user_headers).json()
    agendamento_id = created["id"]
    assert created["data"] == "2025-04-01"
    assert created["hora"].startswith("09:30")

    res = client.put(
        f"/api/agendamentos/{agendamento_id}", json={"status": "confirmado"}, headers=user_headers
    )
    assert res.status_code == 200
    assert res.json()["status"] == "confirmado"
    assert res.json()["cidade"] == "São Paulo"

    res = client.get(f"/api/agendamentos/{agendamento_id}", headers=user_headers)
    assert res.status_code == 200
    assert res.json()["status"] == "confirmado"

    res = client.get("/api/agendamentos", params={"status": "confirmado"}, headers=user_headers)
    assert [item["id"] for item in res.json()] == [agendamento_id]

    res = client.get("/api/agendamentos/resumo", headers=user_headers)
    assert res.json()["confirmado"] == 1
    assert res.json()["total"] == 1

    res = client.delete(f"/api/agendamentos/{agendamento_id}", headers=user_headers)
    assert res.status_code == 200

    assert client.get("/api/agendamentos", headers=user_headers).json() == []
    res = client.delete(f"/api/agendamentos/{agendamento_id}", headers=user_headers)
    assert res.status_code == 404
    assert res.json()["code"] == "NotFound"


def test_update_agendamento_invalid_status(client, user_headers):
    created = client.post(
        "/api/agendamentos", json={"nomeCliente": "Ana", "loja": "Matriz"}, headers=user_headers
    ).json()
    res = client.put(f"/api/agendamentos/{created['id']}", json={"status": "invalido"}, headers=user_headers)
    assert res.status_code == 400
    assert res.json()["code"] == "ValidationError"


def test_list_agendamentos_invalid_status_filter(client, user_headers):
    res = client.get("/api/agendamentos", params={"status": "arquivado"}, headers=user_headers)
    assert res.status_code == 400


def test_update_unknown_agendamento(client, user_headers):
    res = client.put("/api/agendamentos/nao-existe", json={"status": "confirmado"}, headers=user_headers)
    assert res.status_code == 404


def test_non_admin_cannot_manage_users(client, admin_headers, user_headers):
    admin_id = client.get("/api/auth/me", headers=admin_headers).json()["id"]
    res = client.delete(f"/api/users/{admin_id}", headers=user_headers)
    assert res.status_code == 403
    assert res.json()["code"] == "Forbidden"
    assert client.get("/api/users", headers=user_headers).status_code == 403
    res = client.post(
        "/api/users", json={"nome": "X", "email": "x@agenda.com", "senha": "x"}, headers=user_headers
    )
    assert res.status_code == 403


def test_create_user_duplicate_email(client, admin_headers):
    payload = {"nome": "Maria", "email": "maria@agenda.com", "senha": "segredo"}
    assert client.post("/api/users", json=payload, headers=admin_headers).status_code == 201
    res = client.post("/api/users", json=payload, headers=admin_headers)
    assert res.status_code == 409
    assert res.json()["code"] == "Conflict"


def test_user_management(client, admin_headers, login_headers):
    res = client.post(
        "/api/users",
        json={"nome": "Maria", "email": "maria@agenda.com", "senha": "segredo", "role": "user"},
        headers=admin_headers,
    )
    assert res.status_code == 201
    user = res.json()
    _assert_no_password(user)

    res = client.get("/api/users", headers=admin_headers)
    assert res.status_code == 200
    assert {item["email"] for item in res.json()} == {"admin@agenda.com", "maria@agenda.com"}
    _assert_no_password(res.json())

    res = client.put(
        f"/api/users/{user['id']}", json={"nome": "Maria Souza", "senha": "nova"}, headers=admin_headers
    )
    assert res.status_code == 200
    assert res.json()["nome"] == "Maria Souza"
    _assert_no_password(res.json())
    login_headers("maria@agenda.com", "nova")

    res = client.delete(f"/api/users/{user['id']}", headers=admin_headers)
    assert res.status_code == 200
    res = client.post("/api/auth/login", json={"handle": "maria@agenda.com", "password": "nova"})
    assert res.status_code == 401
    assert client.delete(f"/api/users/{user['id']}", headers=admin_headers).status_code == 404


def test_update_unknown_user(client, admin_headers):
    res = client.put("/api/users/nao-existe", json={"nome": "X"}, headers=admin_headers)
    assert res.status_code == 404


def test_unknown_route_uses_error_body(client):
    res = client.get("/api/nao-existe")
    assert res.status_code == 404
    assert "error" in res.json()


def test_cors_allows_any_origin(client):
    res = client.options(
        "/api/agendamentos",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Authorization, Content-Type",
        },
    )
    assert res.status_code == 200
    assert res.headers["access-control-allow-origin"] in {"*", "http://localhost:3000"}


def _second_admin(client, admin_headers, login_headers):
    res = client.post(
        "/api/users",
        json={"nome": "Chefe", "email": "chefe@agenda.com", "senha": "chefe123", "role": "admin"},
        headers=admin_headers,
    )
    assert res.status_code == 201
    return res.json()["id"], login_headers("chefe@agenda.com", "chefe123")


def test_deactivated_user_token_stops_working(client, admin_headers, login_headers):
    chefe_id, chefe_headers = _second_admin(client, admin_headers, login_headers)
    assert client.get("/api/users", headers=chefe_headers).status_code == 200

    assert client.delete(f"/api/users/{chefe_id}", headers=admin_headers).status_code == 200

    res = client.post(
        "/api/users",
        json={"nome": "X", "email": "x@agenda.com", "senha": "x"},
        headers=chefe_headers,
    )
    assert res.status_code == 403
    assert res.json()["code"] == "Forbidden"
    assert client.get("/api/users", headers=chefe_headers).status_code == 403
    assert client.get("/api/agendamentos", headers=chefe_headers).status_code == 403


def test_demoted_admin_loses_admin_routes(client, admin_headers, login_headers):
    chefe_id, chefe_headers = _second_admin(client, admin_headers, login_headers)
    res = client.put(f"/api/users/{chefe_id}", json={"role": "user"}, headers=admin_headers)
    assert res.status_code == 200

    assert client.get("/api/users", headers=chefe_headers).status_code == 403
    res = client.get("/api/auth/me", headers=chefe_headers)
    assert res.status_code == 200
    assert res.json()["role"] == "user"


def test_token_for_removed_user_is_invalid(client, repo, admin_headers, login_headers):
    chefe_id, chefe_headers = _second_admin(client, admin_headers, login_headers)
    repo.delete("users", chefe_id)
    res = client.get("/api/agendamentos", headers=chefe_headers)
    assert res.status_code == 401
    assert res.json()["code"] == "InvalidToken"


def test_hora_with_offset_is_rejected(client, user_headers):
    res = client.post(
        "/api/agendamentos",
        json={"nomeCliente": "Ana", "loja": "Matriz", "hora": "09:30:00+03:00"},
        headers=user_headers,
    )
    assert res.status_code == 400
    assert res.json()["code"] == "ValidationError"


def test_hora_round_trip(client, user_headers):
    created = client.post(
        "/api/agendamentos",
        json={"nomeCliente": "Ana", "loja": "Matriz", "hora": "09:30:00"},
        headers=user_headers,
    ).json()
    fetched = client.get(f"/api/agendamentos/{created['id']}", headers=user_headers).json()
    assert fetched["hora"] == created["hora"] == "09:30:00"


def test_null_status_resets_to_pendente(client, user_headers):
    created = client.post(
        "/api/agendamentos",
        json={"nomeCliente": "Ana", "loja": "Matriz", "status": "confirmado"},
        headers=user_headers,
    ).json()
    res = client.put(f"/api/agendamentos/{created['id']}", json={"status": None}, headers=user_headers)
    assert res.status_code == 200
    assert res.json()["status"] == "pendente"
