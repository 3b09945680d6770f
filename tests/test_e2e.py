import concurrent.futures
import uuid
from datetime import datetime, UTC

from fastapi.testclient import TestClient

PASSWORD = "SecurePass123!"


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


class TestE2E:
    def test_complete_user_journey(self, client: TestClient):
        # 1. Registro de usuario
        email = f"user_{uuid.uuid4().hex[:8]}@example.com"

        # Validar que el email es requerido
        r = client.post("/auth/signup", json={"name": "Journey", "password": PASSWORD})
        assert r.status_code == 400

        r = client.post("/auth/signup", json={"name": "Journey", "email": email, "password": PASSWORD})
        assert r.status_code == 201
        user_data = r.json()
        assert user_data["email"] == email

        # Verificar que no se puede registrar el mismo email
        r = client.post("/auth/signup", json={"name": "Again", "email": email, "password": "OtherPass123!"})
        assert r.status_code == 409
        assert "exists" in r.json()["detail"].lower()

        # 2. Login y manejo de tokens
        r = client.post("/auth/login", json={"email": email, "password": "WrongPass123!"})
        assert r.status_code == 401

        r = client.post("/auth/login", json={"email": email, "password": PASSWORD})
        assert r.status_code == 200
        token = r.json()["token"]

        # 3. Operaciones con tareas
        r = client.post("/tasks", json={"title": "Test Task"})
        assert r.status_code == 401

        r = client.post("/tasks", json={"title": "Test Task"}, headers=_bearer("invalid"))
        assert r.status_code == 401

        r = client.post("/tasks", json={"title": "Mi primera tarea", "tags": ["inbox"]}, headers=_bearer(token))
        assert r.status_code == 201
        task_id = r.json()["id"]

        r = client.get("/tasks", headers=_bearer(token))
        assert r.status_code == 200
        items = r.json()["items"]
        assert [t["id"] for t in items] == [task_id]

        r = client.put(f"/tasks/{task_id}", json={"status": "in-progress"}, headers=_bearer(token))
        assert r.status_code == 200
        assert r.json()["title"] == "Mi primera tarea"

        # 4. Prueba de permisos y aislamiento
        other_email = f"other_{uuid.uuid4().hex[:8]}@example.com"
        r = client.post("/auth/signup", json={"name": "Other", "email": other_email, "password": PASSWORD})
        assert r.status_code == 201
        other_token = client.post("/auth/login", json={"email": other_email, "password": PASSWORD}).json()["token"]

        r = client.get("/tasks", headers=_bearer(other_token))
        assert r.json()["items"] == []

        # otro usuario recibe 404, nunca 403
        r = client.delete(f"/tasks/{task_id}", headers=_bearer(other_token))
        assert r.status_code == 404

        # 5. Limpieza y verificación final
        r = client.delete(f"/tasks/{task_id}", headers=_bearer(token))
        assert r.status_code == 200
        assert r.json()["status"] == "in-progress"

        r = client.get("/tasks", headers=_bearer(token))
        assert r.json()["pagination"]["total"] == 0

    def test_expired_token(self, client: TestClient, register):
        """Un token cuya vida ya terminó es rechazado con 401."""
        _, user = register()
        tokens = client.app.state.tokens
        expired = tokens.issue(user["id"], now=datetime.now(UTC) - tokens.ttl * 2)

        r = client.post("/tasks", json={"title": "Another Task"}, headers=_bearer(expired))
        assert r.status_code == 401

    def test_concurrent_operations(self, client: TestClient, register):
        """Prueba operaciones concurrentes básicas"""
        headers, user = register()

        def create_task(i):
            return client.post("/tasks", json={"title": f"Concurrent Task {i}"}, headers=headers)

        with concurrent.futures.ThreadPoolExecutor(max_workers=3) as executor:
            responses = list(executor.map(create_task, range(5)))

        assert all(r.status_code == 201 for r in responses)

        r = client.get("/tasks", headers=headers)
        tasks = r.json()["items"]
        assert len(tasks) == 5
        assert len({t["title"] for t in tasks}) == 5
        assert all(t["owner"] == user["id"] for t in tasks)
