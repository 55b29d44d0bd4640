from app.models import Category, Problem, Product
from app.services import SeedService


def test_seed_is_idempotent(db):
    first = SeedService(db).seed_all()
    assert first == {"categories_added": 1, "products_added": 5, "problems_added": 5}

    second = SeedService(db).seed_all()
    assert second == {"categories_added": 0, "products_added": 0, "problems_added": 0}
    assert db.query(Category).count() == 1
    assert db.query(Product).count() == 5
    assert db.query(Problem).count() == 5


def test_seed_endpoint_requires_admin(client, auth_headers, admin_headers):
    assert client.post("/api/seed", headers=auth_headers).status_code == 403

    r = client.post("/api/seed", headers=admin_headers)
    assert r.status_code == 200
    assert r.json() == {"success": True, "categoriesAdded": 1, "productsAdded": 5, "problemsAdded": 5}


def test_health_endpoints(client):
    assert client.get("/health").json() == {"status": "healthy"}
    assert client.get("/api/health").json()["status"] == "healthy"
    assert client.get("/").json()["message"] == "Shamba Fresh API"
