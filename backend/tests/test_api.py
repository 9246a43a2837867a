"""HTTP surface: auth, status codes and response shapes."""

import pytest

API = "/api/v1"

UMRAH = {
    "title": "Test Umrah",
    "imageUrl": "https://x/y.jpg",
    "price": "Rs 100,000",
    "duration": "10 Days",
}


def add_curated(client, headers, title):
    r = client.post(
        f"{API}/packages/curated",
        json={"title": title, "imageUrl": f"https://img.example.com/{title.lower()}.jpg"},
        headers=headers,
    )
    assert r.status_code == 201, r.text
    return r.json()


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

def test_root(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["status"] == "running"


def test_health_endpoints(client):
    health = client.get(f"{API}/health/").json()
    assert health["status"] == "healthy"
    assert health["store"] == "sql"
    assert health["documents"] == {"packages": 0, "testimonials": 0, "destination-highlights": 0}

    assert client.get(f"{API}/health/ready").json()["ready"] is True
    assert client.get(f"{API}/health/live").json()["alive"] is True


def test_security_headers_present(client):
    r = client.get(f"{API}/health/live", headers={"X-Request-ID": "req-42"})
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Request-ID"] == "req-42"
    assert "X-Process-Time" in r.headers


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("method,path", [
    ("post", "/packages/curated"),
    ("put", "/packages/curated/0?etag=x"),
    ("delete", "/packages/curated/0?etag=x"),
    ("post", "/testimonials"),
    ("put", "/testimonials/abc"),
    ("delete", "/testimonials/abc"),
    ("post", "/destination-highlights"),
    ("delete", "/destination-highlights/abc"),
    ("put", "/settings/site"),
])
def test_mutations_require_admin_key(client, method, path):
    kwargs = {} if method == "delete" else {"json": {}}
    r = getattr(client, method)(f"{API}{path}", headers={"X-API-Key": "wrong"}, **kwargs)
    assert r.status_code == 403
    body = r.json()
    assert body["error"] == "forbidden"
    assert body["message"]
    assert "timestamp" in body


def test_non_ascii_admin_key_is_rejected_not_crashed(client):
    r = client.post(
        f"{API}/testimonials",
        json={},
        headers={"X-API-Key": "cl\u00e9".encode("latin-1")},
    )
    assert r.status_code == 403
    assert r.json()["error"] == "forbidden"


def test_reads_are_open(client):
    assert client.get(f"{API}/packages").status_code == 200
    assert client.get(f"{API}/testimonials").status_code == 200
    assert client.get(f"{API}/destination-highlights").status_code == 200
    assert client.get(f"{API}/settings/site").status_code == 200


# ---------------------------------------------------------------------------
# Packages
# ---------------------------------------------------------------------------

def test_list_packages_has_every_category(client):
    body = client.get(f"{API}/packages").json()
    assert set(body) == {"top-destinations", "best-deals", "most-searched", "curated", "umrah"}


def test_add_umrah_package(client, admin_headers):
    r = client.post(f"{API}/packages/umrah", json=UMRAH, headers=admin_headers)

    assert r.status_code == 201
    entry = r.json()
    assert entry["name"] == "Test Umrah"
    assert entry["days"] == "10 Days"
    assert entry["index"] == 0

    stored = client.get(f"{API}/packages").json()["umrah"]
    assert stored == [{**UMRAH, "name": "Test Umrah", "days": "10 Days"}]


def test_add_rejects_missing_required_field(client, admin_headers):
    r = client.post(f"{API}/packages/best-deals", json={"title": "No price", "imageUrl": "https://x/y.jpg"}, headers=admin_headers)

    assert r.status_code == 422
    body = r.json()
    assert body["error"] == "validation_failed"
    assert "price" in body["message"]
    assert "timestamp" in body


def test_unknown_category_is_422(client, admin_headers):
    r = client.post(f"{API}/packages/honeymoon", json=UMRAH, headers=admin_headers)
    assert r.status_code == 422
    assert r.json()["error"] == "validation_failed"


def test_edit_and_stale_etag(client, admin_headers):
    first = add_curated(client, admin_headers, "Kyoto")

    r = client.put(
        f"{API}/packages/curated/0",
        params={"etag": first["etag"]},
        json={"title": "Kyoto in Autumn", "imageUrl": "https://img.example.com/kyoto.jpg"},
        headers=admin_headers,
    )
    assert r.status_code == 200
    assert r.json()["title"] == "Kyoto in Autumn"

    stale = client.put(
        f"{API}/packages/curated/0",
        params={"etag": first["etag"]},
        json={"title": "Overwrite", "imageUrl": "https://img.example.com/kyoto.jpg"},
        headers=admin_headers,
    )
    assert stale.status_code == 409
    assert stale.json()["error"] == "stale_record"


def test_edit_out_of_range_is_404(client, admin_headers):
    add_curated(client, admin_headers, "Only")

    r = client.put(
        f"{API}/packages/curated/5",
        params={"etag": "whatever"},
        json={"title": "Nope", "imageUrl": "https://img.example.com/nope.jpg"},
        headers=admin_headers,
    )
    assert r.status_code == 404
    assert r.json()["error"] == "index_out_of_range"


def test_delete_requires_etag(client, admin_headers):
    add_curated(client, admin_headers, "Keep")

    r = client.delete(f"{API}/packages/curated/0", headers=admin_headers)

    assert r.status_code == 422
    assert len(client.get(f"{API}/packages/curated").json()) == 1


def test_repeated_delete_does_not_remove_neighbour(client, admin_headers):
    for title in ("A", "B", "C"):
        add_curated(client, admin_headers, title)
    target = client.get(f"{API}/packages/curated").json()[0]

    first = client.delete(f"{API}/packages/curated/0", params={"etag": target["etag"]}, headers=admin_headers)
    again = client.delete(f"{API}/packages/curated/0", params={"etag": target["etag"]}, headers=admin_headers)

    assert first.status_code == 200
    assert first.json()["record"]["title"] == "A"
    assert again.status_code == 409
    assert [p["title"] for p in client.get(f"{API}/packages/curated").json()] == ["B", "C"]


def test_replayed_delete_keeps_identical_copy(client, admin_headers):
    add_curated(client, admin_headers, "Dup")
    add_curated(client, admin_headers, "Dup")
    target = client.get(f"{API}/packages/curated").json()[0]

    first = client.delete(f"{API}/packages/curated/0", params={"etag": target["etag"]}, headers=admin_headers)
    again = client.delete(f"{API}/packages/curated/0", params={"etag": target["etag"]}, headers=admin_headers)

    assert first.status_code == 200
    assert again.status_code == 409
    assert len(client.get(f"{API}/packages/curated").json()) == 1


def test_edit_can_move_package_to_another_category(client, admin_headers):
    entry = client.post(
        f"{API}/packages/top-destinations",
        json={"title": "Bali", "imageUrl": "https://img.example.com/bali.jpg", "price": "$700", "location": "Indonesia"},
        headers=admin_headers,
    ).json()

    r = client.put(
        f"{API}/packages/top-destinations/0",
        params={"etag": entry["etag"], "move_to": "curated"},
        json={"title": "Bali Escape", "imageUrl": "https://img.example.com/bali.jpg", "price": "$700"},
        headers=admin_headers,
    )

    assert r.status_code == 200, r.text
    moved = r.json()
    assert moved["category"] == "curated"
    assert moved["title"] == "Bali Escape"
    assert "price" not in moved
    assert client.get(f"{API}/packages/top-destinations").json() == []
    assert [p["title"] for p in client.get(f"{API}/packages/curated").json()] == ["Bali Escape"]


def test_move_missing_required_field_is_422(client, admin_headers):
    entry = add_curated(client, admin_headers, "Kyoto")

    r = client.put(
        f"{API}/packages/curated/0",
        params={"etag": entry["etag"], "move_to": "umrah"},
        json={"title": "Kyoto", "imageUrl": "https://img.example.com/kyoto.jpg"},
        headers=admin_headers,
    )

    assert r.status_code == 422
    assert r.json()["error"] == "validation_failed"
    assert len(client.get(f"{API}/packages/curated").json()) == 1


def test_search_and_category_catalogue(client, admin_headers):
    add_curated(client, admin_headers, "Alpine")
    client.post(f"{API}/packages/umrah", json=UMRAH, headers=admin_headers)

    hits = client.get(f"{API}/packages/search", params={"q": "ALP"}).json()
    assert [(h["category"], h["index"], h["title"]) for h in hits] == [("curated", 0, "Alpine")]

    catalogue = {c["value"]: c for c in client.get(f"{API}/packages/meta/categories").json()}
    assert catalogue["umrah"]["label"] == "Umrah"
    assert catalogue["best-deals"]["required"] == ["title", "imageUrl", "price"]


# ---------------------------------------------------------------------------
# Testimonials & highlights
# ---------------------------------------------------------------------------

def test_testimonial_crud(client, admin_headers):
    created = client.post(
        f"{API}/testimonials",
        json={"name": "Ayesha", "message": "Wonderful", "rating": 4},
        headers=admin_headers,
    )
    assert created.status_code == 201
    tid = created.json()["id"]

    assert client.get(f"{API}/testimonials/{tid}").json()["rating"] == 4

    updated = client.put(f"{API}/testimonials/{tid}", json={"name": "Ayesha", "message": "Even better"}, headers=admin_headers)
    assert updated.status_code == 200
    assert updated.json()["rating"] == 5

    assert client.delete(f"{API}/testimonials/{tid}", headers=admin_headers).status_code == 200
    assert client.delete(f"{API}/testimonials/{tid}", headers=admin_headers).status_code == 200
    assert client.get(f"{API}/testimonials/{tid}").status_code == 404


@pytest.mark.parametrize("rating", [0, 6])
def test_testimonial_rating_bounds(client, admin_headers, rating):
    r = client.post(f"{API}/testimonials", json={"name": "A", "message": "B", "rating": rating}, headers=admin_headers)
    assert r.status_code == 422
    assert client.get(f"{API}/testimonials").json() == []


def test_update_missing_testimonial_is_404(client, admin_headers):
    r = client.put(f"{API}/testimonials/ghost", json={"name": "A", "message": "B"}, headers=admin_headers)
    assert r.status_code == 404
    assert r.json()["error"] == "not_found"


def test_highlight_type_switch(client, admin_headers):
    created = client.post(
        f"{API}/destination-highlights",
        json={"type": "video", "videoUrl": "https://v.example.com/a.mp4", "thumbnail": "https://img.example.com/a.jpg"},
        headers=admin_headers,
    ).json()

    r = client.put(
        f"{API}/destination-highlights/{created['id']}",
        json={"type": "description", "title": "Petra", "description": "Rose city", "background": "https://img.example.com/p.jpg"},
        headers=admin_headers,
    )
    assert r.status_code == 200

    fetched = client.get(f"{API}/destination-highlights/{created['id']}").json()
    assert fetched["type"] == "description"
    assert "videoUrl" not in fetched


# ---------------------------------------------------------------------------
# Settings & dashboard
# ---------------------------------------------------------------------------

def test_settings_merge(client, admin_headers):
    assert client.get(f"{API}/settings/site").json()["siteName"] == "Safar Air International"

    r = client.put(f"{API}/settings/site", json={"sitePhone": "+92 21 1234567"}, headers=admin_headers)

    assert r.status_code == 200
    body = r.json()
    assert body["sitePhone"] == "+92 21 1234567"
    assert body["siteEmail"] == "info@safarair.com"


def test_settings_bad_email_is_422(client, admin_headers):
    r = client.put(f"{API}/settings/site", json={"siteEmail": "nope"}, headers=admin_headers)
    assert r.status_code == 422


def test_dashboard_stats(client, admin_headers):
    add_curated(client, admin_headers, "One")
    client.post(f"{API}/packages/umrah", json=UMRAH, headers=admin_headers)
    client.post(f"{API}/testimonials", json={"name": "A", "message": "B"}, headers=admin_headers)

    stats = client.get(f"{API}/dashboard/stats").json()

    assert stats["totalPackages"] == 2
    assert stats["packagesByCategory"]["curated"] == 1
    assert stats["totalTestimonials"] == 1
    assert stats["totalDestinations"] == 0
