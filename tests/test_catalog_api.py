import pytest


@pytest.fixture
def catalog(make_category, make_product):
    perfumes = make_category("Perfumes", "perfumes")
    oils = make_category("Oils", "oils")
    make_product(title="Rose Water", price=1500, category=perfumes, slug="rose-water",
                 description="Fresh floral", rating=4.5)
    make_product(title="Oud Oil", price=9000, category=oils, slug="oud-oil",
                 images=[("https://img/oud.jpg", False)], rating=3.0)
    make_product(title="Amber Mist", price=4000, category=perfumes, slug="amber-mist", rating=5.0)
    make_product(title="Hidden Draft", price=100, status="draft", slug="hidden-draft")
    return {"perfumes": perfumes, "oils": oils}


def titles(response):
    return [item["title"] for item in response.json()["items"]]


def test_list_categories(client, catalog):
    response = client.get("/categories")

    assert response.status_code == 200
    assert [c["slug"] for c in response.json()] == ["oils", "perfumes"]


def test_list_products_only_active(client, catalog):
    response = client.get("/products")

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 3
    assert "Hidden Draft" not in titles(response)
    assert body["page"] == 1
    assert body["totalPages"] == 1


def test_search_is_case_insensitive(client, catalog):
    assert titles(client.get("/products", params={"q": "OUD"})) == ["Oud Oil"]
    assert titles(client.get("/products", params={"q": "floral"})) == ["Rose Water"]


def test_filter_by_category_slug_and_id(client, catalog):
    by_slug = client.get("/products", params={"category": "PERFUMES", "sort": "titleAsc"})
    by_id = client.get("/products", params={"category": str(catalog["oils"].id)})

    assert titles(by_slug) == ["Amber Mist", "Rose Water"]
    assert titles(by_id) == ["Oud Oil"]


def test_unknown_category_slug_gives_empty_page(client, catalog):
    body = client.get("/products", params={"category": "nope"}).json()

    assert body["items"] == []
    assert body["total"] == 0


def test_sorting(client, catalog):
    assert titles(client.get("/products", params={"sort": "priceAsc"})) == ["Rose Water", "Amber Mist", "Oud Oil"]
    assert titles(client.get("/products", params={"sort": "priceDesc"})) == ["Oud Oil", "Amber Mist", "Rose Water"]
    assert titles(client.get("/products", params={"sort": "ratingDesc"})) == ["Amber Mist", "Rose Water", "Oud Oil"]


def test_pagination_envelope(client, catalog):
    body = client.get("/products", params={"limit": 2, "page": 2, "sort": "titleAsc"}).json()

    assert [i["title"] for i in body["items"]] == ["Rose Water"]
    assert body["totalPages"] == 2
    assert body["hasPrevPage"] is True
    assert body["hasNextPage"] is False


def test_limit_is_capped(client, catalog):
    body = client.get("/products", params={"limit": 51}).json()

    assert body["limit"] == 50
    assert client.get("/products", params={"limit": 0}).status_code == 422


def test_limit_follows_configured_maximum(client, catalog, test_settings):
    test_settings.PAGE_SIZE_MAX = 100
    test_settings.PAGE_SIZE_DEFAULT = 2

    assert client.get("/products", params={"limit": 80}).json()["limit"] == 80
    assert client.get("/products").json()["limit"] == 2


def test_get_product_by_slug_and_id(client, catalog):
    by_slug = client.get("/products/OUD-OIL")

    assert by_slug.status_code == 200
    body = by_slug.json()
    assert body["image"] == "https://img/oud.jpg"
    assert body["category"]["slug"] == "oils"

    assert client.get(f"/products/{body['id']}").json()["slug"] == "oud-oil"


def test_draft_product_is_not_found(client, catalog):
    assert client.get("/products/hidden-draft").status_code == 404
