"""Tests for the articles feed endpoints.

Covers list/search, filtering, pagination, engagement, editorial controls,
and error cases.
"""


def _seed_articles(store, make_payload):
    """Three articles: B is promoted above the newer C; A is oldest."""
    a = store.articles.create(
        make_payload(title="Marriage equality upheld", hours_ago=72, category="politics",
                     tags=["Marriage Equality"], is_lgbtq_focused=True)
    )
    b = store.articles.create(
        make_payload(title="Pride festival lineup", hours_ago=1, category="culture",
                     tags=["Pride"], source="Out Magazine", is_lgbtq_focused=True)
    )
    c = store.articles.create(
        make_payload(title="Clinic expands services", hours_ago=0, category="health",
                     tags=["Health", "Pride"])
    )
    store.articles.promote(b.id, 50)
    return a, b, c


async def test_list_articles_ranked(client, store, make_payload):
    """Promoted first, then newest."""
    a, b, c = _seed_articles(store, make_payload)

    response = await client.get("/api/articles")

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 3
    assert data["limit"] == 20
    assert data["offset"] == 0
    assert [x["id"] for x in data["articles"]] == [b.id, c.id, a.id]


async def test_list_articles_with_category_filter(client, store, make_payload):
    _, _, c = _seed_articles(store, make_payload)

    response = await client.get("/api/articles", params={"category": "Health"})

    assert response.status_code == 200
    assert [x["id"] for x in response.json()["articles"]] == [c.id]


async def test_list_articles_category_all(client, store, make_payload):
    _seed_articles(store, make_payload)

    response = await client.get("/api/articles", params={"category": "all"})

    assert response.json()["total"] == 3


async def test_list_articles_with_tags_filter(client, store, make_payload):
    _, b, c = _seed_articles(store, make_payload)

    response = await client.get("/api/articles", params=[("tags", "pride"), ("tags", "nope")])

    assert [x["id"] for x in response.json()["articles"]] == [b.id, c.id]


async def test_list_articles_with_source_and_focus(client, store, make_payload):
    a, b, _ = _seed_articles(store, make_payload)

    by_source = await client.get("/api/articles", params={"source": "magazine"})
    focused = await client.get("/api/articles", params={"lgbtq_focused": "true"})

    assert [x["id"] for x in by_source.json()["articles"]] == [b.id]
    assert [x["id"] for x in focused.json()["articles"]] == [b.id, a.id]


async def test_list_articles_with_search(client, store, make_payload):
    a, _, _ = _seed_articles(store, make_payload)

    response = await client.get("/api/articles", params={"query": "marrige"})

    assert response.status_code == 200
    assert [x["id"] for x in response.json()["articles"]] == [a.id]


async def test_search_respects_filters(client, store, make_payload):
    _seed_articles(store, make_payload)

    response = await client.get(
        "/api/articles", params={"query": "marriage", "category": "culture"}
    )

    assert response.json()["total"] == 0


async def test_pagination(client, store, make_payload):
    for i in range(25):
        store.articles.create(make_payload(title=f"Story {i}", hours_ago=i))

    first = await client.get("/api/articles", params={"limit": 20})
    second = await client.get("/api/articles", params={"limit": 20, "offset": 20})
    beyond = await client.get("/api/articles", params={"offset": 40})

    assert len(first.json()["articles"]) == 20
    assert len(second.json()["articles"]) == 5
    assert beyond.json()["articles"] == []
    assert beyond.json()["total"] == 25


async def test_limit_validation(client):
    assert (await client.get("/api/articles", params={"limit": 101})).status_code == 422
    assert (await client.get("/api/articles", params={"limit": 0})).status_code == 422
    assert (await client.get("/api/articles", params={"offset": -1})).status_code == 422


async def test_get_article(client, store, make_payload):
    article = store.articles.create(make_payload(title="Single"))

    response = await client.get(f"/api/articles/{article.id}")

    assert response.status_code == 200
    assert response.json()["title"] == "Single"


async def test_get_article_not_found(client):
    response = await client.get("/api/articles/nonexistent-id")

    assert response.status_code == 404
    assert "not found" in response.json()["detail"].lower()


async def test_create_article(client, make_payload):
    payload = make_payload(title="Posted by hand")
    payload["published_at"] = payload["published_at"].isoformat()

    response = await client.post("/api/articles", json=payload)

    assert response.status_code == 201
    data = response.json()
    assert data["likes"] == 0
    assert data["is_promoted"] is False
    assert data["rank_score"] == 0

    duplicate = await client.post("/api/articles", json=payload)
    assert duplicate.status_code == 409


async def test_create_article_invalid(client):
    response = await client.post("/api/articles", json={"title": "Missing everything"})

    assert response.status_code == 422


async def test_update_and_delete_article(client, store, make_payload):
    article = store.articles.create(make_payload(title="Draft"))

    patched = await client.patch(f"/api/articles/{article.id}", json={"title": "Final"})
    assert patched.status_code == 200
    assert patched.json()["title"] == "Final"

    deleted = await client.delete(f"/api/articles/{article.id}")
    assert deleted.status_code == 200
    assert deleted.json() == {"success": True}
    assert (await client.get(f"/api/articles/{article.id}")).status_code == 404


async def test_like_article(client, store, make_payload):
    article = store.articles.create(make_payload())

    await client.post(f"/api/articles/{article.id}/like")
    response = await client.post(f"/api/articles/{article.id}/like")

    assert response.json()["likes"] == 2
    assert (await client.post("/api/articles/missing/like")).status_code == 404


async def test_promote_and_unpromote(client, store, make_payload):
    article = store.articles.create(make_payload())

    default = await client.post(f"/api/articles/{article.id}/promote")
    assert default.json()["rank_score"] == 100

    promoted = await client.post(
        f"/api/articles/{article.id}/promote", json={"rank_score": 250}
    )
    assert promoted.status_code == 200
    assert promoted.json()["is_promoted"] is True
    assert promoted.json()["rank_score"] == 250

    negative = await client.post(
        f"/api/articles/{article.id}/promote", json={"rank_score": -5}
    )
    assert negative.status_code == 422

    unpromoted = await client.delete(f"/api/articles/{article.id}/promote")
    assert unpromoted.json()["is_promoted"] is False
    assert unpromoted.json()["rank_score"] == 0


async def test_hide_and_unhide(client, store, make_payload):
    article = store.articles.create(make_payload(title="Moderated story"))

    hidden = await client.post(f"/api/articles/{article.id}/hide")
    assert hidden.json()["is_hidden"] is True
    assert (await client.get("/api/articles")).json()["total"] == 0
    assert (await client.get(f"/api/articles/{article.id}")).status_code == 200

    await client.delete(f"/api/articles/{article.id}/hide")
    assert (await client.get("/api/articles")).json()["total"] == 1


async def test_trending_tags(client, store, make_payload):
    _seed_articles(store, make_payload)

    response = await client.get("/api/articles/trending-tags", params={"limit": 2})

    assert response.status_code == 200
    assert response.json() == [
        {"tag": "Pride", "count": 2},
        {"tag": "Marriage Equality", "count": 1},
    ]


async def test_suggestions(client, store, make_payload):
    _seed_articles(store, make_payload)

    response = await client.get("/api/articles/suggestions", params={"prefix": "pri"})

    assert response.status_code == 200
    assert response.json() == ["pride"]


async def test_suggestions_blank_prefix(client, store, make_payload):
    _seed_articles(store, make_payload)

    response = await client.get("/api/articles/suggestions")

    assert response.json() == []
