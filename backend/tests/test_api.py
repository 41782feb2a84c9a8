"""HTTP surface tests."""

import pytest


def words(n: int) -> str:
    return " ".join(["insight"] * n)


OUTLINE = {
    "title": "The Focused Founder",
    "chapters": [
        {"id": "chapter-1", "title": "Why Focus Wins", "description": "The case for focus.",
         "key_points": ["Cost of switching"], "estimated_word_count": 4000},
    ],
}


async def create_book(client, target=50000):
    response = await client.post("/api/books", json={
        "title": "The Focused Founder",
        "genre": "Business",
        "target_word_count": target,
    })
    assert response.status_code == 201
    return response.json()


async def book_with_chapter(client, target=50000):
    book = await create_book(client, target)
    outline = (await client.post(f"/api/books/{book['id']}/outline", json=OUTLINE)).json()
    chapter = (await client.post(f"/api/books/{book['id']}/chapters", json={
        "chapter_number": 1, "title": "Why Focus Wins",
    })).json()
    return book, outline, chapter


class TestBasics:
    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.json() == {"status": "ok"}
        assert "X-Request-ID" in response.headers

    @pytest.mark.asyncio
    async def test_identity_required(self, client):
        response = await client.get("/api/books", headers={"X-User-Id": ""})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_current_user_created_lazily(self, client):
        response = await client.get("/api/users/current")
        assert response.status_code == 200
        assert response.json()["user_id"] == "alice"

    @pytest.mark.asyncio
    async def test_validation_error(self, client):
        response = await client.post("/api/books", json={"title": "x", "genre": "y", "target_word_count": 0})
        assert response.status_code == 422


class TestBookFlow:
    @pytest.mark.asyncio
    async def test_full_lifecycle(self, client):
        book, outline, chapter = await book_with_chapter(client, target=1000)
        assert (await client.get(f"/api/books/{book['id']}")).json()["status"] == "outline"

        approved = await client.post(f"/api/outlines/{outline['id']}/approve")
        assert approved.json()["is_approved"] is True
        assert (await client.get(f"/api/books/{book['id']}")).json()["status"] == "approved"

        response = await client.put(f"/api/chapters/{chapter['id']}", json={"content": words(500)})
        assert response.status_code == 200
        assert response.json()["word_count"] == 500
        current = (await client.get(f"/api/books/{book['id']}")).json()
        assert (current["status"], current["progress"], current["current_word_count"]) == ("writing", 50, 500)

        await client.put(f"/api/chapters/{chapter['id']}", json={"content": words(1000)})
        current = (await client.get(f"/api/books/{book['id']}")).json()
        assert (current["status"], current["progress"]) == ("completed", 100)

        export = await client.post(f"/api/books/{book['id']}/export", json={"format": "txt"})
        assert export.status_code == 200
        assert export.headers["content-type"].startswith("text/plain")
        assert 'filename="the_focused_founder.txt"' in export.headers["content-disposition"]
        assert "Chapter 1: Why Focus Wins" in export.text

    @pytest.mark.asyncio
    async def test_book_update_ignores_status(self, client):
        book = await create_book(client)
        response = await client.put(f"/api/books/{book['id']}", json={"title": "New", "status": "completed"})
        assert response.json()["title"] == "New"
        assert response.json()["status"] == "idea"

    @pytest.mark.asyncio
    async def test_duplicate_chapter_number(self, client):
        book, _, _ = await book_with_chapter(client)
        response = await client.post(f"/api/books/{book['id']}/chapters", json={
            "chapter_number": 1, "title": "Again",
        })
        assert response.status_code == 400
        assert response.json()["error"] == "validation_failed"

    @pytest.mark.asyncio
    async def test_edit_after_approval_conflicts(self, client):
        _, outline, _ = await book_with_chapter(client)
        await client.post(f"/api/outlines/{outline['id']}/approve")
        response = await client.put(f"/api/outlines/{outline['id']}", json={"title": "Changed"})
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_delete_cascades(self, client):
        book, outline, chapter = await book_with_chapter(client)
        assert (await client.delete(f"/api/books/{book['id']}")).status_code == 200

        assert (await client.get(f"/api/books/{book['id']}")).status_code == 404
        assert (await client.get(f"/api/outlines/{outline['id']}")).status_code == 404
        assert (await client.get(f"/api/chapters/{chapter['id']}")).status_code == 404

    @pytest.mark.asyncio
    async def test_books_are_owner_scoped(self, client):
        book = await create_book(client)
        response = await client.get(f"/api/books/{book['id']}", headers={"X-User-Id": "bob"})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_stats(self, client):
        await create_book(client)
        stats = (await client.get("/api/books/stats")).json()
        assert stats["total_books"] == 1
        assert stats["by_status"]["idea"] == 1


class TestExport:
    @pytest.mark.asyncio
    async def test_unsupported_format(self, client):
        book = await create_book(client)
        response = await client.post(f"/api/books/{book['id']}/export", json={"format": "mobi"})
        assert response.status_code == 400
        assert response.json()["error"] == "unsupported_format"

    @pytest.mark.asyncio
    async def test_not_completed(self, client):
        book = await create_book(client)
        response = await client.post(f"/api/books/{book['id']}/export", json={"format": "txt"})
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_defaults_come_from_settings(self, client, pdf_renderer):
        book, _, chapter = await book_with_chapter(client, target=10)
        await client.put(f"/api/chapters/{chapter['id']}", json={"content": words(10)})
        await client.put("/api/settings", json={"export_format": "pdf", "export_page_size": "a4"})

        response = await client.post(f"/api/books/{book['id']}/export", json={})
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert pdf_renderer.calls[-1][1] == "A4"


class TestSettings:
    @pytest.mark.asyncio
    async def test_defaults(self, client):
        settings = (await client.get("/api/settings")).json()
        assert settings["default_genre"] == "Business"
        assert settings["default_word_count"] == 50000
        assert settings["export_format"] == "docx"
        assert settings["has_api_key"] is False

    @pytest.mark.asyncio
    async def test_partial_update_masks_key(self, client):
        response = await client.put("/api/settings", json={"openrouter_api_key": "sk-or-v1-abcdef123456"})
        settings = response.json()
        assert settings["has_api_key"] is True
        assert settings["openrouter_api_key"] == "sk-or-...3456"
        assert settings["default_genre"] == "Business"


class TestIdeasAndGeneration:
    @pytest.mark.asyncio
    async def test_generate_and_accept_idea(self, client, mock_ai_service):
        mock_ai_service.generate_json.return_value = [
            {"title": "Quiet Leadership", "description": "Lead calmly.",
             "targetAudience": "Managers", "keyPoints": ["Listening"]},
        ]
        generated = await client.post("/api/generate/ideas", json={"genre": "Business", "count": 1})
        assert generated.status_code == 200
        idea = generated.json()[0]
        assert idea["genre"] == "Business"

        listed = (await client.get("/api/ideas")).json()
        assert [i["id"] for i in listed] == [idea["id"]]

        book = await client.post(f"/api/ideas/{idea['id']}/accept", json={"target_word_count": 30000})
        assert book.status_code == 201
        assert book.json()["title"] == "Quiet Leadership"
        assert book.json()["target_word_count"] == 30000

    @pytest.mark.asyncio
    async def test_delete_missing_idea(self, client):
        assert (await client.delete("/api/ideas/missing")).status_code == 404

    @pytest.mark.asyncio
    async def test_generate_outline_and_chapter(self, client, mock_ai_service):
        book = await create_book(client)
        mock_ai_service.generate_json.return_value = {
            "title": "Focus",
            "chapters": [{"title": "Why Focus Wins", "description": "d", "keyPoints": ["a"], "estimatedWordCount": 4000}],
        }
        outline = await client.post("/api/generate/outline", json={"book_id": book["id"]})
        assert outline.status_code == 200
        assert outline.json()["chapters"][0]["id"] == "chapter-1"

        chapter = await client.post("/api/generate/chapter", json={
            "book_id": book["id"],
            "chapter_number": 1,
            "chapter_title": "Why Focus Wins",
            "chapter_description": "The case for focus.",
        })
        assert chapter.status_code == 200
        assert chapter.json()["status"] == "completed"
        assert chapter.json()["content"] == "Focus is a skill.\n\nIt can be trained."

        current = (await client.get(f"/api/books/{book['id']}")).json()
        assert current["current_word_count"] == 8

    @pytest.mark.asyncio
    async def test_generate_chapter_requires_outline(self, client):
        book = await create_book(client)
        response = await client.post("/api/generate/chapter", json={
            "book_id": book["id"],
            "chapter_number": 1,
            "chapter_title": "Intro",
            "chapter_description": "Intro",
        })
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_generation_without_api_key(self, client):
        from bookgen.main import app
        from bookgen.api.settings import get_user_ai_service
        app.dependency_overrides.pop(get_user_ai_service)

        response = await client.post("/api/generate/ideas", json={"genre": "Business"})
        assert response.status_code == 400
        assert response.json()["error"] == "auth_error"
