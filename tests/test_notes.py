import pytest

from conftest import LONG_TEXT
from errors import NotFound, ValidationError
from models import Flashcard, Note, Tag
from models.note import TITLE_MAX_LENGTH
from services.ai_service import SHORT_CONTENT_SUMMARY
from services.note_service import NoteService, normalize_flashcards


@pytest.fixture
def user_id(make_user):
    user, _ = make_user()
    return user["id"]


# ── Service ───────────────────────────────────────────────────────
def test_create_and_get(db, user_id):
    note = NoteService.create(db, user_id, {"title": " Cells ", "content": "body", "tags": ["bio", " bio ", ""]})
    fetched = NoteService.get(db, user_id, note.id)
    assert fetched.title == "Cells"
    assert [t.name for t in fetched.tags] == ["bio"]
    assert fetched.created_at == fetched.updated_at


def test_create_requires_title_and_content(db, user_id):
    with pytest.raises(ValidationError):
        NoteService.create(db, user_id, {"title": "  ", "content": "x"})
    with pytest.raises(ValidationError):
        NoteService.create(db, user_id, {"title": "t", "content": ""})
    assert db.query(Note).count() == 0


def test_tags_are_shared_between_notes(db, user_id):
    NoteService.create(db, user_id, {"title": "a", "content": "x", "tags": ["bio"]})
    NoteService.create(db, user_id, {"title": "b", "content": "y", "tags": ["bio"]})
    assert db.query(Tag).filter_by(name="bio").count() == 1


def test_tag_replacement_round_trip(db, user_id):
    note = NoteService.create(db, user_id, {"title": "t", "content": "c", "tags": ["a", "b"]})
    NoteService.update(db, user_id, note.id, {"tags": ["c"]})
    assert [t.name for t in NoteService.get(db, user_id, note.id).tags] == ["c"]

    NoteService.update(db, user_id, note.id, {"tags": []})
    assert NoteService.get(db, user_id, note.id).tags == []


def test_update_without_tags_keeps_them(db, user_id):
    note = NoteService.create(db, user_id, {"title": "t", "content": "c", "tags": ["a"]})
    NoteService.update(db, user_id, note.id, {"title": "renamed"})
    fetched = NoteService.get(db, user_id, note.id)
    assert fetched.title == "renamed"
    assert [t.name for t in fetched.tags] == ["a"]


def test_update_moves_updated_at_forward(db, user_id):
    note = NoteService.create(db, user_id, {"title": "t", "content": "c"})
    before = note.updated_at
    updated = NoteService.update(db, user_id, note.id, {"content": "new"})
    assert updated.updated_at > before
    assert updated.created_at == note.created_at


def test_second_delete_is_not_found(db, user_id):
    note = NoteService.create(db, user_id, {"title": "t", "content": "c", "tags": ["x"],
                                            "flashcards": [{"question": "Q?", "answer": "A"}]})
    NoteService.delete(db, user_id, note.id)
    assert db.query(Flashcard).count() == 0
    with pytest.raises(NotFound):
        NoteService.delete(db, user_id, note.id)


def test_other_users_notes_are_not_found(db, make_user):
    owner, _ = make_user("owner")
    intruder, _ = make_user("intruder")
    note = NoteService.create(db, owner["id"], {"title": "t", "content": "c"})
    with pytest.raises(NotFound):
        NoteService.get(db, intruder["id"], note.id)
    with pytest.raises(NotFound):
        NoteService.update(db, intruder["id"], note.id, {"title": "mine"})
    with pytest.raises(NotFound):
        NoteService.delete(db, intruder["id"], note.id)
    assert NoteService.get(db, owner["id"], note.id).title == "t"


def test_flashcards_accept_both_shapes():
    plain = [{"question": "Q1?", "answer": "A1"}, {"question": "", "answer": "skip"}]
    deck = {"notes": [{"fields": {"Front": "Q2?", "Back": "A2"}, "tags": []}, "junk"]}
    assert normalize_flashcards(plain) == [("Q1?", "A1")]
    assert normalize_flashcards(deck) == [("Q2?", "A2")]
    assert normalize_flashcards(deck["notes"]) == [("Q2?", "A2")]
    assert normalize_flashcards("nonsense") == []


def test_replace_flashcards_is_destructive(db, user_id):
    note = NoteService.create(db, user_id, {"title": "t", "content": "c",
                                            "flashcards": [{"question": "Old?", "answer": "old"}]})
    NoteService.replace_flashcards(db, user_id, note.id, {"notes": [
        {"fields": {"Front": "New 1?", "Back": "one"}},
        {"fields": {"Front": "New 2?", "Back": "two"}},
    ]})
    cards = NoteService.get_flashcards(db, user_id, note.id)
    assert [c.question for c in cards] == ["New 1?", "New 2?"]
    assert db.query(Flashcard).count() == 2


def test_list_is_newest_first(db, user_id):
    first = NoteService.create(db, user_id, {"title": "first", "content": "c"})
    second = NoteService.create(db, user_id, {"title": "second", "content": "c"})
    NoteService.update(db, user_id, first.id, {"content": "edited"})
    assert [n.id for n in NoteService.get_all(db, user_id)] == [first.id, second.id]


# ── HTTP ──────────────────────────────────────────────────────────
def test_create_fills_summary_and_tags(client, auth_headers, provider):
    res = client.post("/api/notes", json={"title": "Cells", "content": LONG_TEXT}, headers=auth_headers)
    assert res.status_code == 201
    note = res.json()
    assert note["summary"] == "A concise summary of the note."
    assert "biology" in note["tags"] and "cell" in note["tags"]
    assert len(provider.calls) == 1


def test_create_short_content_skips_the_model(client, auth_headers, provider):
    res = client.post("/api/notes", json={"title": "Tiny", "content": "too short"}, headers=auth_headers)
    assert res.status_code == 201
    assert res.json()["summary"] == SHORT_CONTENT_SUMMARY
    assert provider.calls == []


def test_create_keeps_client_summary_and_explicit_empty_tags(client, auth_headers, provider):
    res = client.post("/api/notes", json={
        "title": "Cells", "content": LONG_TEXT, "summary": "Mine.", "tags": [],
    }, headers=auth_headers)
    assert res.json()["summary"] == "Mine."
    assert res.json()["tags"] == []
    assert provider.calls == []


def test_create_missing_title_is_400(client, auth_headers):
    res = client.post("/api/notes", json={"content": "x"}, headers=auth_headers)
    assert res.status_code == 400
    assert res.json()["message"] == "Title and content are required"


def test_note_crud_over_http(client, auth_headers):
    note = client.post("/api/notes", json={"title": "T", "content": "c", "tags": ["x"]}, headers=auth_headers).json()

    res = client.put(f"/api/notes/{note['id']}", json={"title": "T2", "content": "c2", "tags": ["y"]},
                     headers=auth_headers)
    assert res.status_code == 200
    assert res.json()["title"] == "T2"
    assert res.json()["tags"] == ["y"]

    assert [n["id"] for n in client.get("/api/notes", headers=auth_headers).json()] == [note["id"]]
    assert client.delete(f"/api/notes/{note['id']}", headers=auth_headers).json() == {
        "message": "Note deleted successfully",
    }
    assert client.delete(f"/api/notes/{note['id']}", headers=auth_headers).status_code == 404


def test_cross_user_access_is_404(client, make_user):
    _, owner = make_user("owner")
    _, intruder = make_user("intruder")
    note = client.post("/api/notes", json={"title": "T", "content": "c"}, headers=owner).json()

    assert client.get(f"/api/notes/{note['id']}", headers=intruder).status_code == 404
    assert client.put(f"/api/notes/{note['id']}", json={"title": "x", "content": "y"},
                      headers=intruder).status_code == 404
    assert client.delete(f"/api/notes/{note['id']}", headers=intruder).status_code == 404
    assert client.get("/api/notes", headers=intruder).json() == []


def test_stored_flashcards_and_single_card(client, auth_headers):
    note = client.post("/api/notes", json={
        "title": "T", "content": "c", "tags": ["x"],
        "flashcards": [{"question": "Q1?", "answer": "A1"}, {"question": "Q2?", "answer": "A2"}],
    }, headers=auth_headers).json()

    deck = client.get(f"/api/notes/{note['id']}/flashcards", headers=auth_headers).json()
    assert deck["notes"][0] == {"fields": {"Front": "Q1?", "Back": "A1"}, "tags": ["x"]}

    card = client.get(f"/api/notes/{note['id']}/flashcards/1", headers=auth_headers).json()
    assert card["total"] == 2
    assert card["currentIndex"] == 1
    assert card["card"]["fields"]["Front"] == "Q2?"

    assert client.get(f"/api/notes/{note['id']}/flashcards/9", headers=auth_headers).json() == deck


def test_flashcards_missing_is_404(client, auth_headers):
    note = client.post("/api/notes", json={"title": "T", "content": "c"}, headers=auth_headers).json()
    res = client.get(f"/api/notes/{note['id']}/flashcards", headers=auth_headers)
    assert res.status_code == 404


def test_generate_flashcards_replaces_stored_cards(client, auth_headers, provider):
    provider.reply = '[{"question": "What powers the cell?", "answer": "Mitochondria."}]'
    note = client.post("/api/notes", json={
        "title": "Cells", "content": LONG_TEXT, "summary": "s", "tags": ["bio"],
        "flashcards": [{"question": "Old question?", "answer": "old"}],
    }, headers=auth_headers).json()

    res = client.post(f"/api/notes/{note['id']}/flashcards/generate", headers=auth_headers)
    assert res.status_code == 200
    assert res.json() == {"notes": [{"fields": {"Front": "What powers the cell?", "Back": "Mitochondria."},
                                     "tags": ["bio"]}]}

    stored = client.get(f"/api/notes/{note['id']}/flashcards", headers=auth_headers).json()
    assert [c["fields"]["Front"] for c in stored["notes"]] == ["What powers the cell?"]


def test_generate_flashcards_short_content_is_400(client, auth_headers, provider):
    note = client.post("/api/notes", json={"title": "T", "content": "short"}, headers=auth_headers).json()
    res = client.post(f"/api/notes/{note['id']}/flashcards/generate", headers=auth_headers)
    assert res.status_code == 400
    assert provider.calls == []


def test_generate_flashcards_model_failure_is_502(client, auth_headers, provider):
    note = client.post("/api/notes", json={"title": "T", "content": LONG_TEXT, "summary": "s"},
                       headers=auth_headers).json()
    provider.error = "OpenRouter API error: rate limited"
    res = client.post(f"/api/notes/{note['id']}/flashcards/generate", headers=auth_headers)
    assert res.status_code == 502
    assert res.json()["error"] == "AIServiceError"


def test_regenerate_summary(client, auth_headers, provider):
    note = client.post("/api/notes", json={"title": "T", "content": LONG_TEXT, "summary": "old"},
                       headers=auth_headers).json()
    provider.reply = "Here is a summary of the text. cells make energy."
    res = client.post(f"/api/notes/{note['id']}/regenerate-summary", headers=auth_headers)
    assert res.status_code == 200
    assert res.json()["note"]["summary"] == "Cells make energy."


def test_title_length_is_enforced(db, user_id):
    with pytest.raises(ValidationError):
        NoteService.create(db, user_id, {"title": "t" * (TITLE_MAX_LENGTH + 1), "content": "c"})

    note = NoteService.create(db, user_id, {"title": "t" * TITLE_MAX_LENGTH, "content": "c"})
    with pytest.raises(ValidationError):
        NoteService.update(db, user_id, note.id, {"title": "u" * (TITLE_MAX_LENGTH + 1)})
