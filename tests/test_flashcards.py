import json

from bson import ObjectId

CARDS = [
    {"question": "What does photosynthesis produce?", "answer": "Glucose and oxygen"},
    {"question": "Where does it happen?", "answer": "In the chloroplasts"},
]


def test_generate_session_from_upload(client, auth_headers, chat_models, upload_id, database):
    chat_models.reply_with('```json\n["Photosynthesis Basics", %s]\n```' % json.dumps(CARDS))

    resp = client.post("/api/flashcards/generate", headers=auth_headers, json={"uploadId": upload_id})

    assert resp.status_code == 201, resp.text
    session = resp.json()["flashcard"]
    assert session["studySession"] == "Photosynthesis Basics"
    assert session["flashcardsJSON"] == CARDS
    assert session["uploadId"] == upload_id
    assert session["folderID"] is None
    assert chat_models.temperatures == [0.1]
    assert database["flashcards"].count_documents({}) == 1


def test_generate_with_unparseable_reply_stores_nothing(client, auth_headers, chat_models, upload_id, database):
    chat_models.reply_with("Sure! Here are your flashcards.")

    resp = client.post("/api/flashcards/generate", headers=auth_headers, json={"uploadId": upload_id})

    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to parse flashcards JSON."}
    assert database["flashcards"].count_documents({}) == 0


def test_generate_with_wrong_shape_stores_nothing(client, auth_headers, chat_models, upload_id, database):
    chat_models.reply_with({"sessionName": "x", "cards": CARDS})

    resp = client.post("/api/flashcards/generate", headers=auth_headers, json={"uploadId": upload_id})

    assert resp.status_code == 500
    assert resp.json()["error"].startswith("Invalid format: Expected")
    assert database["flashcards"].count_documents({}) == 0


def test_generate_for_unknown_upload(client, auth_headers, chat_models):
    resp = client.post("/api/flashcards/generate", headers=auth_headers, json={"uploadId": str(ObjectId())})
    assert resp.status_code == 404
    assert resp.json() == {"error": "Upload not found or not owned by user."}
    assert chat_models.models == []


def test_generate_for_someone_elses_upload(client, auth_headers, other_headers, upload_id):
    resp = client.post("/api/flashcards/generate", headers=other_headers, json={"uploadId": upload_id})
    assert resp.status_code == 404


def test_generate_without_api_key(client, auth_headers, settings, upload_id):
    settings.openai_api_key = None
    resp = client.post("/api/flashcards/generate", headers=auth_headers, json={"uploadId": upload_id})
    assert resp.status_code == 500
    assert resp.json() == {"error": "OpenAI API key is not configured."}


def test_create_manual_session_and_append(client, auth_headers):
    created = client.post("/api/flashcards", headers=auth_headers, json={
        "sessionName": "Manual", "studyCards": CARDS[:1], "transcript": "notes",
    })
    assert created.status_code == 201
    session_id = created.json()["flashcard"]["id"]

    appended = client.put(f"/api/flashcards/{session_id}", headers=auth_headers, json={"studyCards": CARDS[1:]})
    assert appended.status_code == 200

    stored = client.get(f"/api/flashcards/{session_id}", headers=auth_headers).json()["data"]
    assert stored["flashcardsJSON"] == CARDS
    assert "updatedDate" in stored


def test_free_account_session_limit(client, auth_headers):
    for i in range(2):
        resp = client.post("/api/flashcards", headers=auth_headers, json={
            "sessionName": f"Session {i}", "studyCards": CARDS,
        })
        assert resp.status_code == 201

    third = client.post("/api/flashcards", headers=auth_headers, json={
        "sessionName": "One too many", "studyCards": CARDS,
    })
    assert third.status_code == 403


def test_generate_more_is_paid_only(client, auth_headers):
    session_id = client.post("/api/flashcards", headers=auth_headers, json={
        "sessionName": "Manual", "studyCards": CARDS, "transcript": "notes",
    }).json()["flashcard"]["id"]

    resp = client.post(f"/api/flashcards/{session_id}/generate-more", headers=auth_headers)
    assert resp.status_code == 403


def test_generate_more_appends_for_paid_account(client, auth_headers, chat_models, database):
    database.users.update_one({"email": "ada@studybuddy.dev"}, {"$set": {"accountType": "paid"}})
    session_id = client.post("/api/flashcards", headers=auth_headers, json={
        "sessionName": "Manual", "studyCards": CARDS[:1], "transcript": "notes",
    }).json()["flashcard"]["id"]

    chat_models.reply_with(CARDS[1:])
    resp = client.post(f"/api/flashcards/{session_id}/generate-more", headers=auth_headers)

    assert resp.status_code == 200, resp.text
    assert resp.json()["newFlashcards"] == CARDS[1:]
    stored = client.get(f"/api/flashcards/{session_id}", headers=auth_headers).json()["data"]
    assert len(stored["flashcardsJSON"]) == 2
    assert chat_models.temperatures == [0.3]


def test_list_only_returns_own_sessions(client, auth_headers, other_headers):
    client.post("/api/flashcards", headers=auth_headers, json={"sessionName": "Mine", "studyCards": CARDS})
    client.post("/api/flashcards", headers=other_headers, json={"sessionName": "Theirs", "studyCards": CARDS})

    mine = client.get("/api/flashcards", headers=auth_headers).json()["data"]
    assert [s["studySession"] for s in mine] == ["Mine"]


def test_created_session_reads_back_unchanged(client, auth_headers):
    created = client.post("/api/flashcards", headers=auth_headers, json={
        "sessionName": "Ch1", "studyCards": [{"question": "Q", "answer": "A"}], "transcript": "Chapter one.",
    })
    assert created.status_code == 201
    session_id = created.json()["flashcard"]["id"]

    stored = client.get(f"/api/flashcards/{session_id}", headers=auth_headers).json()["data"]
    assert stored["studySession"] == "Ch1"
    assert stored["flashcardsJSON"] == [{"question": "Q", "answer": "A"}]
    assert stored["transcript"] == "Chapter one."


def test_session_folder_round_trip(client, auth_headers):
    folder_id = client.post("/api/folders", headers=auth_headers,
                            json={"folderName": "Exams"}).json()["folder"]["id"]
    session_id = client.post("/api/flashcards", headers=auth_headers, json={
        "sessionName": "Ch1", "studyCards": CARDS,
    }).json()["flashcard"]["id"]

    assert client.put(f"/api/flashcards/{session_id}/folder", headers=auth_headers,
                      json={"folderID": folder_id}).status_code == 200

    in_folder = client.get(f"/api/flashcards/folder/{folder_id}", headers=auth_headers).json()["data"]
    assert [s["id"] for s in in_folder] == [session_id]
