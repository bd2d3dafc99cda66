import pytest
from bson import ObjectId


def _folder(client, headers, name="Biology"):
    resp = client.post("/api/folders", headers=headers, json={"folderName": name})
    assert resp.status_code == 201, resp.text
    return resp.json()["folder"]["id"]


def test_create_list_rename_delete_folder(client, auth_headers):
    folder_id = _folder(client, auth_headers)

    folders = client.get("/api/folders", headers=auth_headers).json()["folders"]
    assert [f["folderName"] for f in folders] == ["Biology"]

    assert client.put(f"/api/folders/{folder_id}/name", headers=auth_headers,
                      json={"newName": "Bio 101"}).status_code == 200
    folders = client.get("/api/folders", headers=auth_headers).json()["folders"]
    assert folders[0]["folderName"] == "Bio 101"

    assert client.delete(f"/api/folders/{folder_id}", headers=auth_headers).status_code == 200
    assert client.get("/api/folders", headers=auth_headers).json()["folders"] == []


def test_folder_requires_name(client, auth_headers):
    resp = client.post("/api/folders", headers=auth_headers, json={})
    assert resp.status_code == 400


def test_assign_and_unassign_folder(client, auth_headers, upload_id):
    folder_id = _folder(client, auth_headers)

    resp = client.put(f"/api/uploads/{upload_id}/folder", headers=auth_headers, json={"folderID": folder_id})
    assert resp.status_code == 200

    in_folder = client.get(f"/api/uploads/folder/{folder_id}", headers=auth_headers).json()["data"]
    assert [u["id"] for u in in_folder] == [upload_id]
    assert client.get("/api/uploads/folder/null", headers=auth_headers).json()["data"] == []

    resp = client.put(f"/api/uploads/{upload_id}/folder", headers=auth_headers, json={"folderID": None})
    assert resp.status_code == 200
    unfoldered = client.get("/api/uploads/folder/null", headers=auth_headers).json()["data"]
    assert [u["id"] for u in unfoldered] == [upload_id]


def test_assign_to_unknown_or_foreign_folder(client, auth_headers, other_headers, upload_id):
    resp = client.put(f"/api/uploads/{upload_id}/folder", headers=auth_headers,
                      json={"folderID": str(ObjectId())})
    assert resp.status_code == 404
    assert resp.json() == {"error": "Folder not found."}

    foreign = _folder(client, other_headers, "Theirs")
    resp = client.put(f"/api/uploads/{upload_id}/folder", headers=auth_headers, json={"folderID": foreign})
    assert resp.status_code == 404


def test_generated_resource_lands_in_folder(client, auth_headers, chat_models, upload_id):
    folder_id = _folder(client, auth_headers)
    chat_models.reply_with(["Summary", "text"])

    resp = client.post("/api/summaries", headers=auth_headers,
                       json={"uploadId": upload_id, "folderID": folder_id})
    assert resp.status_code == 201
    assert resp.json()["summary"]["folderID"] == folder_id

    listed = client.get(f"/api/summaries/folder/{folder_id}", headers=auth_headers).json()["data"]
    assert len(listed) == 1


def test_deleting_folder_leaves_resources(client, auth_headers, upload_id):
    folder_id = _folder(client, auth_headers)
    client.put(f"/api/uploads/{upload_id}/folder", headers=auth_headers, json={"folderID": folder_id})

    client.delete(f"/api/folders/{folder_id}", headers=auth_headers)

    assert client.get(f"/api/uploads/{upload_id}", headers=auth_headers).status_code == 200


QUESTIONS = [{"question": "q", "options": ["a", "b"], "answer": "a", "explanation": "because"}]

GENERATED = {
    "/api/quizzes": (["Quiz", QUESTIONS], {}, "quiz"),
    "/api/summaries": (["Summary", "text"], {}, "summary"),
    "/api/chats": (["Chat", "answer"], {"userMessage": "hi"}, "chat"),
}


def _create_resource(client, headers, chat_models, upload_id, prefix):
    if prefix == "/api/flashcards":
        resp = client.post(prefix, headers=headers, json={
            "sessionName": "Ch1", "studyCards": [{"question": "Q", "answer": "A"}],
        })
        assert resp.status_code == 201, resp.text
        return resp.json()["flashcard"]["id"]

    reply, extra, key = GENERATED[prefix]
    chat_models.reply_with(reply)
    resp = client.post(prefix, headers=headers, json={"uploadId": upload_id, **extra})
    assert resp.status_code == 201, resp.text
    return resp.json()[key]["id"]


@pytest.mark.parametrize("prefix", ["/api/flashcards", "/api/quizzes", "/api/summaries", "/api/chats"])
def test_folder_round_trip(client, auth_headers, chat_models, upload_id, prefix):
    folder_id = _folder(client, auth_headers, "Exams")
    resource_id = _create_resource(client, auth_headers, chat_models, upload_id, prefix)

    resp = client.put(f"{prefix}/{resource_id}/folder", headers=auth_headers, json={"folderID": folder_id})
    assert resp.status_code == 200

    in_folder = client.get(f"{prefix}/folder/{folder_id}", headers=auth_headers).json()["data"]
    assert [doc["id"] for doc in in_folder] == [resource_id]
    assert client.get(f"{prefix}/folder/null", headers=auth_headers).json()["data"] == []
