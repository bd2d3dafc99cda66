from unittest import mock

import requests

from router.transcripts import page_text

CARDS = [{"question": "What is a cell?", "answer": "The basic unit of life"}]

HTML = """
<html>
  <head><style>body { color: red; }</style><script>var x = 1;</script></head>
  <body>
    <header>Site header</header>
    <nav>Home | About</nav>
    <h1>Cells</h1>
    <p>Cells   are the
       basic unit of life.</p>
    <iframe src="ad.html"></iframe>
    <footer>Copyright</footer>
  </body>
</html>
"""


def test_page_text_drops_chrome_and_collapses_whitespace():
    assert page_text(HTML) == "Cells Cells are the basic unit of life."


def test_public_flashcards_generate(client, chat_models, database):
    chat_models.reply_with(["Cells", CARDS])

    resp = client.post("/api/flashcards-public/generate", json={"transcript": "Cells are the basic unit of life."})

    assert resp.status_code == 200, resp.text
    assert resp.json() == {"flashcards": ["Cells", CARDS]}
    assert database["flashcards"].count_documents({}) == 0


def test_public_flashcards_rate_limited(limited_client, chat_models):
    chat_models.reply_with(["Cells", CARDS])

    statuses = [
        limited_client.post("/api/flashcards-public/generate", json={"transcript": "Cells."}).status_code
        for _ in range(3)
    ]

    assert statuses == [200, 200, 429]


def test_website_transcript_requires_url(client, auth_headers):
    assert client.get("/api/transcript-public/website").status_code == 400
    assert client.get("/api/transcript/website", headers=auth_headers).status_code == 400
    assert client.get("/api/transcript/website", params={"url": "https://example.org"}).status_code == 401


def test_website_transcript(client):
    page = mock.Mock(text=HTML)
    with mock.patch("requests.get", return_value=page):
        resp = client.get("/api/transcript-public/website", params={"url": "https://example.org/cells"})

    assert resp.status_code == 200
    assert resp.json() == {"transcript": "Cells Cells are the basic unit of life."}


def test_website_fetch_failure(client):
    with mock.patch("requests.get", side_effect=requests.ConnectionError("down")):
        resp = client.get("/api/transcript-public/website", params={"url": "https://example.org/cells"})
    assert resp.status_code == 500
