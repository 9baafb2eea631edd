import asyncio

import httpx
import pytest

from progress_tracker.application.use_cases.ask_tutor import FALLBACK_REPLY, build_tutor_prompt, strip_markup
from progress_tracker.infrastructure.tutor_client import GeminiTutorClient, TutorServiceError
from progress_tracker.interfaces.http.routers.tutor import get_tutor_client
from progress_tracker.main import app


class FakeTutor:
    def __init__(self, reply="Let's review fractions first.", error=None):
        self.reply = reply
        self.error = error
        self.prompts = []

    async def generate(self, prompt):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.reply


@pytest.fixture
def fake_tutor():
    tutor = FakeTutor()
    app.dependency_overrides[get_tutor_client] = lambda: tutor
    yield tutor
    del app.dependency_overrides[get_tutor_client]


def test_ask_relays_reply(client, fake_tutor):
    response = client.post("/ask", json={"prompt": "What is 1/2 + 1/3?"})
    assert response.status_code == 200
    assert response.json() == {"reply": "Let's review fractions first."}
    assert fake_tutor.prompts == [build_tutor_prompt("What is 1/2 + 1/3?")]
    assert "Do NOT provide direct answers" in fake_tutor.prompts[0]


def test_ask_strips_markup(client, fake_tutor):
    client.post("/ask", json={"prompt": "<b>Solve</b> <script>alert(1)</script>x + 2 = 5"})
    assert fake_tutor.prompts[0].endswith("Question: Solve x + 2 = 5")


def test_ask_accepts_legacy_question_key(client, fake_tutor):
    response = client.post("/ask", json={"question": "Why is the sky blue?"})
    assert response.status_code == 200
    assert fake_tutor.prompts[0].endswith("Why is the sky blue?")


def test_ask_rejects_empty_prompt(client, fake_tutor):
    assert client.post("/ask", json={"prompt": "<p>  </p>"}).status_code == 400
    assert client.post("/ask", json={}).status_code == 400
    assert fake_tutor.prompts == []


def test_ask_upstream_failure(client, fake_tutor):
    fake_tutor.error = TutorServiceError("boom: upstream detail")
    response = client.post("/ask", json={"prompt": "help"})
    assert response.status_code == 500
    assert response.json() == {"detail": "Failed to get response from AI"}


def test_ask_empty_upstream_answer(client, fake_tutor):
    fake_tutor.reply = None
    response = client.post("/ask", json={"prompt": "help"})
    assert response.json() == {"reply": FALLBACK_REPLY}


def test_strip_markup_plain_text_untouched():
    assert strip_markup("  what   is\n2+2? ") == "what is 2+2?"


def _client_with(handler, api_key="test-key"):
    return GeminiTutorClient(
        api_key=api_key,
        model="gemini-test",
        base_url="https://example.test/models",
        transport=httpx.MockTransport(handler),
    )


def test_gemini_client_parses_first_candidate():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["body"] = request.read()
        return httpx.Response(200, json={"candidates": [{"content": {"parts": [{"text": "hint"}]}}]})

    async def run():
        client = _client_with(handler)
        try:
            return await client.generate("prompt text")
        finally:
            await client.aclose()

    assert asyncio.run(run()) == "hint"
    assert seen["url"].startswith("https://example.test/models/gemini-test:generateContent")
    assert "key=test-key" in seen["url"]
    assert b"prompt text" in seen["body"]


def test_gemini_client_no_candidates():
    async def run():
        client = _client_with(lambda request: httpx.Response(200, json={"candidates": []}))
        try:
            return await client.generate("x")
        finally:
            await client.aclose()

    assert asyncio.run(run()) is None


def test_gemini_client_http_error():
    async def run():
        client = _client_with(lambda request: httpx.Response(503, json={"error": "busy"}))
        try:
            await client.generate("x")
        finally:
            await client.aclose()

    with pytest.raises(TutorServiceError):
        asyncio.run(run())


def test_gemini_client_requires_key():
    async def run():
        client = _client_with(lambda request: httpx.Response(200, json={}), api_key=None)
        try:
            await client.generate("x")
        finally:
            await client.aclose()

    with pytest.raises(TutorServiceError):
        asyncio.run(run())
