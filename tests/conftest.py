# Pytest fixtures shared by unit and API tests.
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

ACCESS_SECRET = "test-access-secret-0123456789abcdef0123"
REFRESH_SECRET = "test-refresh-secret-0123456789abcdef012"
STRONG_PASSWORD = "Password123"


# Keep PBKDF2 cheap and secrets fixed for every test.
@pytest.fixture(autouse=True)
def test_settings(monkeypatch):
    monkeypatch.setenv("PASSWORD_HASH_ITERATIONS", "1000")
    monkeypatch.setenv("JWT_SECRET", ACCESS_SECRET)
    monkeypatch.setenv("JWT_REFRESH_SECRET", REFRESH_SECRET)
    monkeypatch.delenv("GROQ_API_KEY", raising=False)


@pytest.fixture()
def users():
    from quiz_studio.users import InMemoryUserDirectory

    return InMemoryUserDirectory()


@pytest.fixture()
def tokens():
    from quiz_studio.tokens import TokenService

    return TokenService(
        ACCESS_SECRET,
        REFRESH_SECRET,
        access_ttl=timedelta(minutes=15),
        refresh_ttl=timedelta(days=7),
    )


@pytest.fixture()
def auth_service(users, tokens):
    from quiz_studio.auth import AuthService

    return AuthService(users, tokens)


@pytest.fixture()
def quiz_store():
    from quiz_studio.quiz_store import InMemoryQuizStore

    return InMemoryQuizStore()


# Provide a FastAPI test client with fresh in-memory stores.
@pytest.fixture()
def client():
    from quiz_studio.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def register(client):
    # Register a user over HTTP and return the decoded response body.
    def _register(
        email: str = "a@x.com",
        username: str = "alice",
        password: str = STRONG_PASSWORD,
    ):
        response = client.post(
            "/auth/register",
            json={"email": email, "password": password, "username": username},
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _register


@pytest.fixture()
def bearer():
    def _bearer(token: str):
        return {"Authorization": f"Bearer {token}"}

    return _bearer


# Build a quiz payload with a configurable number of two-answer questions.
@pytest.fixture()
def build_quiz_payload():
    def _build(title: str = "Sample Quiz", question_count: int = 2, **extra):
        questions = []
        for idx in range(1, question_count + 1):
            questions.append(
                {
                    "text": f"{title} question {idx}?",
                    "answers": [
                        {"text": "Right", "isCorrect": True},
                        {"text": "Wrong", "isCorrect": False},
                    ],
                }
            )
        payload = {"title": title, "questions": questions}
        payload.update(extra)
        return payload

    return _build


# Provide a stable sample quiz with known correct answers.
@pytest.fixture()
def geo_quiz_payload():
    return {
        "title": "Geo",
        "description": "Capitals and rivers",
        "questions": [
            {
                "text": "Capital of France?",
                "answers": [
                    {"text": "Paris", "isCorrect": True},
                    {"text": "Lyon", "isCorrect": False},
                ],
            },
            {
                "text": "Longest river in Europe?",
                "answers": [
                    {"text": "Danube", "isCorrect": False},
                    {"text": "Volga", "isCorrect": True},
                    {"text": "Rhine", "isCorrect": False},
                ],
            },
        ],
    }
