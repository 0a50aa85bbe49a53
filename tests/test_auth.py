from starlette.applications import Starlette
from starlette.responses import PlainTextResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from silver_care_mcp.auth import ApiKeyMiddleware, with_http_middleware


async def ping(request):
    return PlainTextResponse("pong")


def client() -> TestClient:
    app = Starlette(routes=[Route("/mcp", ping, methods=["GET", "POST"])])
    return TestClient(ApiKeyMiddleware(app, api_key="s3cret"))


def test_missing_key_is_rejected():
    response = client().post("/mcp")
    assert response.status_code == 401
    assert response.json()["error"] == "Unauthorized"


def test_wrong_key_is_rejected():
    response = client().get("/mcp", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401


def test_bearer_header_is_accepted():
    response = client().post("/mcp", headers={"Authorization": "Bearer s3cret"})
    assert response.status_code == 200
    assert response.text == "pong"


def test_query_parameter_is_accepted():
    response = client().get("/mcp", params={"apiKey": "s3cret"})
    assert response.status_code == 200


def cors_client(api_key=None) -> TestClient:
    app = Starlette(routes=[Route("/mcp", ping, methods=["GET", "POST"])])
    return TestClient(with_http_middleware(app, api_key, ["*"]))


def test_preflight_is_answered_without_a_key():
    response = cors_client(api_key="s3cret").options(
        "/mcp",
        headers={
            "Origin": "https://inspector.example",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "authorization, content-type, mcp-session-id",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert "POST" in response.headers["access-control-allow-methods"]


def test_cors_headers_on_authorized_and_rejected_responses():
    origin = {"Origin": "https://inspector.example"}

    rejected = cors_client(api_key="s3cret").post("/mcp", headers=origin)
    assert rejected.status_code == 401
    assert rejected.headers["access-control-allow-origin"] == "*"

    accepted = cors_client(api_key="s3cret").post("/mcp", headers={**origin, "Authorization": "Bearer s3cret"})
    assert accepted.status_code == 200
    assert accepted.headers["access-control-expose-headers"] == "mcp-session-id"


def test_cors_applies_without_an_api_key():
    response = cors_client().get("/mcp", headers={"Origin": "https://inspector.example"})
    assert response.status_code == 200
    assert response.text == "pong"
    assert response.headers["access-control-allow-origin"] == "*"
