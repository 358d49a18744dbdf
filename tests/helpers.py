"""HTTP helpers shared by the endpoint tests.

The refresh cookie is scoped to the auth path, so tests pass it explicitly
through the Cookie header instead of relying on the client's cookie jar.
"""

from httpx import AsyncClient, Response

from src.config.settings import settings

API = settings.api_prefix
COOKIE = settings.refresh_cookie_name


def _set_cookie_headers(response: Response) -> list[str]:
    return [h for h in response.headers.get_list("set-cookie") if h.startswith(f"{COOKIE}=")]


def refresh_cookie(response: Response) -> str | None:
    """Value of the refresh cookie set by ``response``, if any."""
    for header in _set_cookie_headers(response):
        value = header.split(";", 1)[0].split("=", 1)[1].strip('"')
        if value:
            return value
    return None


def cookie_cleared(response: Response) -> bool:
    return any("Max-Age=0" in header for header in _set_cookie_headers(response))


def bearer(access_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {access_token}"}


async def register(client: AsyncClient, email="ann@example.com", password="pw123456", name="Ann"):
    return await client.post(f"{API}/auth/register", json={"email": email, "password": password, "name": name})


async def login(client: AsyncClient, email="ann@example.com", password="pw123456"):
    return await client.post(f"{API}/auth/login", json={"email": email, "password": password})


async def post_refresh(client: AsyncClient, token: str | None) -> Response:
    """POST /auth/refresh presenting ``token`` as the refresh cookie."""
    client.cookies.clear()
    headers = {"Cookie": f"{COOKIE}={token}"} if token else {}
    return await client.post(f"{API}/auth/refresh", headers=headers)


async def post_logout(client: AsyncClient, access_token: str | None, token: str | None = None) -> Response:
    client.cookies.clear()
    headers = bearer(access_token) if access_token else {}
    if token:
        headers["Cookie"] = f"{COOKIE}={token}"
    return await client.post(f"{API}/auth/logout", headers=headers)
