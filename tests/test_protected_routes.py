import pytest


@pytest.mark.parametrize("method, path", [
    ("get", "/dashboard"),
    ("get", "/events"),
    ("get", "/events/1"),
    ("get", "/attendance-history"),
    ("get", "/profile"),
    ("get", "/my-qr"),
    ("get", "/setup-profile"),
    ("get", "/auth/me"),
    ("post", "/events/1/attendance"),
])
def test_anonymous_requests_redirect_to_login(client, method, path):
    kwargs = {"json": {"student_id": "user-1"}} if method == "post" else {}
    response = getattr(client, method)(path, follow_redirects=False, **kwargs)

    assert response.status_code == 302
    assert response.headers["location"] == "/login"


def test_user_without_profile_is_sent_to_login(client, backend, sign_in):
    sign_in(backend.add_student(with_profile=False))

    response = client.get("/dashboard", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == "/login"
    assert backend.directory.sign_out_calls == 1


def test_expired_cookies_are_treated_as_anonymous(client, backend, sign_in):
    session = backend.add_student()
    del backend.directory.sessions[session.access_token]
    sign_in(session)

    response = client.get("/profile", follow_redirects=False)

    assert response.status_code == 302


def test_public_pages_need_no_session(client):
    assert client.get("/login").status_code == 200
    assert client.get("/register").status_code == 200
    assert client.get("/health").json() == {"status": "healthy"}


def test_security_headers(client):
    response = client.get("/health")
    assert response.headers["x-content-type-options"] == "nosniff"
    assert response.headers["x-frame-options"] == "DENY"
