"""Tests for /users routes (username lookup, friends list)."""
import logging
from unittest.mock import patch

import httpx

from oauth_relay import roblox


def test_user_by_username(client):
    with patch("oauth_relay.roblox.resolve_username", return_value=156):
        r = client.get("/users/by-username/builderman")
    assert r.status_code == 200
    assert r.json() == {"username": "builderman", "user_id": 156}


def test_user_by_username_not_found(client):
    with patch("oauth_relay.roblox.resolve_username", side_effect=roblox.UsernameNotFound("nobody")):
        r = client.get("/users/by-username/nobody")
    assert r.status_code == 404
    assert r.json()["detail"]["error"] == "not_found"


def test_user_by_username_upstream_error_is_opaque(client):
    err = roblox.UpstreamError("Failed", status_code=500, body="stack trace from roblox")
    with patch("oauth_relay.roblox.resolve_username", side_effect=err):
        r = client.get("/users/by-username/builderman")
    assert r.status_code == 502
    assert "stack trace" not in r.text


def test_user_friends(client):
    with patch("oauth_relay.roblox.httpx.get") as get:
        get.return_value.status_code = 200
        get.return_value.json.return_value = {"data": [{"id": 5}]}
        r = client.get("/users/123/friends")
    assert r.status_code == 200
    assert r.json() == {"user_id": 123, "friends": [{"id": 5}]}


def test_user_friends_invalid_id(client):
    with patch("oauth_relay.roblox.httpx.get") as get:
        r = client.get("/users/abc/friends")
        r0 = client.get("/users/0/friends")
    assert r.status_code == 400
    assert r0.status_code == 400
    get.assert_not_called()


def test_user_friends_timeout(client):
    with patch("oauth_relay.roblox.list_friends", side_effect=roblox.UpstreamTimeout("slow")):
        r = client.get("/users/123/friends")
    assert r.status_code == 504
    assert r.json()["detail"]["error"] == "upstream_timeout"


def test_user_by_username_blank_is_400(client):
    with patch("oauth_relay.roblox.httpx.post") as post:
        r = client.get("/users/by-username/%20")
    assert r.status_code == 400
    assert r.json()["detail"]["error"] == "invalid_request"
    post.assert_not_called()


def test_user_by_username_malformed_upstream_is_502(client):
    with patch("oauth_relay.roblox.httpx.post") as post:
        post.return_value.status_code = 200
        post.return_value.json.return_value = {"data": [{"name": "x"}]}
        r = client.get("/users/by-username/x")
    assert r.status_code == 502
    assert r.json()["detail"]["error"] == "upstream_error"


def test_user_friends_oversized_id_is_400(client):
    with patch("oauth_relay.roblox.httpx.get") as get:
        r = client.get("/users/" + "9" * 5000 + "/friends")
    assert r.status_code == 400
    get.assert_not_called()


def test_user_friends_upstream_error_is_502(client):
    err = roblox.UpstreamError("Failed", status_code=503, body="maintenance page")
    with patch("oauth_relay.roblox.list_friends", side_effect=err) as list_friends:
        r = client.get("/users/123/friends")
    assert r.status_code == 502
    assert r.json()["detail"]["error"] == "upstream_error"
    assert "maintenance" not in r.text
    list_friends.assert_called_once_with(123)


def test_user_friends_transport_failure_logged_once(client, caplog):
    with caplog.at_level(logging.ERROR, logger="oauth_relay"):
        with patch("oauth_relay.roblox.httpx.get", side_effect=httpx.ConnectError("refused")):
            r = client.get("/users/123/friends")
    assert r.status_code == 502
    errors = [rec for rec in caplog.records if rec.levelno == logging.ERROR]
    assert len(errors) == 1
    assert errors[0].name == "oauth_relay.roblox"
