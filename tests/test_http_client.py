from unittest.mock import MagicMock

import pytest
import requests

from portfolio_api.errors import NotFound, StoreUnavailable, Unauthorized, ValidationError
from portfolio_api.http_client import HttpResourceClient, build_http_clients
from portfolio_api.resources import CAREER, POSTS, TIMELINE


def response(status=200, body=None):
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status
    resp.json.return_value = body
    resp.content = b"{}" if body is not None else b""
    return resp


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


def test_list_is_anonymous(session):
    session.request.return_value = response(body=[{"id": "1", "content": "hi"}])
    client = HttpResourceClient(POSTS, "http://localhost:3001/api/", admin_token="s3cret", session=session)
    assert client.list() == [{"id": "1", "content": "hi"}]
    method, url = session.request.call_args.args
    assert (method, url) == ("GET", "http://localhost:3001/api/shitposts")
    assert session.request.call_args.kwargs["headers"] == {}


def test_writes_carry_bearer_token(session):
    session.request.return_value = response(201, {"id": "9", "role": "r"})
    client = HttpResourceClient(CAREER, "http://api", admin_token="s3cret", session=session)
    client.create({"role": "r", "company": "c", "period": "p"})
    kwargs = session.request.call_args.kwargs
    assert kwargs["headers"] == {"Authorization": "Bearer s3cret"}
    assert kwargs["json"] == {"role": "r", "company": "c", "period": "p"}

    session.request.return_value = response(200, {"success": True})
    client.update("9", {"order": 2})
    method, url = session.request.call_args.args
    assert (method, url) == ("PUT", "http://api/career/9")
    assert session.request.call_args.kwargs["json"] == {"order": 2}


def test_validation_happens_before_request(session):
    client = HttpResourceClient(TIMELINE, "http://api", session=session)
    with pytest.raises(ValidationError):
        client.create({"title": "no date"})
    with pytest.raises(ValidationError):
        client.delete(" ")
    session.request.assert_not_called()


@pytest.mark.parametrize(
    "status, error",
    [(401, Unauthorized), (404, NotFound), (400, ValidationError), (422, ValidationError), (500, StoreUnavailable)],
)
def test_status_mapping(session, status, error):
    session.request.return_value = response(status, {"error": "nope"})
    client = HttpResourceClient(POSTS, "http://api", admin_token="x", session=session)
    with pytest.raises(error, match="nope"):
        client.delete("1")


def test_connection_error_is_store_unavailable(session):
    session.request.side_effect = requests.ConnectionError("refused")
    client = HttpResourceClient(POSTS, "http://api", session=session)
    with pytest.raises(StoreUnavailable):
        client.list()


def test_get_scans_list(session):
    session.request.return_value = response(body=[{"id": "1"}, {"id": "2"}])
    client = HttpResourceClient(POSTS, "http://api", session=session)
    assert client.get("2") == {"id": "2"}
    with pytest.raises(NotFound):
        client.get("3")


def test_build_http_clients_covers_every_resource():
    clients = build_http_clients("http://api", admin_token="t")
    assert set(clients) == {"timeline", "career", "posts"}
    assert clients["posts"].spec is POSTS
    assert clients["posts"].subscribe(lambda e: None) is None
