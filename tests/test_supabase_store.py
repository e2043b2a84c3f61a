from unittest.mock import MagicMock

import pytest
import requests

from portfolio_api.errors import OrderingUnsupported, StoreConfigurationError, StoreUnavailable, ValidationError
from portfolio_api.repositories import OrderBy, get_record_store
from portfolio_api.resources import TIMELINE, ResourceClient
from portfolio_api.settings import Settings
from portfolio_api.supabase import SupabaseRecordStore


def response(status=200, body=None):
    resp = MagicMock(spec=requests.Response)
    resp.status_code = status
    resp.json.return_value = body
    resp.text = ""
    return resp


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def sb(session):
    return SupabaseRecordStore("https://proj.supabase.co/", "service-key", timeout=5, session=session)


class TestSupabaseRecordStore:
    def test_ordered_list_request(self, sb, session):
        session.request.return_value = response(body=[{"id": "1", "date_value": "2024-01-01"}])
        rows = sb.list("timeline", order_by=OrderBy("date_value"))
        assert rows == [{"id": "1", "date_value": "2024-01-01"}]
        method, url = session.request.call_args.args
        kwargs = session.request.call_args.kwargs
        assert (method, url) == ("GET", "https://proj.supabase.co/rest/v1/timeline")
        assert kwargs["params"] == {"select": "*", "order": "date_value.desc.nullslast"}
        assert kwargs["headers"]["apikey"] == "service-key"
        assert kwargs["headers"]["Authorization"] == "Bearer service-key"
        assert kwargs["timeout"] == 5

    def test_undefined_order_column(self, sb, session):
        session.request.return_value = response(400, {"code": "42703", "message": "column does not exist"})
        with pytest.raises(OrderingUnsupported):
            sb.list("timeline", order_by=OrderBy("date_value"))

    def test_timeout_is_store_unavailable(self, sb, session):
        session.request.side_effect = requests.Timeout("slow")
        with pytest.raises(StoreUnavailable):
            sb.list("career")

    def test_bad_credentials_is_store_unavailable(self, sb, session):
        session.request.return_value = response(401, {"message": "Invalid API key"})
        with pytest.raises(StoreUnavailable):
            sb.list("career")

    def test_insert_returns_representation(self, sb, session):
        session.request.return_value = response(201, [{"id": "abc", "content": "x"}])
        row = sb.insert("shitposts", {"content": "x"})
        assert row == {"id": "abc", "content": "x"}
        assert session.request.call_args.kwargs["headers"]["Prefer"] == "return=representation"

    def test_rejected_insert_is_validation_error(self, sb, session):
        session.request.return_value = response(400, {"code": "23502", "message": "null value"})
        with pytest.raises(ValidationError, match="null value"):
            sb.insert("timeline", {"title": "x"})

    def test_update_reports_missing_row(self, sb, session):
        session.request.return_value = response(200, [])
        assert sb.update("career", "missing", {"order": 1}) is False
        assert session.request.call_args.kwargs["params"] == {"id": "eq.missing"}

        session.request.return_value = response(200, [{"id": "1"}])
        assert sb.update("career", "1", {"order": 1}) is True

    def test_no_subscriptions(self, sb):
        assert sb.supports_subscriptions is False
        assert sb.subscribe("timeline", lambda e: None) is None


class TestResourceClientOnSupabase:
    def test_fallback_sort_when_ordering_fails(self, sb, session):
        session.request.side_effect = [
            response(400, {"code": "42703", "message": "column timeline.date_value does not exist"}),
            response(200, [
                {"id": "1", "date_value": "2019-01-01", "title": "old"},
                {"id": "2", "date_value": "2024-01-01", "title": "new"},
            ]),
        ]
        entries = ResourceClient(TIMELINE, sb).list()
        assert [e["title"] for e in entries] == ["new", "old"]
        assert "order" not in session.request.call_args.kwargs["params"]


class TestStoreFactory:
    def test_supabase_requires_configuration(self):
        with pytest.raises(StoreConfigurationError):
            get_record_store(Settings(store_backend="supabase"))

    def test_supabase_selected(self):
        store = get_record_store(
            Settings(store_backend="supabase", supabase_url="https://x.supabase.co", supabase_service_key="k")
        )
        assert isinstance(store, SupabaseRecordStore)
        store.close()

    def test_sqlite_selected(self, tmp_path):
        from portfolio_api.db import SQLiteRecordStore

        store = get_record_store(Settings(store_backend="sqlite", sqlite_db_path=str(tmp_path / "x.db")))
        assert isinstance(store, SQLiteRecordStore)
