# tests/test_http.py

from __future__ import annotations

import pytest
import requests

from coletor_client.config import ConfigurationError
from coletor_client.http import ApiHttpError, CommunicationError, HttpClient

from .conftest import BASE_URL
from .fakes import FakeRequestsSession, FakeResponse


def test_post_uses_normalized_base_url_and_timeout(http_client, fake_session):
    fake_session.responses.append(FakeResponse({"Ok": True}))

    assert http_client.post_json("/api/coletor/logout", {"a": 1}) == {"Ok": True}

    call = fake_session.calls[0]
    assert call["url"] == BASE_URL + "/api/coletor/logout"
    assert call["json"] == {"a": 1}
    assert call["timeout"] == 7
    assert fake_session.headers["Content-Type"] == "application/json"


def test_missing_base_url_fails_before_any_request(app_settings, store):
    session = FakeRequestsSession()
    client = HttpClient(app_settings, store, session=session)

    with pytest.raises(ConfigurationError):
        client.post_json("/api/coletor/logout", {})

    assert session.calls == []


def test_network_failure_is_a_communication_error(http_client, fake_session):
    fake_session.responses.append(requests.ConnectionError("refused"))

    with pytest.raises(CommunicationError):
        http_client.post_json("/api/coletor/logout", {})

    assert len(fake_session.calls) == 1


def test_http_error_without_envelope_raises_api_http_error(http_client, fake_session):
    fake_session.responses.append(FakeResponse(status_code=502, text="Bad Gateway"))

    with pytest.raises(ApiHttpError) as excinfo:
        http_client.get_json("/anything")

    assert excinfo.value.status_code == 502
    assert isinstance(excinfo.value, CommunicationError)


def test_http_error_with_application_envelope_is_returned(http_client, fake_session):
    fake_session.responses.append(FakeResponse({"Ok": False, "MensErro": "Tarefa bloqueada"}, status_code=400))

    assert http_client.post_json("/x", {}) == {"Ok": False, "MensErro": "Tarefa bloqueada"}


def test_invalid_json_is_a_communication_error(http_client, fake_session):
    fake_session.responses.append(FakeResponse(text="<html>oops</html>"))

    with pytest.raises(CommunicationError):
        http_client.post_json("/x", {})


def test_empty_body_decodes_to_empty_dict(http_client, fake_session):
    fake_session.responses.append(FakeResponse(text=""))

    assert http_client.post_json("/x", {}) == {}
