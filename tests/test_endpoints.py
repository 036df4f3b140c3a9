"""
Tests for the endpoint catalogue and environments.
"""

import pytest

from verisoul.endpoints import ApiEndpoint, HttpMethod, VerisoulEnvironment


class TestEnvironment:
    def test_base_urls(self):
        assert VerisoulEnvironment.SANDBOX.base_url == "https://api.sandbox.verisoul.ai"
        assert VerisoulEnvironment.PRODUCTION.base_url == "https://api.prod.verisoul.ai"

    def test_from_string(self):
        assert VerisoulEnvironment("production") is VerisoulEnvironment.PRODUCTION


class TestCatalogue:
    @pytest.mark.parametrize(
        ("endpoint", "method", "template"),
        [
            (ApiEndpoint.ACCOUNT_GET, HttpMethod.GET, "/account/{account_id}"),
            (ApiEndpoint.ACCOUNT_UPDATE, HttpMethod.PUT, "/account/{account_id}"),
            (ApiEndpoint.ACCOUNT_DELETE, HttpMethod.DELETE, "/account/{account_id}"),
            (ApiEndpoint.SESSION_AUTHENTICATE, HttpMethod.POST, "/session/authenticate"),
            (ApiEndpoint.VERIFY_PHONE, HttpMethod.POST, "/phone"),
            (ApiEndpoint.LIST_GET_ALL, HttpMethod.GET, "/list"),
            (
                ApiEndpoint.LIST_REMOVE_ACCOUNT,
                HttpMethod.DELETE,
                "/list/{list_name}/account/{account_id}",
            ),
        ],
    )
    def test_method_and_template(self, endpoint, method, template):
        assert endpoint.method is method
        assert endpoint.url_template == template

    def test_every_endpoint_is_distinct(self):
        assert len(ApiEndpoint) == 21


class TestWithParameters:
    def test_substitutes_placeholders(self):
        path = ApiEndpoint.LIST_ADD_ACCOUNT.with_parameters(
            {"list_name": "blocked", "account_id": "user-1"}
        )
        assert path == "/list/blocked/account/user-1"

    def test_ignores_parameters_without_placeholder(self):
        path = ApiEndpoint.SESSION_AUTHENTICATE.with_parameters({"accounts_linked": True})
        assert path == "/session/authenticate"

    def test_formats_booleans(self):
        path = ApiEndpoint.FACE_MATCH_SESSION_START.with_parameters(
            {"referring_session_id": False}
        )
        assert path == "/liveness/session?referring_session_id=false"

    def test_drops_unfilled_query_placeholder(self):
        assert ApiEndpoint.FACE_MATCH_SESSION_START.with_parameters() == "/liveness/session"

    def test_keeps_literal_query_parameters(self):
        path = ApiEndpoint.ID_CHECK_SESSION_START.with_parameters({"id": True})
        assert path == "/liveness/session?id=true"

    def test_fills_query_placeholder(self):
        path = ApiEndpoint.ID_CHECK_SESSION_START.with_parameters(
            {"referring_session_id": "abc"}
        )
        assert path == "/liveness/session?id=true&referring_session_id=abc"

    def test_no_parameters(self):
        assert ApiEndpoint.LIST_GET_ALL.with_parameters(None) == "/list"
