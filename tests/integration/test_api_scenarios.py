"""End-to-end scenarios through the pytest plugin fixtures.

These tests consume api_helper, auth_helper, data_generator and
response_validator exactly as a downstream suite would. The API itself is
stubbed with the respx_mock fixture.
"""

import json

import pytest
from httpx import Response

from apiharness.core.exceptions import ConfigNotFoundError
from apiharness.data.models import User
from apiharness.services.models import AuthState
from apiharness.services.resources import ResourceClient

pytestmark = pytest.mark.integration

BASE = "https://api.test.local"

LEANNE = {
    "id": 1,
    "name": "Leanne Graham",
    "username": "Bret",
    "email": "Sincere@april.biz",
}


class TestAuthenticatedScenario:
    async def test_login_then_protected_request(self, respx_mock, auth_helper, api_helper) -> None:
        """
        Given: A login endpoint returning token "abc"
        When: The test logs in with demo/demo and calls a protected path
        Then: The protected request carries "Authorization: Bearer abc"
        """
        login = respx_mock.post(f"{BASE}/auth/login").mock(
            return_value=Response(200, json={"token": "abc", "expiresIn": 3600})
        )
        protected = respx_mock.get(f"{BASE}/protected").mock(return_value=Response(200, json={}))

        await auth_helper.login({"username": "demo", "password": "demo"})
        response = await api_helper.get("/protected")

        assert response.status == 200
        assert json.loads(login.calls.last.request.content) == {
            "username": "demo",
            "password": "demo",
        }
        assert protected.calls.last.request.headers["Authorization"] == "Bearer abc"

    async def test_each_test_starts_anonymous(self, auth_helper) -> None:
        """A session from the previous test never leaks into this one."""
        assert auth_helper.state is AuthState.ANONYMOUS
        assert auth_helper.session is None


class TestUserScenarios:
    async def test_existing_user_validates(self, respx_mock, api_helper, response_validator) -> None:
        respx_mock.get(f"{BASE}/users/1").mock(return_value=Response(200, json=LEANNE))

        response = await api_helper.get("/users/1")

        response_validator.validate_status_code(response, 200)
        response_validator.validate_content_type(response, "application/json")
        response_validator.validate_user(response.data)

    async def test_missing_user_returns_404(self, respx_mock, api_helper, response_validator) -> None:
        """
        Given: /users/999 does not exist
        When: It is requested
        Then: The helper returns the 404 and the test asserts on it
        """
        respx_mock.get(f"{BASE}/users/999").mock(return_value=Response(404, json={}))

        response = await api_helper.get("/users/999")

        response_validator.validate_status_code(response, 404)
        assert response.data == {}

    async def test_user_list_validates_every_item(
        self, respx_mock, api_helper, response_validator, data_generator
    ) -> None:
        users = data_generator.generate_many("user", 5)
        respx_mock.get(f"{BASE}/users").mock(return_value=Response(200, json=users))

        response = await api_helper.get("/users")

        response_validator.validate_array_response(
            response.data, min_items=1, max_items=10, item_validator=response_validator.validate_user
        )

    async def test_create_generated_user(self, respx_mock, api_helper, data_generator) -> None:
        payload = data_generator.generate("user", {"name": "Leanne Graham"})
        route = respx_mock.post(f"{BASE}/users").mock(
            side_effect=lambda request: Response(201, json=json.loads(request.content))
        )
        users = ResourceClient(api_helper, "/users", model=User)

        response = await users.create(payload)

        assert route.called
        assert response.status == 201
        assert response.data.name == "Leanne Graham"


class TestEnvironmentSelection:
    def test_default_environment(self, environment_config) -> None:
        assert environment_config.name == "local"
        assert environment_config.base_url == BASE
        assert environment_config.timeout == 5

    @pytest.mark.api_env("staging")
    def test_marker_selects_environment(self, environment_config) -> None:
        assert environment_config.name == "staging"

    @pytest.mark.api_env("qa")
    def test_unknown_marker_environment_is_rejected(self, api_env, config_provider) -> None:
        """
        Given: A test declaring an unrecognized environment
        When: Its configuration is resolved
        Then: ConfigNotFoundError lists the recognized names
        """
        assert api_env == "qa"

        with pytest.raises(ConfigNotFoundError) as exc_info:
            config_provider.resolve(api_env)

        assert "staging" in exc_info.value.available

    async def test_transport_points_at_environment(self, api_transport, environment_config) -> None:
        assert str(api_transport.base_url).rstrip("/") == environment_config.base_url
