"""
Tests for the authorization gate and the route policy table.
"""

from datetime import timedelta

import jwt
import pytest

from elikia.auth.errors import AuthorizationDenied
from elikia.auth.gate import AuthContext, AuthorizationGate, RoutePolicy
from elikia.auth.route_policies import RoutePolicyTable, load_route_policies
from elikia.config import ConfigurationError
from elikia.core.models import Role

from tests.conftest import NOW


@pytest.fixture
def gate(tokens, clock):
    return AuthorizationGate(tokens, clock=clock)


def bearer(token: str) -> str:
    return f"Bearer {token}"


# =============================================================================
# Gate
# =============================================================================


class TestPublicRoutes:
    def test_no_header_needed(self, gate):
        ctx = gate.authorize(None, RoutePolicy.public())

        assert ctx == AuthContext.anonymous()
        assert not ctx.is_authenticated

    def test_garbage_header_ignored(self, gate):
        assert gate.authorize("Bearer junk", RoutePolicy.public()).subject is None


class TestAuthentication:
    @pytest.mark.parametrize("header", [None, "", "Basic dXNlcjpwYXNz", "bearer abc", "Bearer"])
    def test_missing_bearer_is_401(self, gate, header):
        with pytest.raises(AuthorizationDenied) as exc_info:
            gate.authorize(header, RoutePolicy.authenticated())

        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Authorization header missing"

    def test_invalid_token_is_403(self, gate):
        with pytest.raises(AuthorizationDenied) as exc_info:
            gate.authorize(bearer("invalid.token"), RoutePolicy.authenticated())

        assert exc_info.value.status_code == 403
        assert exc_info.value.message == "Invalid token"

    def test_empty_bearer_token_is_403(self, gate):
        with pytest.raises(AuthorizationDenied) as exc_info:
            gate.authorize("Bearer ", RoutePolicy.authenticated())

        assert exc_info.value.status_code == 403

    def test_expired_token_is_403(self, gate, tokens, clock):
        token = tokens.issue("admin@mail.com", Role.ADMIN, NOW)
        clock.advance(minutes=60)

        with pytest.raises(AuthorizationDenied) as exc_info:
            gate.authorize(bearer(token), RoutePolicy.authenticated())

        assert exc_info.value.status_code == 403

    def test_valid_token_gives_context(self, gate, tokens):
        token = tokens.issue("member@mail.com", Role.MEMBER, NOW)

        ctx = gate.authorize(bearer(token), RoutePolicy.authenticated())

        assert ctx.subject == "member@mail.com"
        assert ctx.role == "MEMBER"
        assert ctx.is_authenticated
        assert not ctx.is_admin

    def test_explicit_now_overrides_clock(self, gate, tokens):
        token = tokens.issue("admin@mail.com", Role.ADMIN, NOW)

        with pytest.raises(AuthorizationDenied):
            gate.authorize(bearer(token), RoutePolicy.authenticated(), now=NOW + timedelta(days=1))


class TestRoles:
    def test_member_token_on_admin_route_is_403(self, gate, tokens):
        token = tokens.issue("member@mail.com", Role.MEMBER, NOW)

        with pytest.raises(AuthorizationDenied) as exc_info:
            gate.authorize(bearer(token), RoutePolicy.role(Role.ADMIN))

        assert exc_info.value.status_code == 403
        assert exc_info.value.message == "Access denied"

    def test_admin_token_on_admin_route(self, gate, tokens):
        token = tokens.issue("admin@mail.com", Role.ADMIN, NOW)

        assert gate.authorize(bearer(token), RoutePolicy.role("ADMIN")).is_admin

    def test_role_comparison_is_case_sensitive(self, gate, tokens):
        token = tokens.issue("admin@mail.com", "admin", NOW)

        with pytest.raises(AuthorizationDenied) as exc_info:
            gate.authorize(bearer(token), RoutePolicy.role(Role.ADMIN))

        assert exc_info.value.status_code == 403

    def test_token_without_role_on_role_route(self, gate, settings):
        payload = {"sub": "x@mail.com", "iat": int(NOW.timestamp()), "exp": int(NOW.timestamp()) + 60}
        token = jwt.encode(payload, settings.jwt_secret_key, algorithm="HS256")

        assert gate.authorize(bearer(token), RoutePolicy.authenticated()).role is None
        with pytest.raises(AuthorizationDenied) as exc_info:
            gate.authorize(bearer(token), RoutePolicy.role(Role.MEMBER))
        assert exc_info.value.status_code == 403


# =============================================================================
# Route policy table
# =============================================================================


class TestRoutePolicyTable:
    def test_packaged_table_covers_api_routes(self):
        table = load_route_policies()

        assert table.get("auth.login") == RoutePolicy.public()
        assert table.get("auth.me") == RoutePolicy.authenticated()
        assert table.get("admin.create_admin") == RoutePolicy.role(Role.ADMIN)
        assert table.get("admin.set_member_status") == RoutePolicy.role(Role.ADMIN)
        assert "health" in table

    def test_unknown_route_is_configuration_error(self):
        with pytest.raises(ConfigurationError, match="reports.export"):
            load_route_policies().get("reports.export")

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "policies.yaml"
        path.write_text(
            "routes:\n"
            "  public.page:\n"
            "    auth_required: false\n"
            "  members.only:\n"
            "    required_role: MEMBER\n"
            "  signed.in:\n"
        )

        table = load_route_policies(path)

        assert len(table) == 3
        assert table.names() == ["members.only", "public.page", "signed.in"]
        assert table.get("members.only") == RoutePolicy(True, "MEMBER")
        assert table.get("signed.in") == RoutePolicy.authenticated()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_route_policies(tmp_path / "absent.yaml")

    def test_broken_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("routes: [unclosed\n")

        with pytest.raises(ConfigurationError):
            load_route_policies(path)

    @pytest.mark.parametrize(
        "data",
        [
            None,
            {},
            {"routes": ["auth.login"]},
            {"routes": {"x": "public"}},
            {"routes": {"x": {"auth_required": "no"}}},
            {"routes": {"x": {"required_role": 1}}},
            {"routes": {"x": {"auth_required": False, "required_role": "ADMIN"}}},
            {"routes": {"x": {"role": "ADMIN"}}},
        ],
    )
    def test_invalid_tables(self, data):
        with pytest.raises(ConfigurationError):
            RoutePolicyTable.from_dict(data)
