"""Tests for API contract generation"""
import pytest

from integration_guard.contracts import (
    ApiContractGenerator,
    build_auth_config,
    default_rate_limit,
    resolve_rate_limit,
    security_headers,
)
from integration_guard.contracts.generator import BASELINE_HEADERS, DEFAULT_RATE_LIMITS, RESTRICTED_AUTH
from integration_guard.models import (
    AuthType,
    Category,
    HttpMethod,
    OperationProposal,
    RateLimitConfig,
    SecurityLevel,
    ValidationRule,
)

from conftest import make_integration


class TestBuildAuthConfig:
    """Test cases for build_auth_config"""

    @pytest.mark.parametrize("suggested", [None, "api_key", "bearer", "oauth2", "none", "nonsense"])
    def test_restricted_floor(self, suggested):
        """Test restricted integrations always get mTLS whatever is suggested"""
        config = build_auth_config(suggested, SecurityLevel.RESTRICTED)
        assert config.type == AuthType.MTLS

    def test_restricted_hmac_when_configured(self):
        config = build_auth_config("api_key", SecurityLevel.RESTRICTED, AuthType.HMAC)
        assert config.type == AuthType.HMAC
        assert config.key_name == "X-Signature"

    def test_restricted_rejects_weak_configured_scheme(self):
        config = build_auth_config("api_key", SecurityLevel.RESTRICTED, AuthType.API_KEY)
        assert config.type in RESTRICTED_AUTH

    @pytest.mark.parametrize("suggested,expected", [
        ("api_key", AuthType.API_KEY),
        ("OAUTH2", AuthType.OAUTH2),
        (" hmac ", AuthType.HMAC),
        (None, AuthType.BEARER),
        ("", AuthType.BEARER),
        ("kerberos", AuthType.BEARER),
    ])
    def test_suggestions_below_restricted(self, suggested, expected):
        assert build_auth_config(suggested, SecurityLevel.CONFIDENTIAL).type == expected

    def test_api_key_config(self):
        config = build_auth_config("api_key", SecurityLevel.INTERNAL)
        assert config.location == "header"
        assert config.key_name == "X-API-Key"


class TestRateLimits:
    """Test cases for rate limit resolution"""

    def test_every_category_has_a_default(self):
        for category in Category:
            limit = default_rate_limit(category)
            assert limit.requests > 0
            assert limit.window

    @pytest.mark.parametrize("category,requests,burst", [
        (Category.PAYMENT, 50, 10),
        (Category.AUTH, 20, 5),
        (Category.ANALYTICS, 500, 100),
        (Category.AI, 30, 5),
    ])
    def test_category_defaults(self, category, requests, burst):
        assert default_rate_limit(category) == RateLimitConfig(requests, "1m", burst)

    def test_well_formed_suggestion_is_kept(self):
        suggested = RateLimitConfig(requests=10, window="30s", burst=2)
        assert resolve_rate_limit(suggested, Category.PAYMENT) == suggested

    @pytest.mark.parametrize("suggested", [
        RateLimitConfig(requests=0, window="1m"),
        RateLimitConfig(requests=10, window="a minute"),
        RateLimitConfig(requests=10, window=""),
        RateLimitConfig(requests=10, window="1m", burst=11),
        RateLimitConfig(requests=10, window="1m", burst=0),
    ])
    def test_malformed_suggestion_uses_default(self, suggested):
        assert resolve_rate_limit(suggested, Category.CRM) == DEFAULT_RATE_LIMITS[Category.CRM]

    def test_missing_suggestion_uses_default(self):
        assert resolve_rate_limit(None, Category.STORAGE) == DEFAULT_RATE_LIMITS[Category.STORAGE]


class TestSecurityHeaders:
    """Test cases for security_headers"""

    @pytest.mark.parametrize("level", [SecurityLevel.PUBLIC, SecurityLevel.INTERNAL])
    def test_baseline_only(self, level):
        assert security_headers(level) == BASELINE_HEADERS

    @pytest.mark.parametrize("level", [SecurityLevel.CONFIDENTIAL, SecurityLevel.RESTRICTED])
    def test_strict_headers(self, level):
        headers = security_headers(level)
        assert len(headers) == 6
        assert headers["Strict-Transport-Security"] == "max-age=31536000; includeSubDomains"
        assert headers["Cache-Control"] == "no-store, no-cache, must-revalidate"
        assert headers["X-Frame-Options"] == "DENY"

    def test_headers_are_copies(self):
        security_headers(SecurityLevel.PUBLIC)["X-Frame-Options"] = "SAMEORIGIN"
        assert BASELINE_HEADERS["X-Frame-Options"] == "DENY"


class TestApiContractGenerator:
    """Test cases for ApiContractGenerator"""

    @pytest.fixture
    def generator(self):
        return ApiContractGenerator()

    def test_default_scaffold(self, generator):
        """Test an empty proposal list yields the CRUD scaffold"""
        integration = make_integration(["email", "password"], integration_id="int_7")
        apis = generator.generate(integration, [])

        assert [api.method for api in apis] == [
            HttpMethod.GET, HttpMethod.GET, HttpMethod.POST, HttpMethod.PUT, HttpMethod.DELETE
        ]
        assert [api.id for api in apis] == [f"api_int_7_{i}" for i in range(5)]
        assert apis[0].endpoint == "/api/integrations/int_7/records"
        assert apis[1].endpoint == "/api/integrations/int_7/records/{recordId}"
        assert all(api.integration_id == "int_7" for api in apis)
        assert all(api.description_ar for api in apis)

    def test_scaffold_schemas(self, generator):
        """Test scaffold request bodies list the classified fields and hide write-only ones"""
        integration = make_integration(["email", "password"])
        create = generator.generate(integration, [])[2]

        assert create.request_schema["properties"]["email"] == {"type": "string", "format": "email"}
        assert create.request_schema["properties"]["password"]["writeOnly"] is True
        assert "password" not in create.response_schema["properties"]
        assert "id" in create.response_schema["properties"]

    def test_write_operations_get_derived_validation(self, generator):
        integration = make_integration(["email", "credit_card"])
        apis = generator.generate(integration, [])

        get_rules = [rule.field for rule in apis[0].validation]
        post_rules = [rule.field for rule in apis[2].validation]
        assert get_rules == []
        assert post_rules == ["email", "credit_card"]

    def test_proposal_rules_take_precedence(self, generator):
        """Test a proposed rule for a field is not duplicated by a derived one"""
        integration = make_integration(["email"])
        custom = ValidationRule(field="email", type="email", required=True)
        proposal = OperationProposal(HttpMethod.POST, "/api/integrations/int_1/subscribe",
                                     validation=(custom,))
        api = generator.generate(integration, [proposal])[0]
        assert api.validation == (custom,)

    def test_restricted_escalation(self, generator):
        """Test every operation of a restricted integration is escalated"""
        integration = make_integration(["credit_card"], category=Category.PAYMENT)
        proposals = [
            OperationProposal(HttpMethod.POST, "/api/integrations/int_1/charge", auth_type="api_key",
                              rate_limit=RateLimitConfig(requests=5, window="1s")),
            OperationProposal(HttpMethod.GET, "/api/integrations/int_1/charges", auth_type="none"),
        ]
        apis = generator.generate(integration, proposals)

        assert all(api.authentication.type == AuthType.MTLS for api in apis)
        assert all(len(api.security_headers) == 6 for api in apis)
        assert apis[0].rate_limit == RateLimitConfig(requests=5, window="1s")
        assert apis[1].rate_limit == DEFAULT_RATE_LIMITS[Category.PAYMENT]

    def test_hmac_configured_generator(self):
        generator = ApiContractGenerator(restricted_auth="hmac")
        integration = make_integration(["ssn"])
        apis = generator.generate(integration, [])
        assert {api.authentication.type for api in apis} == {AuthType.HMAC}

    def test_custom_base_path(self):
        generator = ApiContractGenerator(base_path="/v2/hub/")
        integration = make_integration(["name"], integration_id="int_9")
        assert generator.generate(integration, [])[0].endpoint == "/v2/hub/int_9/records"

    def test_to_dict(self, generator):
        integration = make_integration(["email"])
        data = generator.generate(integration, [])[2].to_dict()

        assert data["method"] == "POST"
        assert data["integrationId"] == integration.id
        assert data["authentication"] == {"type": "bearer", "location": "header"}
        assert data["rateLimit"] == {"requests": 100, "window": "1m", "burst": 20}
        assert data["validation"][0]["field"] == "email"
