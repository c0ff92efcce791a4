"""
Tests for configuration, validator wiring, the validator registry,
resilience patterns and error types.
"""

import asyncio
import json
from datetime import timedelta

import pytest

from xacml_scope import build_validator, ValidatorConfig, XACMLScopeValidator
from xacml_scope.audit.logger import FileAuditLogger
from xacml_scope.core.config import parse_duration_string
from xacml_scope.integration import (
    CallableDecisionOracle,
    HttpDecisionOracle,
    InMemoryApplicationStore,
    InMemoryValidationConfig,
)
from xacml_scope.resilience import Retry, RetryConfig, Timeout, TimeoutConfig
from xacml_scope.types.errors import (
    ConfigurationError,
    ErrorCode,
    OracleError,
    ProtocolError,
    ScopeValidationError,
)
from xacml_scope.validators import ScopeValidator, ScopeValidatorRegistry, default_registry


class TestDurations:
    """Test duration parsing"""

    @pytest.mark.parametrize("value,expected", [
        ("500ms", timedelta(milliseconds=500)),
        ("10s", timedelta(seconds=10)),
        ("2m", timedelta(minutes=2)),
        ("1h", timedelta(hours=1)),
        ("3", timedelta(seconds=3)),
        (1.5, timedelta(seconds=1.5)),
    ])
    def test_parse(self, value, expected):
        assert parse_duration_string(value) == expected

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_duration_string("soon")


class TestValidatorConfig:
    """Test configuration loading and validation"""

    def test_defaults(self):
        config = ValidatorConfig()
        assert config.oracle_timeout == timedelta(seconds=10)
        assert config.retry_attempts == 1
        assert config.validator == "XACML Scope Validator"
        assert config.validate() is True

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("XACML_SCOPE_PDP_ENDPOINT", "https://pdp.example.com/decision")
        monkeypatch.setenv("XACML_SCOPE_ORACLE_TIMEOUT", "2s")
        monkeypatch.setenv("XACML_SCOPE_RETRY_ATTEMPTS", "3")

        config = ValidatorConfig.from_env()
        assert config.pdp_endpoint == "https://pdp.example.com/decision"
        assert config.oracle_timeout == timedelta(seconds=2)
        assert config.retry_attempts == 3

    def test_from_json_file(self, tmp_path):
        path = tmp_path / "validator.json"
        path.write_text(json.dumps({"pdp_endpoint": "http://localhost:9443/pdp",
                                    "retry_initial_delay": "250ms"}))

        config = ValidatorConfig.from_file(str(path))
        assert config.pdp_endpoint == "http://localhost:9443/pdp"
        assert config.retry_initial_delay == timedelta(milliseconds=250)

    def test_from_yaml_file(self, tmp_path):
        path = tmp_path / "validator.yaml"
        path.write_text("pdp_endpoint: http://localhost:9443/pdp\noracle_timeout: 5s\n")

        config = ValidatorConfig.from_file(str(path))
        assert config.oracle_timeout == timedelta(seconds=5)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            ValidatorConfig.from_file(str(tmp_path / "missing.yaml"))

    def test_unsupported_file(self, tmp_path):
        path = tmp_path / "validator.ini"
        path.write_text("[pdp]\n")
        with pytest.raises(ConfigurationError):
            ValidatorConfig.from_file(str(path))

    def test_unknown_key(self):
        with pytest.raises(ConfigurationError) as exc_info:
            ValidatorConfig.from_dict({"pdp_url": "http://x"})
        assert exc_info.value.details["config_key"] == "pdp_url"

    def test_bad_value(self):
        with pytest.raises(ConfigurationError):
            ValidatorConfig.from_dict({"oracle_timeout": "later"})

    @pytest.mark.parametrize("kwargs", [
        {"oracle_timeout": timedelta(0)},
        {"retry_attempts": 0},
        {"pdp_endpoint": "ftp://pdp"},
        {"log_level": "CHATTY"},
    ])
    def test_validate_rejects(self, kwargs):
        with pytest.raises(ConfigurationError):
            ValidatorConfig(**kwargs).validate()


class TestBuildValidator:
    """Test wiring a validator from configuration"""

    def test_with_explicit_oracle(self):
        oracle = CallableDecisionOracle(lambda request: "")
        validator = build_validator(ValidatorConfig(), InMemoryApplicationStore(),
                                    InMemoryValidationConfig(), decision_oracle=oracle)

        assert isinstance(validator, XACMLScopeValidator)
        assert validator.decision_oracle is oracle
        assert validator.retry.config.max_attempts == 1

    @pytest.mark.asyncio
    async def test_http_oracle_from_endpoint(self, tmp_path):
        config = ValidatorConfig(pdp_endpoint="http://localhost:9763/pdp",
                                 oracle_timeout=timedelta(seconds=3),
                                 retry_attempts=2,
                                 audit_log_path=str(tmp_path / "audit.log"))
        validator = build_validator(config, InMemoryApplicationStore(), InMemoryValidationConfig())

        assert isinstance(validator.decision_oracle, HttpDecisionOracle)
        assert validator.decision_oracle.tenant_context is validator.tenant_context
        assert isinstance(validator.audit_logger, FileAuditLogger)
        assert validator.retry.config.max_attempts == 2
        await validator.close()

    def test_missing_endpoint(self):
        with pytest.raises(ConfigurationError):
            build_validator(ValidatorConfig(), InMemoryApplicationStore(),
                            InMemoryValidationConfig())

    def test_unknown_validator(self):
        config = ValidatorConfig(validator="JDBC Scope Validator")
        with pytest.raises(ConfigurationError):
            build_validator(config, InMemoryApplicationStore(), InMemoryValidationConfig(),
                            decision_oracle=CallableDecisionOracle(lambda request: ""))


class AllowAllValidator(ScopeValidator):
    name = "Allow All"

    def __init__(self, **kwargs):
        self.kwargs = kwargs

    async def validate(self, token, resource):
        return True


class TestRegistry:
    """Test validator registration"""

    def test_xacml_validator_registered(self):
        assert "XACML Scope Validator" in default_registry

    def test_register_and_create(self):
        registry = ScopeValidatorRegistry()
        registry.register(AllowAllValidator.name, AllowAllValidator)

        validator = registry.create("Allow All", decision_oracle=None)
        assert isinstance(validator, AllowAllValidator)
        assert validator.can_handle() is True
        assert registry.names() == ["Allow All"]

    def test_unregister(self):
        registry = ScopeValidatorRegistry()
        registry.register(AllowAllValidator.name, AllowAllValidator)

        assert registry.unregister("Allow All") is True
        assert "Allow All" not in registry
        with pytest.raises(ConfigurationError):
            registry.create("Allow All")


class TestResilience:
    """Test retry and timeout patterns"""

    @pytest.mark.asyncio
    async def test_timeout_raises_oracle_error(self):
        async def slow():
            await asyncio.sleep(1)

        timeout = Timeout(TimeoutConfig(timeout=timedelta(milliseconds=20)))
        with pytest.raises(OracleError) as exc_info:
            await timeout.execute(slow)
        assert exc_info.value.error_code == ErrorCode.TIMEOUT

    @pytest.mark.asyncio
    async def test_retry_gives_up_after_max_attempts(self):
        calls = 0

        async def failing():
            nonlocal calls
            calls += 1
            raise OracleError("down")

        retry = Retry(RetryConfig(max_attempts=3, initial_delay=timedelta(0), jitter=False))
        with pytest.raises(OracleError):
            await retry.execute(failing)
        assert calls == 3

    def test_backoff_is_capped(self):
        retry = Retry(RetryConfig(max_attempts=5, initial_delay=timedelta(seconds=1),
                                  max_delay=timedelta(seconds=3), jitter=False))
        assert [retry._calculate_delay(n) for n in (1, 2, 3, 4)] == [1.0, 2.0, 3.0, 3.0]

    def test_invalid_attempts(self):
        with pytest.raises(ValueError):
            RetryConfig(max_attempts=0)


class TestErrors:
    """Test error types"""

    def test_to_dict(self):
        cause = ValueError("bad xml")
        error = ProtocolError("response unreadable", details={"root": "html"}, cause=cause)

        assert isinstance(error, ScopeValidationError)
        assert error.to_dict() == {
            'error': 'protocol_error',
            'message': 'response unreadable',
            'details': {'root': 'html'},
            'cause': 'bad xml',
        }
        assert str(error) == "protocol_error: response unreadable"
