"""
Tests for the XACML attribute model, request builder, codec and resolver.
"""

import logging
import xml.etree.ElementTree as ET

import pytest

from xacml_scope.auth.types import AccessToken, AuthenticatedUser, OAuthApplication
from xacml_scope.authz import (
    AuthorizationRequest,
    AuthorizationSubjectAttribute,
    DataType,
    Decision,
    DecisionResolver,
    RequestBuilder,
    XACMLCodec,
    XACML_NS,
    ACTION_CATEGORY,
    SP_CATEGORY,
    USER_CATEGORY,
    SCOPE_CATEGORY,
    RESOURCE_CATEGORY,
    AUTH_ACTION_ID,
    SP_NAME_ID,
    USERNAME_ID,
    USER_STORE_ID,
    USER_TENANT_DOMAIN_ID,
    RESOURCE_ID,
    SCOPE_ID,
    ACTION_VALIDATE,
)
from xacml_scope.types.errors import EncodingError, ProtocolError, DecodingError


NS = {"x": XACML_NS}


def xacml_response(decision: str) -> str:
    return (
        f'<Response xmlns="{XACML_NS}">'
        f'<Result><Decision>{decision}</Decision>'
        f'<Status><StatusCode Value="urn:oasis:names:tc:xacml:1.0:status:ok"/></Status>'
        f'</Result></Response>'
    )


@pytest.fixture
def token():
    return AccessToken(
        consumer_key="client-1",
        authz_user=AuthenticatedUser("alice", "PRIMARY", "carbon.super"),
        scopes=["read", "write"],
    )


@pytest.fixture
def application():
    return OAuthApplication("myApp", "client-1", "carbon.super")


class TestAttributeModel:
    """Test attribute and request types"""

    def test_attribute_defaults_to_string(self):
        attribute = AuthorizationSubjectAttribute("alice", USERNAME_ID, USER_CATEGORY)
        assert attribute.data_type is DataType.STRING
        assert attribute.data_type.value == "http://www.w3.org/2001/XMLSchema#string"

    def test_attribute_accepts_empty_and_unicode_values(self):
        assert AuthorizationSubjectAttribute("", SCOPE_ID, SCOPE_CATEGORY).value == ""
        assert AuthorizationSubjectAttribute("読み取り", SCOPE_ID, SCOPE_CATEGORY).value == "読み取り"

    def test_attribute_rejects_none(self):
        with pytest.raises(ValueError):
            AuthorizationSubjectAttribute(None, SCOPE_ID, SCOPE_CATEGORY)

    def test_attribute_is_immutable(self):
        attribute = AuthorizationSubjectAttribute("alice", USERNAME_ID, USER_CATEGORY)
        with pytest.raises(AttributeError):
            attribute.value = "bob"

    def test_by_category_keeps_first_appearance_order(self):
        request = AuthorizationRequest()
        request.add("a", USERNAME_ID, USER_CATEGORY)
        request.add("b", SCOPE_ID, SCOPE_CATEGORY)
        request.add("c", USER_STORE_ID, USER_CATEGORY)

        grouped = request.by_category()
        assert list(grouped) == [USER_CATEGORY, SCOPE_CATEGORY]
        assert [a.value for a in grouped[USER_CATEGORY]] == ["a", "c"]

    def test_decision_from_text(self):
        assert Decision.from_text("Permit") is Decision.PERMIT
        assert Decision.from_text(" notapplicable \n") is Decision.NOT_APPLICABLE
        assert Decision.from_text("INDETERMINATE") is Decision.INDETERMINATE
        assert Decision.from_text("Maybe") is None


class TestRequestBuilder:
    """Test authorization request construction"""

    def test_attribute_order(self, token, application):
        request = RequestBuilder().build(token, application, "/api/data")

        assert [(a.attribute_id, a.category) for a in request] == [
            (AUTH_ACTION_ID, ACTION_CATEGORY),
            (SP_NAME_ID, SP_CATEGORY),
            (USERNAME_ID, USER_CATEGORY),
            (USER_STORE_ID, USER_CATEGORY),
            (USER_TENANT_DOMAIN_ID, USER_CATEGORY),
            (RESOURCE_ID, RESOURCE_CATEGORY),
            (SCOPE_ID, SCOPE_CATEGORY),
            (SCOPE_ID, SCOPE_CATEGORY),
        ]

    def test_attribute_values(self, token, application):
        request = RequestBuilder().build(token, application, "/api/data")

        assert [a.value for a in request] == [
            ACTION_VALIDATE, "myApp", "alice", "PRIMARY", "carbon.super",
            "/api/data", "read", "write",
        ]

    def test_empty_scopes_yield_six_attributes(self, token, application):
        token.scopes = []
        request = RequestBuilder().build(token, application, "/api/data")

        assert len(request) == 6
        assert request.values(SCOPE_ID) == []

    def test_scopes_keep_token_order(self, token, application):
        token.scopes = ["write", "admin", "read"]
        request = RequestBuilder().build(token, application, "/api/data")

        assert request.values(SCOPE_ID) == ["write", "admin", "read"]


class TestCodecEncode:
    """Test XACML request rendering"""

    def test_request_document_structure(self, token, application):
        request = RequestBuilder().build(token, application, "/api/data")
        root = ET.fromstring(XACMLCodec().encode(request))

        assert root.tag == f"{{{XACML_NS}}}Request"
        assert root.get("CombinedDecision") == "false"
        assert root.get("ReturnPolicyIdList") == "false"

        categories = [el.get("Category") for el in root.findall("x:Attributes", NS)]
        assert categories == [
            ACTION_CATEGORY, SP_CATEGORY, USER_CATEGORY, RESOURCE_CATEGORY, SCOPE_CATEGORY
        ]

    def test_request_uses_default_namespace(self, token, application):
        document = XACMLCodec().encode(RequestBuilder().build(token, application, "/api/data"))

        assert document.startswith(f'<Request xmlns="{XACML_NS}"')
        assert "ns0:" not in document
        assert 'CombinedDecision="false"' in document

    def test_user_category_carries_three_attributes(self, token, application):
        request = RequestBuilder().build(token, application, "/api/data")
        root = ET.fromstring(XACMLCodec().encode(request))

        user = root.find(f"x:Attributes[@Category='{USER_CATEGORY}']", NS)
        ids = [el.get("AttributeId") for el in user.findall("x:Attribute", NS)]
        assert ids == [USERNAME_ID, USER_STORE_ID, USER_TENANT_DOMAIN_ID]

    def test_scopes_share_one_attribute(self, token, application):
        request = RequestBuilder().build(token, application, "/api/data")
        root = ET.fromstring(XACMLCodec().encode(request))

        scope = root.find(f"x:Attributes[@Category='{SCOPE_CATEGORY}']", NS)
        attributes = scope.findall("x:Attribute", NS)
        assert len(attributes) == 1
        assert attributes[0].get("AttributeId") == SCOPE_ID
        assert attributes[0].get("IncludeInResult") == "false"

        values = attributes[0].findall("x:AttributeValue", NS)
        assert [v.text for v in values] == ["read", "write"]
        assert {v.get("DataType") for v in values} == {DataType.STRING.value}

    def test_no_scope_category_without_scopes(self, token, application):
        token.scopes = []
        request = RequestBuilder().build(token, application, "/api/data")
        root = ET.fromstring(XACMLCodec().encode(request))

        assert root.find(f"x:Attributes[@Category='{SCOPE_CATEGORY}']", NS) is None

    def test_markup_in_values_is_escaped(self, token, application):
        request = RequestBuilder().build(token, application, "/api/data?a=<b>&c")
        root = ET.fromstring(XACMLCodec().encode(request))

        value = root.find(
            f"x:Attributes[@Category='{RESOURCE_CATEGORY}']/x:Attribute/x:AttributeValue", NS
        )
        assert value.text == "/api/data?a=<b>&c"

    def test_control_characters_raise_encoding_error(self, token, application):
        request = RequestBuilder().build(token, application, "/api/\x00data")

        with pytest.raises(EncodingError):
            XACMLCodec().encode(request)


class TestCodecDecode:
    """Test XACML response decision extraction"""

    @pytest.mark.parametrize("text,expected", [
        ("Permit", Decision.PERMIT),
        ("Deny", Decision.DENY),
        ("NotApplicable", Decision.NOT_APPLICABLE),
        ("Indeterminate", Decision.INDETERMINATE),
        ("permit", Decision.PERMIT),
    ])
    def test_known_decisions(self, text, expected):
        assert XACMLCodec().decode(xacml_response(text)) is expected

    def test_decision_with_whitespace(self):
        assert XACMLCodec().decode(xacml_response("\n  Deny\n")) is Decision.DENY

    def test_response_with_xml_declaration(self):
        response = '<?xml version="1.0" encoding="UTF-8"?>' + xacml_response("Deny")
        assert XACMLCodec().decode(response) is Decision.DENY

    def test_bytes_response(self):
        assert XACMLCodec().decode(xacml_response("Permit").encode("utf-8")) is Decision.PERMIT

    def test_malformed_xml_raises_protocol_error(self):
        with pytest.raises(ProtocolError):
            XACMLCodec().decode("<Response><Result>")

    def test_missing_decision_raises_protocol_error(self):
        with pytest.raises(ProtocolError):
            XACMLCodec().decode(f'<Response xmlns="{XACML_NS}"><Result/></Response>')

    def test_wrong_namespace_raises_protocol_error(self):
        with pytest.raises(ProtocolError):
            XACMLCodec().decode("<Response><Result><Decision>Permit</Decision></Result></Response>")

    def test_unknown_decision_raises_decoding_error(self):
        with pytest.raises(DecodingError) as exc_info:
            XACMLCodec().decode(xacml_response("Maybe"))
        assert exc_info.value.value == "Maybe"

    def test_empty_decision_raises_decoding_error(self):
        with pytest.raises(DecodingError):
            XACMLCodec().decode(xacml_response(""))


class TestDecisionResolver:
    """Test decision to outcome mapping"""

    def test_permit_allows(self):
        assert DecisionResolver().resolve(Decision.PERMIT) is True

    def test_deny_denies(self):
        assert DecisionResolver().resolve(Decision.DENY) is False

    def test_indeterminate_denies(self):
        assert DecisionResolver().resolve(Decision.INDETERMINATE) is False

    def test_not_applicable_allows_with_warning(self, caplog):
        caplog.set_level(logging.WARNING, logger="xacml_scope")

        assert DecisionResolver().resolve(Decision.NOT_APPLICABLE, "myApp", "carbon.super") is True

        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "myApp@carbon.super" in warnings[0].getMessage()

    def test_permit_emits_no_warning(self, caplog):
        caplog.set_level(logging.WARNING, logger="xacml_scope")
        DecisionResolver().resolve(Decision.PERMIT, "myApp", "carbon.super")
        assert not [r for r in caplog.records if r.levelno == logging.WARNING]
