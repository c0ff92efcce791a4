"""
Authorization types for XACML scope validation.
Implements the attribute model submitted to the PDP and the decisions it returns.
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional


XACML_NS = "urn:oasis:names:tc:xacml:3.0:core:schema:wd-17"

ACTION_CATEGORY = "http://wso2.org/identity/identity-action"
SP_CATEGORY = "http://wso2.org/identity/sp"
USER_CATEGORY = "http://wso2.org/identity/user"
SCOPE_CATEGORY = "http://wso2.org/identity/oauth-scope"
RESOURCE_CATEGORY = "urn:oasis:names:tc:xacml:3.0:attribute-category:resource"

AUTH_ACTION_ID = ACTION_CATEGORY + "/action-name"
SP_NAME_ID = SP_CATEGORY + "/sp-name"
USERNAME_ID = USER_CATEGORY + "/username"
USER_STORE_ID = USER_CATEGORY + "/user-store-domain"
USER_TENANT_DOMAIN_ID = USER_CATEGORY + "/user-tenant-domain"
RESOURCE_ID = "urn:oasis:names:tc:xacml:1.0:resource:resource-id"
SCOPE_ID = SCOPE_CATEGORY + "/scope-name"

ACTION_VALIDATE = "token_validation"


class DataType(str, Enum):
    """XACML attribute data types."""
    STRING = "http://www.w3.org/2001/XMLSchema#string"
    BOOLEAN = "http://www.w3.org/2001/XMLSchema#boolean"
    INTEGER = "http://www.w3.org/2001/XMLSchema#integer"
    DATE_TIME = "http://www.w3.org/2001/XMLSchema#dateTime"
    ANY_URI = "http://www.w3.org/2001/XMLSchema#anyURI"

    def __str__(self) -> str:
        return self.value


class Decision(Enum):
    """PDP decision (XACML Result/Decision)."""
    PERMIT = "Permit"
    DENY = "Deny"
    NOT_APPLICABLE = "NotApplicable"
    INDETERMINATE = "Indeterminate"

    @classmethod
    def from_text(cls, text: str) -> Optional['Decision']:
        """Match decision text case-insensitively; None when unknown."""
        normalized = text.strip().lower()
        for decision in cls:
            if decision.value.lower() == normalized:
                return decision
        return None


@dataclass(frozen=True)
class AuthorizationSubjectAttribute:
    """
    One attribute of an authorization request: a value tagged with its
    attribute id and category. Values are passed through verbatim.
    """
    value: str
    attribute_id: str
    category: str
    data_type: DataType = DataType.STRING

    def __post_init__(self):
        if self.value is None:
            raise ValueError(f"Attribute {self.attribute_id} requires a value")


@dataclass
class AuthorizationRequest:
    """
    Attributes submitted to the PDP for one validation call. Insertion order
    is kept so serialized requests read the same way every time.
    """
    attributes: List[AuthorizationSubjectAttribute] = field(default_factory=list)

    def add(self, value: str, attribute_id: str, category: str,
            data_type: DataType = DataType.STRING) -> 'AuthorizationRequest':
        """Append an attribute and return the request for chaining."""
        self.attributes.append(
            AuthorizationSubjectAttribute(value, attribute_id, category, data_type)
        )
        return self

    def by_category(self) -> 'OrderedDict[str, List[AuthorizationSubjectAttribute]]':
        """Group attributes by category in order of first appearance."""
        grouped: 'OrderedDict[str, List[AuthorizationSubjectAttribute]]' = OrderedDict()
        for attribute in self.attributes:
            grouped.setdefault(attribute.category, []).append(attribute)
        return grouped

    def values(self, attribute_id: str) -> List[str]:
        """All values submitted under an attribute id."""
        return [a.value for a in self.attributes if a.attribute_id == attribute_id]

    def __len__(self) -> int:
        return len(self.attributes)

    def __iter__(self) -> Iterator[AuthorizationSubjectAttribute]:
        return iter(self.attributes)
