"""
XACML 3.0 request/response codec.

Requests are rendered as a ``<Request>`` document with one ``<Attributes>``
element per category and one ``<Attribute>`` per attribute id, so that
multi-valued attributes such as scopes share a single element. Responses are
parsed once and only the ``Result/Decision`` text is read from them.
"""

import logging
import re
import xml.etree.ElementTree as ET
from collections import OrderedDict
from typing import List, Union

from ..types.errors import EncodingError, ProtocolError, DecodingError
from .types import AuthorizationRequest, AuthorizationSubjectAttribute, Decision, XACML_NS


logger = logging.getLogger(__name__)

ET.register_namespace("", XACML_NS)

# Characters outside the XML 1.0 Char production
_ILLEGAL_XML_CHARS = re.compile(
    "[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]"
)


def _qname(local: str) -> str:
    return f"{{{XACML_NS}}}{local}"


class XACMLCodec:
    """Encodes authorization requests and decodes PDP decisions."""

    def __init__(self, combined_decision: bool = False, return_policy_id_list: bool = False):
        self.combined_decision = combined_decision
        self.return_policy_id_list = return_policy_id_list

    def encode(self, request: AuthorizationRequest) -> str:
        """
        Render an authorization request as a XACML 3.0 request document.

        Raises:
            EncodingError: If an attribute cannot be represented in XML
        """
        root = ET.Element(_qname("Request"), {
            "CombinedDecision": str(self.combined_decision).lower(),
            "ReturnPolicyIdList": str(self.return_policy_id_list).lower(),
        })

        try:
            for category, attributes in request.by_category().items():
                self._check(category, "category")
                attributes_el = ET.SubElement(root, _qname("Attributes"), {"Category": category})
                for attribute_id, values in self._group_by_id(attributes).items():
                    self._check(attribute_id, "attribute id")
                    attribute_el = ET.SubElement(attributes_el, _qname("Attribute"), {
                        "AttributeId": attribute_id,
                        "IncludeInResult": "false",
                    })
                    for attribute in values:
                        self._check(attribute.value, attribute_id)
                        value_el = ET.SubElement(attribute_el, _qname("AttributeValue"), {
                            "DataType": attribute.data_type.value,
                        })
                        value_el.text = attribute.value
            return ET.tostring(root, encoding="unicode")
        except (TypeError, ValueError) as e:
            raise EncodingError(f"Could not build XACML request: {e}", cause=e)

    def decode(self, response: Union[str, bytes]) -> Decision:
        """
        Extract the decision from a XACML response document.

        Raises:
            ProtocolError: If the response is not XML or has no Result/Decision
            DecodingError: If the decision text is not a known decision
        """
        try:
            root = ET.fromstring(response)
        except (ET.ParseError, TypeError, ValueError) as e:
            raise ProtocolError(f"XACML response is not well-formed: {e}", cause=e)

        decision_el = None
        for result in root.iter(_qname("Result")):
            decision_el = result.find(_qname("Decision"))
            if decision_el is not None:
                break

        if decision_el is None:
            raise ProtocolError(
                "XACML response has no Result/Decision element",
                details={'root': root.tag}
            )

        text = decision_el.text or ""
        decision = Decision.from_text(text)
        if decision is None:
            raise DecodingError(f"Unknown XACML decision '{text.strip()}'", value=text.strip())

        logger.debug(f"Extracted XACML decision: {decision.value}")
        return decision

    @staticmethod
    def _group_by_id(
        attributes: List[AuthorizationSubjectAttribute]
    ) -> 'OrderedDict[str, List[AuthorizationSubjectAttribute]]':
        grouped: 'OrderedDict[str, List[AuthorizationSubjectAttribute]]' = OrderedDict()
        for attribute in attributes:
            grouped.setdefault(attribute.attribute_id, []).append(attribute)
        return grouped

    @staticmethod
    def _check(text: str, name: str) -> None:
        if not isinstance(text, str):
            raise TypeError(f"{name} must be a string, got {type(text).__name__}")
        if _ILLEGAL_XML_CHARS.search(text):
            raise ValueError(f"{name} contains characters not allowed in XML")
