# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Package authz implements the XACML attribute model, request construction,
the request/response codec and decision resolution for scope validation.
"""

from .types import (
    DataType,
    Decision,
    AuthorizationSubjectAttribute,
    AuthorizationRequest,
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

from .builder import RequestBuilder
from .codec import XACMLCodec
from .resolver import DecisionResolver

__all__ = [
    # Types
    'DataType',
    'Decision',
    'AuthorizationSubjectAttribute',
    'AuthorizationRequest',

    # Attribute identifiers
    'XACML_NS',
    'ACTION_CATEGORY',
    'SP_CATEGORY',
    'USER_CATEGORY',
    'SCOPE_CATEGORY',
    'RESOURCE_CATEGORY',
    'AUTH_ACTION_ID',
    'SP_NAME_ID',
    'USERNAME_ID',
    'USER_STORE_ID',
    'USER_TENANT_DOMAIN_ID',
    'RESOURCE_ID',
    'SCOPE_ID',
    'ACTION_VALIDATE',

    # Pipeline
    'RequestBuilder',
    'XACMLCodec',
    'DecisionResolver',
]
