# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Package validators provides OAuth2 scope validators and their registry.
"""

from .base import ScopeValidator, ScopeValidatorRegistry, default_registry, register_validator
from .xacml import XACMLScopeValidator

__all__ = [
    'ScopeValidator',
    'ScopeValidatorRegistry',
    'default_registry',
    'register_validator',
    'XACMLScopeValidator',
]
