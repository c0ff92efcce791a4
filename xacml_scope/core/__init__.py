"""
Configuration and wiring for the XACML scope validator.
"""

from .config import ValidatorConfig, parse_duration_string
from .factory import build_validator

__all__ = [
    'ValidatorConfig',
    'parse_duration_string',
    'build_validator',
]
