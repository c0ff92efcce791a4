"""
Configuration module for the XACML scope validator.

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.
"""

import json
import os
import re
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ..types.errors import ConfigurationError


ENV_PREFIX = "XACML_SCOPE_"
DEFAULT_VALIDATOR = "XACML Scope Validator"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def parse_duration_string(duration: Union[str, int, float, timedelta]) -> timedelta:
    """
    Parse duration string like '500ms', '30s', '5m', '2h' into timedelta.
    Bare numbers are seconds.
    """
    if isinstance(duration, timedelta):
        return duration
    if isinstance(duration, (int, float)):
        return timedelta(seconds=duration)
    if not isinstance(duration, str):
        raise ValueError("Duration must be a string")

    match = re.match(r'^(\d+(?:\.\d+)?)\s*(ms|s|m|h)?$', duration.strip().lower())
    if not match:
        raise ValueError(f"Invalid duration format: {duration}")

    value, unit = match.groups()
    value = float(value)

    if unit == 'ms':
        return timedelta(milliseconds=value)
    elif unit == 'm':
        return timedelta(minutes=value)
    elif unit == 'h':
        return timedelta(hours=value)
    return timedelta(seconds=value)


@dataclass
class ValidatorConfig:
    """Configuration for the scope validator and its PDP connection"""
    pdp_endpoint: Optional[str] = None
    pdp_username: Optional[str] = None
    pdp_password: Optional[str] = None
    oracle_timeout: timedelta = field(default_factory=lambda: timedelta(seconds=10))
    retry_attempts: int = 1
    retry_initial_delay: timedelta = field(default_factory=lambda: timedelta(milliseconds=100))
    validator: str = DEFAULT_VALIDATOR
    audit_log_path: Optional[str] = None
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ValidatorConfig":
        """Create configuration from a dictionary; unknown keys are rejected."""
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration keys: {', '.join(sorted(unknown))}",
                config_key=sorted(unknown)[0]
            )

        values = dict(data)
        try:
            for key in ("oracle_timeout", "retry_initial_delay"):
                if key in values:
                    values[key] = parse_duration_string(values[key])
            if "retry_attempts" in values:
                values["retry_attempts"] = int(values["retry_attempts"])
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration value: {e}")

        return cls(**values)

    @classmethod
    def from_env(cls, prefix: str = ENV_PREFIX) -> "ValidatorConfig":
        """Create configuration from environment variables"""
        data = {}
        for name in cls.__dataclass_fields__:
            value = os.getenv(f"{prefix}{name.upper()}")
            if value is not None:
                data[name] = value
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, file_path: str) -> "ValidatorConfig":
        """Load configuration from a JSON or YAML file"""
        path = Path(file_path)
        if not path.exists():
            raise ConfigurationError(f"Configuration file not found: {file_path}")

        with open(path, 'r', encoding='utf-8') as f:
            if path.suffix.lower() == '.json':
                data = json.load(f)
            elif path.suffix.lower() in ('.yaml', '.yml'):
                data = yaml.safe_load(f) or {}
            else:
                raise ConfigurationError(f"Unsupported configuration file format: {path.suffix}")

        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file {file_path} must contain a mapping")
        return cls.from_dict(data)

    def validate(self) -> bool:
        """Validate the configuration"""
        if self.oracle_timeout <= timedelta(0):
            raise ConfigurationError("oracle_timeout must be positive",
                                     config_key="oracle_timeout", config_value=self.oracle_timeout)
        if self.retry_attempts < 1:
            raise ConfigurationError("retry_attempts must be at least 1",
                                     config_key="retry_attempts", config_value=self.retry_attempts)
        if self.pdp_endpoint is not None and not self.pdp_endpoint.startswith(("http://", "https://")):
            raise ConfigurationError("pdp_endpoint must be an http(s) URL",
                                     config_key="pdp_endpoint", config_value=self.pdp_endpoint)
        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigurationError(f"log_level must be one of: {LOG_LEVELS}",
                                     config_key="log_level", config_value=self.log_level)
        return True
