"""Environment-based configuration."""

from __future__ import annotations

import logging

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Reads from .env file and ``VALIDSPEC_*`` environment variables."""

    # Logging
    log_level: str = "INFO"

    # Grammar used by the source front-end
    grammar_module: str = "tree_sitter_rust"

    # Attribute namespaces
    rule_attribute: str = "validate"
    modifier_attribute: str = "modify"
    serde_attribute: str = "serde"

    # Ownership strictness for items deriving neither Validate nor Validify
    allow_references: bool = True

    # Reject function pointers, raw pointers, dyn/impl traits and `!`
    reject_unusual_types: bool = False

    @field_validator(
        "rule_attribute", "modifier_attribute", "serde_attribute"
    )
    @classmethod
    def _validate_attribute_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("attribute names must not be empty")
        return v

    @model_validator(mode="after")
    def _validate_namespaces(self) -> Settings:
        if self.rule_attribute == self.modifier_attribute:
            raise ValueError(
                "rule_attribute and modifier_attribute must differ"
            )
        if self.serde_attribute in (
            self.rule_attribute,
            self.modifier_attribute,
        ):
            logger.warning(
                "serde_attribute %r shadows an annotation namespace",
                self.serde_attribute,
            )
        return self

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "VALIDSPEC_",
        "extra": "ignore",
    }
