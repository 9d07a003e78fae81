"""
Storage Configuration — subscription parameters and validated settings.

Reads optional overrides from environment variables:
    STORAGE_INITIAL_FEE = <int, smallest payment unit>
    STORAGE_TRIAL_PERIOD = <int, seconds>
    STORAGE_PAID_PERIOD = <int, seconds>
    STORAGE_RESUBSCRIBE_POLICY = reject | extend
"""
import os
import logging

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger("encrypted_storage")

TRIAL_PERIOD = 3 * 24 * 60 * 60  # 259200 seconds
DEFAULT_PAID_PERIOD = 30 * 24 * 60 * 60
DEFAULT_FEE = 10 ** 15  # 0.001 of a 18-decimal unit
MAX_PAGE_SIZE = 255

RESUBSCRIBE_REJECT = "reject"
RESUBSCRIBE_EXTEND = "extend"


def _env_int(name: str) -> int | None:
    """Read an integer environment variable, None when unset.

    Raises:
        ValueError: If the value is not a valid integer.
    """
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


class StorageConfig(BaseModel):
    """Validated storage configuration."""

    initial_fee: int = Field(default=DEFAULT_FEE, ge=0)
    trial_period: int = Field(default=TRIAL_PERIOD, ge=1)
    paid_period: int = Field(default=DEFAULT_PAID_PERIOD, ge=1)
    resubscribe_policy: str = Field(default=RESUBSCRIBE_REJECT)
    max_page_size: int = Field(default=MAX_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)

    model_config = {"frozen": True}

    @field_validator("resubscribe_policy")
    @classmethod
    def validate_policy(cls, v: str) -> str:
        """Validate the re-subscribe policy is supported."""
        v = v.lower()
        if v not in (RESUBSCRIBE_REJECT, RESUBSCRIBE_EXTEND):
            raise ValueError(f"Unsupported resubscribe policy: {v}")
        return v

    @property
    def extends_active(self) -> bool:
        return self.resubscribe_policy == RESUBSCRIBE_EXTEND

    @classmethod
    def from_env(cls) -> "StorageConfig":
        """Create StorageConfig from environment overrides.

        Unset variables keep their defaults.

        Returns:
            Populated StorageConfig instance.
        """
        values: dict = {}
        for field, env in (
            ("initial_fee", "STORAGE_INITIAL_FEE"),
            ("trial_period", "STORAGE_TRIAL_PERIOD"),
            ("paid_period", "STORAGE_PAID_PERIOD"),
        ):
            value = _env_int(env)
            if value is not None:
                values[field] = value
        policy = os.environ.get("STORAGE_RESUBSCRIBE_POLICY")
        if policy:
            values["resubscribe_policy"] = policy
        config = cls(**values)
        logger.debug(
            "Loaded storage config: paid_period=%d policy=%s",
            config.paid_period, config.resubscribe_policy,
        )
        return config
