"""
Tunable bounds for the engine.

The name-length and recursion-depth limits are plain values on a frozen
pydantic model. Hosts either construct one directly or read it from the
environment with load_config().
"""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 32
MAX_DEPTH = 32

ENV_MAX_NAME_LENGTH = "EXPREVAL_MAX_NAME_LENGTH"
ENV_MAX_DEPTH = "EXPREVAL_MAX_DEPTH"


class EvalConfig(BaseModel):
    """Bounds applied to a single evaluation."""
    model_config = ConfigDict(frozen=True)

    max_name_length: int = Field(
        MAX_NAME_LENGTH, ge=1, le=256,
        description="Longest identifier accepted, in characters",
    )
    # Each nesting level costs several interpreter frames.
    max_depth: int = Field(
        MAX_DEPTH, ge=1, le=128,
        description="Deepest nesting of sub-expressions before stack overflow",
    )


DEFAULT_CONFIG = EvalConfig()


def load_config(environ: Optional[Mapping[str, str]] = None) -> EvalConfig:
    """
    Build an EvalConfig from environment variables.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        EvalConfig with any values found in the environment applied

    Raises:
        pydantic.ValidationError: If a value is not an integer or out of range
    """
    env = os.environ if environ is None else environ
    values = {}
    for key, field in ((ENV_MAX_NAME_LENGTH, "max_name_length"), (ENV_MAX_DEPTH, "max_depth")):
        raw = env.get(key)
        if raw is not None and raw.strip():
            values[field] = raw.strip()
            logger.debug(f"{key}={raw.strip()} from environment")
    config = EvalConfig(**values)
    logger.info(f"Using max_name_length={config.max_name_length}, max_depth={config.max_depth}")
    return config
