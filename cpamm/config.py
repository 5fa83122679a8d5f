"""Engine configuration for the pool engine."""

import os
from dataclasses import dataclass

from cpamm.constants import MAX_FEE_BPS
from cpamm.models.types import normalize_pubkey

# Placeholder program identity for local use; deployments set CPAMM_PROGRAM_ID
DEFAULT_PROGRAM_ID = "0x" + "1b" * 32


@dataclass(frozen=True)
class EngineConfig:
    """Centralized configuration injected at process start.

    Attributes:
        program_id: Identity of the program that owns every derived pool
            address. Part of every derivation, so two engines with different
            program ids never share pools.
        max_fee_bps: Highest fee rate accepted at pool creation
            (default: 10,000 = 100%).
    """

    program_id: str = DEFAULT_PROGRAM_ID
    max_fee_bps: int = MAX_FEE_BPS

    def __post_init__(self) -> None:
        object.__setattr__(self, "program_id", normalize_pubkey(self.program_id, validate=True))
        if not 0 <= self.max_fee_bps <= MAX_FEE_BPS:
            raise ValueError(f"max_fee_bps must be in [0, {MAX_FEE_BPS}], got {self.max_fee_bps}")


def load_config() -> EngineConfig:
    """Build an EngineConfig from environment variables.

    Configuration via environment variables:
    - CPAMM_PROGRAM_ID: Program identity as 0x-prefixed hex (default: placeholder)
    - CPAMM_MAX_FEE_BPS: Fee ceiling for new pools (default: 10000)

    Raises:
        ValueError: If a variable is malformed
    """
    program_id = os.environ.get("CPAMM_PROGRAM_ID", DEFAULT_PROGRAM_ID)
    raw_max_fee = os.environ.get("CPAMM_MAX_FEE_BPS", str(MAX_FEE_BPS))
    try:
        max_fee_bps = int(raw_max_fee)
    except ValueError as err:
        raise ValueError(f"CPAMM_MAX_FEE_BPS must be an integer: '{raw_max_fee}'") from err
    return EngineConfig(program_id=program_id, max_fee_bps=max_fee_bps)


# Default configuration instance
DEFAULT_CONFIG = EngineConfig()
