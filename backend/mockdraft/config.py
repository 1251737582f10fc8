"""Engine configuration for the mock draft simulator."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


class CpuSpeedDelays(BaseModel):
    """Delay in milliseconds before each CPU pick, keyed by speed setting."""
    instant: int = 0
    fast: int = 300
    normal: int = 1500


class EngineConfig(BaseModel):
    # Draft capital model
    teams_per_round: int = 32
    max_overall: int = 256
    round1_premium: float = 45.0  # ~5th-6th round pick value
    trade_tolerance: float = 0.95  # CPU accepts at 95% of what it gives

    # CPU pick selector
    # Need-priority multipliers reproduced at needs_weight = 0.5 (index 0 = #1 need)
    base_need_multipliers: list[float] = [0.85, 0.90, 0.93, 0.96, 0.98]
    # Cumulative probability of taking scored candidate #1..#5
    pick_ladder: list[float] = [0.40, 0.65, 0.83, 0.93, 1.00]
    jitter_scale: float = 0.2
    default_cpu_randomness: int = 50  # 0-100
    default_cpu_needs_weight: int = 50  # 0-100

    # Orchestration
    cpu_speed_delay_ms: CpuSpeedDelays = CpuSpeedDelays()
    trade_timeout_seconds: int = 120
    cascade_status_check_interval: int = 8
    future_pick_rounds: int = 3

    data_dir: Path = Field(default=DEFAULT_DATA_DIR)

    @property
    def candidates_dir(self) -> Path:
        return self.data_dir / "candidates"

    @property
    def drafts_dir(self) -> Path:
        return self.data_dir / "drafts"

    @property
    def min_need_multipliers(self) -> list[float]:
        """Per-slot multipliers at full needs weight.

        Linear interpolation from 1.0 means the base table sits exactly
        halfway, so the full-weight floor is 1 - 2 * (1 - base).
        """
        return [1.0 - 2.0 * (1.0 - m) for m in self.base_need_multipliers]


# Default engine config singleton
engine_config = EngineConfig()
