"""Configuration for TradeAutopsy.

The inference core never reads configuration on its own. Callers load an
``InferenceSettings`` (usually from ``~/.config/tradeautopsy/config.toml``)
and pass it in; every core function falls back to the defaults.
"""

import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "tradeautopsy" / "config.toml"


class InferenceSettings(BaseModel):
    """Tunable constants used by the parsers and the summary aggregator."""

    default_position_size: float = Field(
        default=0.1, gt=0, description="Placeholder size when none is detectable"
    )
    max_position_size: float = Field(
        default=1000.0, gt=0, description="Exclusive upper bound for a plausible lot size"
    )
    overtrading_trade_ceiling: int = Field(
        default=20, gt=0, description="Trade count that maps to an overtrading score of 100"
    )
    revenge_penalty: float = Field(
        default=20.0, ge=0, le=100, description="Flat score penalty for repeated size escalation"
    )
    revenge_penalty_min_escalations: int = Field(
        default=2, ge=1, description="Escalations needed before the penalty applies"
    )

    model_config = {"frozen": True}


def load_settings(path: Optional[Path] = None) -> InferenceSettings:
    """Load inference settings from the ``[inference]`` table of a TOML file.

    Args:
        path: Config file path. Defaults to ``~/.config/tradeautopsy/config.toml``.

    Returns:
        Settings from the file, or defaults if the file is missing or invalid.
    """
    import toml

    config_path = path or DEFAULT_CONFIG_PATH

    if not config_path.exists():
        return InferenceSettings()

    try:
        config = toml.load(config_path)
    except (OSError, toml.TomlDecodeError) as e:
        logger.warning("Could not read %s: %s", config_path, e)
        return InferenceSettings()

    section = config.get("inference", {})
    if not isinstance(section, dict):
        logger.warning("Ignoring non-table [inference] entry in %s", config_path)
        return InferenceSettings()

    try:
        return InferenceSettings(**section)
    except ValidationError as e:
        logger.warning("Invalid [inference] settings in %s: %s", config_path, e)
        return InferenceSettings()
