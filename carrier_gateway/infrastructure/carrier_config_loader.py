"""Carrier Config Loader — reads config/carriers/*.json into CarrierConfig models.

Invariants:
    - template.json is never loaded
    - Disabled carriers (enabled: false) are skipped
    - An unreadable or invalid file is logged and skipped; the others still load
    - Result is keyed by upper-cased carrier code, in file-name order
"""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from carrier_gateway.schemas.carrier_config import CarrierConfig

logger = logging.getLogger(__name__)

TEMPLATE_FILE = "template.json"


def load_carrier_config(path: Path) -> CarrierConfig:
    """Parse and validate one carrier file (raises on bad JSON or shape)."""
    return CarrierConfig.model_validate(json.loads(path.read_text(encoding="utf-8")))


def load_carrier_configs(config_dir: str | Path) -> dict[str, CarrierConfig]:
    directory = Path(config_dir)
    if not directory.is_dir():
        logger.warning(
            f"Carrier config directory not found: {directory}",
            extra={"path": str(directory)},
        )
        return {}

    configs: dict[str, CarrierConfig] = {}
    for path in sorted(directory.glob("*.json")):
        if path.name == TEMPLATE_FILE:
            continue
        try:
            config = load_carrier_config(path)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.error(
                f"Skipping invalid carrier config {path.name}: {e}",
                extra={"path": str(path)},
            )
            continue
        if not config.enabled:
            logger.info(
                f"Carrier {config.code} disabled in {path.name}",
                extra={"carrier": config.code},
            )
            continue
        configs[config.code.upper()] = config
    return configs
