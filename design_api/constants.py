import json
from pathlib import Path
from typing import Tuple

# Module names and connector type referenced by caller-authored rule sets.
OUTER_TAG: str = "OUT"
EMPTY_TAG: str = "EMPTY"
INDIFFERENT_TAG: str = "INDIFFERENT"

_constants_path = Path(__file__).with_name("constants.json")
with _constants_path.open(encoding="utf-8") as f:
    _cfg = json.load(f)

DEFAULT_PRECISION: float = float(_cfg["DEFAULT_PRECISION"])
DEFAULT_FILL_METHOD: int = int(_cfg["DEFAULT_FILL_METHOD"])
DEFAULT_SLOT_DIAGONAL: Tuple[float, float, float] = tuple(
    float(v) for v in _cfg["DEFAULT_SLOT_DIAGONAL"]
)
DEFAULT_INCLUDE_OUT: bool = bool(_cfg["DEFAULT_INCLUDE_OUT"])
DEFAULT_INCLUDE_EMPTY: bool = bool(_cfg["DEFAULT_INCLUDE_EMPTY"])
MAX_SAMPLE_WORKERS: int = int(_cfg["MAX_SAMPLE_WORKERS"])
