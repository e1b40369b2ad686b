import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from src.components.gestures import GestureInterpreter
from src.components.matching.models import FeedbackWindows
from src.components.visibility.models import VisibilityConfig
from src.core.ports.store import CompositeIndex
from src.rules.models import Rules

RULES_PATH_ENV = "PITCH_RULES_PATH"
DEFAULT_RULES_PATH = "rules.yaml"


def _strip_fences(content: str) -> str:
    """Return the first ```yaml block, or the whole text if there is none."""
    yaml_lines: list[str] = []
    in_block = False

    for line in content.splitlines():
        stripped = line.strip()
        if stripped.startswith("```yaml"):
            in_block = True
            continue
        if in_block and stripped.startswith("```"):
            return "\n".join(yaml_lines)
        if in_block:
            yaml_lines.append(line)

    if in_block:
        return "\n".join(yaml_lines)
    return content


def load_rules(path: Path) -> Rules:
    """
    Load and validate the rules file.
    Raises FileNotFoundError if file missing.
    Raises ValueError if the YAML or the schema is invalid.
    """
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found at: {path}")

    with open(path, encoding="utf-8") as f:
        content = f.read()

    try:
        data = yaml.safe_load(_strip_fences(content))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in rules file: {e}") from e

    try:
        return Rules.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Rules validation failed:\n{e}") from e


def rules_path_from_env() -> Path:
    return Path(os.environ.get(RULES_PATH_ENV, DEFAULT_RULES_PATH)).resolve()


# --- Component config builders ---


def visibility_config(rules: Rules) -> VisibilityConfig:
    return VisibilityConfig(
        threshold=rules.visibility.threshold,
        dwell_ms=rules.visibility.dwell_ms,
    )


def feedback_windows(rules: Rules) -> FeedbackWindows:
    fb = rules.matching.feedback
    return FeedbackWindows(
        accepted_ms=fb.accepted_ms,
        pending_ms=fb.pending_ms,
        pass_ms=fb.pass_ms,
        error_ms=fb.error_ms,
        like_ms=fb.like_ms,
    )


def composite_indexes(rules: Rules) -> list[CompositeIndex]:
    return [
        CompositeIndex(collection=idx.collection, fields=tuple(idx.fields))
        for idx in rules.store.indexes
    ]


def gesture_interpreter(rules: Rules) -> GestureInterpreter:
    return GestureInterpreter(threshold=rules.gestures.swipe_threshold)
