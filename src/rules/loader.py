from pathlib import Path

import yaml
from pydantic import ValidationError

from src.rules.models import Rules

_FENCE_OPEN = "```yaml"
_FENCE = "```"


def _extract_yaml(content: str) -> str:
    """Return the first ```yaml fenced block, or the whole text if there is none."""
    lines = content.splitlines()
    starts = [i for i, line in enumerate(lines) if line.strip().startswith(_FENCE_OPEN)]
    if not starts:
        return content

    body: list[str] = []
    for line in lines[starts[0] + 1 :]:
        if line.strip().startswith(_FENCE):
            break
        body.append(line)
    return "\n".join(body)


def load_rules(path: Path) -> Rules:
    """
    Parse and validate the rules file.

    FileNotFoundError when the file is absent; ValueError for bad YAML,
    a non-mapping document, or schema violations.
    """
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found at: {path}")

    try:
        data = yaml.safe_load(_extract_yaml(path.read_text(encoding="utf-8")))
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in rules file: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Rules file must contain a mapping, got {type(data).__name__}")

    try:
        return Rules.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Rules validation failed:\n{e}") from e
