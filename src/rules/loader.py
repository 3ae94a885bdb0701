from pathlib import Path

import yaml
from pydantic import ValidationError

from src.rules.models import Rules


def _strip_fences(content: str) -> str:
    """Return the first ```yaml fenced block, or the whole text if there is none."""
    yaml_lines = []
    in_block = False
    found_block = False

    for line in content.splitlines():
        s_line = line.strip()
        if s_line.startswith("```yaml"):
            in_block = True
            found_block = True
            continue
        if in_block and s_line.startswith("```"):
            break
        if in_block:
            yaml_lines.append(line)

    return "\n".join(yaml_lines) if found_block else content


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
