"""
Safe .env file parser.

Parses KEY=value settings files without shell execution. Values are taken
literally, so anything that looks like shell interpolation is rejected rather
than silently kept as text.
"""

import re
from pathlib import Path

FORBIDDEN_PATTERNS = [
    r'`',           # backticks
    r'\$\(',        # command substitution
    r'\$\{',        # variable expansion
]

KEY_PATTERN = re.compile(r'^[A-Z][A-Z0-9_]*$')


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value


def load_env(filepath: str) -> dict:
    """
    Parse env file safely, return dict.

    Lines may carry an `export ` prefix. Blank lines and `#` comments are skipped.

    Raises:
        FileNotFoundError: if file doesn't exist
        ValueError: if syntax invalid or forbidden pattern found
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Env file not found: {filepath}")

    result = {}
    for lineno, line in enumerate(path.read_text().splitlines(), 1):
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        if line.startswith('export '):
            line = line[len('export '):].lstrip()

        key, sep, value = line.partition('=')
        if not sep:
            raise ValueError(f"Line {lineno}: Invalid syntax (no '=')")

        key = key.strip()
        if not KEY_PATTERN.match(key):
            raise ValueError(f"Line {lineno}: Invalid key '{key}'")

        value = _unquote(value.strip())
        if any(re.search(pattern, value) for pattern in FORBIDDEN_PATTERNS):
            raise ValueError(f"Line {lineno}: Forbidden pattern in value for {key}")

        result[key] = value

    return result
