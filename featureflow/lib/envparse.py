"""
Safe parser for featureflow.env.

Reads KEY=value lines without shell execution. Values that look like shell
substitution or command chaining are rejected, since the same file is often
sourced by hook scripts.
"""

import re
from pathlib import Path

FORBIDDEN_PATTERNS = [
    r'`',           # backticks
    r'\$\(',        # command substitution
    r'\$\{',        # variable expansion
    r';',           # command chaining
    r'&&',
    r'\|',          # pipes and OR chaining
]

KEY_PATTERN = re.compile(r'^[A-Z][A-Z0-9_]*$')


def parse_env(text: str, source: str = "<string>") -> dict[str, str]:
    """
    Parse env-file text into a dict.

    Accepts an optional leading `export ` on each line.

    Raises:
        ValueError: if syntax is invalid or a forbidden pattern is found
    """
    result = {}

    for lineno, line in enumerate(text.splitlines(), 1):
        line = line.strip()
        if not line or line.startswith('#'):
            continue

        if line.startswith('export '):
            line = line[len('export '):].lstrip()

        if '=' not in line:
            raise ValueError(f"{source} line {lineno}: Invalid syntax (no '=')")

        key, _, value = line.partition('=')
        key = key.strip()
        value = value.strip()

        if not KEY_PATTERN.match(key):
            raise ValueError(f"{source} line {lineno}: Invalid key '{key}'")

        if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
            value = value[1:-1]

        for pattern in FORBIDDEN_PATTERNS:
            if re.search(pattern, value):
                raise ValueError(f"{source} line {lineno}: Forbidden pattern in value for {key}")

        result[key] = value

    return result


def load_env(filepath: Path) -> dict[str, str]:
    """
    Parse an env file, return dict.

    Raises:
        FileNotFoundError: if file doesn't exist
        ValueError: if syntax invalid or forbidden pattern found
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Env file not found: {filepath}")
    return parse_env(path.read_text(), source=path.name)


def load_env_if_exists(filepath: Path) -> dict[str, str]:
    """Like load_env, but a missing file yields an empty dict."""
    path = Path(filepath)
    if not path.exists():
        return {}
    return load_env(path)
