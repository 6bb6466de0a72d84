"""Interactive creation of the configuration file."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Tuple

from hound.core.logging import get_logger

log = get_logger("wizard")

Ask = Callable[[str], str]

# (section, key, prompt, default)
QUESTIONS: List[Tuple[str, str, str, str]] = [
    ("GITHUB", "USER", "github user", ""),
    ("GITLAB", "BASE_URL", "gitlab base url", ""),
    ("GITLAB", "API_PATH", "gitlab api path", "/api/v3"),
    ("GITLAB", "REPO_FEED_PATH", "gitlab repository feed path", ""),
    ("GITLAB", "TOKEN", "gitlab token", ""),
    ("GITLAB", "PROJECT_ID", "gitlab project id", ""),
    ("JIRA", "BASE_URL", "jira base url", ""),
    ("JIRA", "API_PATH", "jira api path", "/rest/api/2"),
    ("JIRA", "ACTIVITY_PATH", "jira activity path", "/activity"),
    ("JIRA", "USER", "jira user", ""),
    ("JIRA", "ACTIVITY_USER", "jira activity user", ""),
]

# A section is enabled as soon as this key was answered
ACTIVATION_KEYS = {"GITHUB": "USER", "GITLAB": "BASE_URL", "JIRA": "BASE_URL"}


def collect_answers(ask: Ask) -> Dict[str, Dict[str, str]]:
    answers: Dict[str, Dict[str, str]] = {}
    for section, key, prompt, default in QUESTIONS:
        suffix = f" [{default}]" if default else ""
        value = ask(f"> {section.lower()} {prompt}{suffix} ").strip() or default
        answers.setdefault(section, {})[key] = value
    return answers


def render_config(answers: Dict[str, Dict[str, str]]) -> str:
    lines = ["# Hound configuration file"]
    for section, values in answers.items():
        active = bool(values.get(ACTIVATION_KEYS[section]))
        lines.append("")
        lines.append(f"{section}__ACTIVE={'true' if active else 'false'}")
        for key, value in values.items():
            if value:
                lines.append(f"{section}__{key}={value}")
    return "\n".join(lines) + "\n"


def run_setup(path: Path, ask: Ask = input) -> Path:
    """Ask for every provider setting and write them to ``path``."""
    content = render_config(collect_answers(ask))
    path.write_text(content, encoding="utf-8")
    log.info(f"Wrote configuration to {path}")
    return path
