"""
Project dependency guide.

Reads package.json in a project directory and, for every dependency, points
at where its documentation lives: a context7 library id, the source
repository and the homepage.
"""

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from metacomposer.core.exceptions import InvalidArgumentError

logger = logging.getLogger(__name__)

NO_DEPENDENCY_INFO = "No dependency information found"

# Packages whose context7 id does not follow the /<name>/<name> convention
KNOWN_CONTEXT7_IDS = {
    "commander": "/tj/commander.js",
    "prompts": "/terkelg/prompts",
}


def format_context7_id(name: str) -> str:
    """
    Map an npm package name to a context7 library id.

    Example:
        >>> format_context7_id("@tanstack/react-query")
        '/tanstack/react-query'
        >>> format_context7_id("lodash")
        '/lodash/lodash'
    """
    if name.startswith("@"):
        return name.replace("@", "/", 1)
    if name in KNOWN_CONTEXT7_IDS:
        return KNOWN_CONTEXT7_IDS[name]
    return f"/{name}/{name}"


def extract_repository_url(repository: Any) -> str | None:
    """The repository URL from a package.json `repository` field."""
    if not repository:
        return None
    if isinstance(repository, str):
        return repository
    if isinstance(repository, dict):
        return repository.get("url")
    return None


def clean_repository_url(url: str) -> str:
    """
    Normalize git URLs into browsable https URLs.

    Example:
        >>> clean_repository_url("git+https://github.com/tj/commander.js.git")
        'https://github.com/tj/commander.js'
        >>> clean_repository_url("git@github.com:terkelg/prompts.git")
        'https://github.com/terkelg/prompts'
    """
    cleaned = url.replace("git+", "", 1)
    cleaned = cleaned.replace("git@github.com:", "https://github.com/")
    cleaned = cleaned.replace("git://", "https://", 1)
    if cleaned.endswith(".git"):
        cleaned = cleaned[: -len(".git")]
    return cleaned


def dependency_guide(project_dir: Path, name: str) -> str:
    """
    Documentation guide for one installed dependency.

    Reads node_modules/<name>/package.json; missing or unreadable package
    data yields a placeholder line rather than an error.
    """
    package_json = project_dir / "node_modules" / name / "package.json"
    if not package_json.exists():
        return "# Package information not available"

    try:
        data = json.loads(package_json.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.debug("Cannot read %s: %s", package_json, e)
        return "# Error reading package information"
    if not isinstance(data, dict):
        return "# Error reading package information"

    lines = [f"# {data.get('description') or 'No description'}"]
    lines.append(f"- Use context7 tool for documentation with id {format_context7_id(name)}")

    repo_url = extract_repository_url(data.get("repository"))
    if repo_url:
        lines.append(f"- Use kit tool to explore the repo at {clean_repository_url(repo_url)}")

    homepage = data.get("homepage")
    if homepage and homepage != repo_url:
        lines.append(f"- Visit the project homepage at {homepage}")

    return "\n".join(lines)


def get_info(project_dir: Path | None = None) -> str:
    """
    YAML dependency guide for the project in project_dir.

    Returns NO_DEPENDENCY_INFO when the directory has no package.json.

    Raises:
        InvalidArgumentError: If package.json is not a JSON object
    """
    if project_dir is None:
        project_dir = Path.cwd()

    package_json = project_dir / "package.json"
    if not package_json.exists():
        return NO_DEPENDENCY_INFO

    try:
        package = json.loads(package_json.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise InvalidArgumentError(
            "package.json", str(package_json), f"Cannot parse {package_json}: {e}"
        ) from e
    if not isinstance(package, dict):
        raise InvalidArgumentError(
            "package.json", str(package_json), f"{package_json} is not a JSON object"
        )

    info: dict[str, Any] = {"project": package.get("name") or "unnamed"}

    scripts = package.get("scripts")
    if isinstance(scripts, dict) and scripts:
        info["scripts"] = scripts

    dependencies = package.get("dependencies")
    if isinstance(dependencies, dict) and dependencies:
        info["dependencies"] = {name: dependency_guide(project_dir, name) for name in dependencies}

    return yaml.safe_dump(info, sort_keys=False, allow_unicode=True, width=float("inf")).strip()
