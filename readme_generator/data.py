"""Run-scoped template data and package-name alias strategies."""

from __future__ import annotations

import copy
import re
from collections.abc import Callable, Iterator, Mapping
from typing import Any

from readme_generator.utils import camel_case

_VERB_QUALIFIED_RE = re.compile(r"^verb-.*?-\w")
_VERB_QUALIFIER_RE = re.compile(r"^verb-(.*?)-(?:\w+)")


class DataContext(Mapping[str, Any]):
    """Data available to templates during rendering.

    ``merge`` performs a shallow union: a later merge replaces the value of a
    colliding top-level key wholesale, nested mappings are never combined.
    """

    def __init__(self, initial: Mapping[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = {}
        if initial:
            self.merge(initial)

    def merge(self, partial: Mapping[str, Any]) -> None:
        """Union *partial* into the context at the top level."""
        for key, value in partial.items():
            self._data[str(key)] = value

    def snapshot(self) -> dict[str, Any]:
        """Return an independent copy for a render pass."""
        return copy.deepcopy(self._data)

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"DataContext({sorted(self._data)})"


# ---------------------------------------------------------------------------
# Alias strategies
# ---------------------------------------------------------------------------


def readme_alias(name: str) -> str:
    """Derive a short alias from a package name.

    Examples::

        readme_alias("verb-readme-generator") -> "readme"
        readme_alias("markdown-toc") -> "toc"
        readme_alias("micromatch") -> "micromatch"
    """
    if _VERB_QUALIFIED_RE.match(name):
        return _VERB_QUALIFIER_RE.sub(r"\1", name, count=1)
    return name[name.rfind("-") + 1:]


def generator_alias(name: str) -> str:
    """Alias for ``generate-*`` projects: ``generate-foo-bar`` -> ``fooBar``."""
    return camel_case(re.sub(r"^generate-", "", name))


ALIAS_STRATEGIES: dict[str, Callable[[str], str]] = {
    "readme": readme_alias,
    "generator": generator_alias,
}


def select_alias_strategy(is_generator: bool) -> Callable[[str], str]:
    """Pick the alias function for a run."""
    return ALIAS_STRATEGIES["generator" if is_generator else "readme"]


def package_metadata(pkg: Mapping[str, Any], to_alias: Callable[[str], str]) -> dict[str, Any]:
    """Extract template data from a parsed ``package.json``.

    The ``verb`` section is configuration, not data, so it is left out.
    """
    data = {k: v for k, v in pkg.items() if k != "verb"}
    name = data.get("name")
    if isinstance(name, str) and name:
        data["alias"] = to_alias(name)
    repo = repo_path(data.get("repository"))
    if repo:
        data["repo"] = repo
    return data


_GITHUB_URL_RE = re.compile(r"github\.com[/:]([^/]+/[^/#]+?)(?:\.git)?/?$")


def repo_path(repository: Any) -> str:
    """Return ``owner/name`` for a ``repository`` field, or ``""``.

    Accepts the shorthand string form, a GitHub URL, or an object with a
    ``url`` key.
    """
    if isinstance(repository, Mapping):
        repository = repository.get("url")
    if not isinstance(repository, str) or not repository:
        return ""
    match = _GITHUB_URL_RE.search(repository)
    if match:
        return match.group(1)
    if re.fullmatch(r"[\w.-]+/[\w.-]+", repository):
        return repository
    return ""
