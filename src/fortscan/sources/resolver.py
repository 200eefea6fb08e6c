"""Module dependency resolution and build ordering."""

from __future__ import annotations

from collections import deque

from rich.console import Console

from fortscan.exceptions import DependencyCycleError, ResolutionError
from fortscan.model import Scope, SourceFile, SourceSet

console = Console(stderr=True)


def find_module_provider(sources: SourceSet, module_name: str, user: SourceFile) -> int | None:
    """Return the index of the first file that provides module_name to user.

    Library and dependency files are visible everywhere. App and test
    files only see app/test providers living in their own directory.
    """
    local = user.scope in (Scope.APP, Scope.TEST)
    for idx, candidate in enumerate(sources):
        if module_name not in candidate.provided_units:
            continue
        if candidate.scope.is_global:
            return idx
        if local and candidate.directory == user.directory:
            return idx
    return None


def resolve_module_dependencies(sources: SourceSet, quiet: bool = False) -> None:
    """Link every used module to the file that provides it.

    Dependencies are written to each file's ``file_dependencies`` only
    once every file has resolved, so a failure leaves the set untouched.
    The summary line is skipped when quiet is set.

    Raises:
        ResolutionError: If a used module has no visible provider.
    """
    resolved: list[list[int]] = []
    for source in sources:
        deps: list[int] = []
        for module_name in source.used_units:
            if module_name in source.provided_units:
                continue
            provider = find_module_provider(sources, module_name, source)
            if provider is None:
                raise ResolutionError(module_name, str(source.path))
            deps.append(provider)
        resolved.append(deps)

    for source, deps in zip(sources, resolved):
        source.file_dependencies = deps

    if not quiet:
        edges = sum(len(deps) for deps in resolved)
        console.print(
            f"[green]Resolver[/green] linked [bold]{edges}[/bold] module dependencies "
            f"across [bold]{len(sources)}[/bold] files"
        )


def build_order(sources: SourceSet) -> list[SourceFile]:
    """Order files so that every provider precedes the files using it.

    Kahn's algorithm seeded in set order; ties keep set order.

    Raises:
        DependencyCycleError: If the dependency edges form a cycle.
    """
    pending = [len(set(source.file_dependencies)) for source in sources]
    users: list[list[int]] = [[] for _ in range(len(sources))]
    for idx, source in enumerate(sources):
        for dep in set(source.file_dependencies):
            users[dep].append(idx)

    queue = deque(idx for idx, count in enumerate(pending) if count == 0)
    order: list[SourceFile] = []
    while queue:
        idx = queue.popleft()
        order.append(sources[idx])
        for user in sorted(users[idx]):
            pending[user] -= 1
            if pending[user] == 0:
                queue.append(user)

    if len(order) != len(sources):
        stuck = [str(sources[idx].path) for idx, count in enumerate(pending) if count > 0]
        raise DependencyCycleError(stuck)
    return order
