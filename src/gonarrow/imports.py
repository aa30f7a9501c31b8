from __future__ import annotations


class ImportTable:
    """Import aliases for one generated file.

    Packages get small integer aliases in first-seen order starting at 0
    and are referenced as `x<alias>` in the generated source. An alias is
    never reassigned or removed.
    """

    def __init__(self) -> None:
        self._aliases: dict[str, int] = {}

    def alias_for(self, pkg: str) -> int:
        alias = self._aliases.get(pkg)
        if alias is None:
            alias = max(self._aliases.values(), default=-1) + 1
            self._aliases[pkg] = alias
        return alias

    def name_for(self, pkg: str) -> str:
        return f"x{self.alias_for(pkg)}"

    def items(self) -> list[tuple[str, int]]:
        """(package path, alias) pairs ordered by alias."""
        return sorted(self._aliases.items(), key=lambda kv: kv[1])

    def render(self) -> list[str]:
        if not self._aliases:
            return []
        lines = ["import ("]
        for pkg, alias in self.items():
            lines.append(f'\tx{alias} "{pkg}"')
        lines.append(")")
        return lines

    def __len__(self) -> int:
        return len(self._aliases)

    def __contains__(self, pkg: object) -> bool:
        return pkg in self._aliases
