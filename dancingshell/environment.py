"""The shell's variable table."""

from __future__ import annotations

from collections.abc import Iterator, Mapping


class Environment:
    """Ordered shell variables; a value of None marks a name exported without a value."""

    def __init__(self) -> None:
        self._vars: dict[str, str | None] = {}

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str | None]) -> "Environment":
        """Build an environment from a mapping such as os.environ."""
        env = cls()
        for key, value in mapping.items():
            env.set(key, value)
        return env

    def get(self, key: str) -> str | None:
        """Return the value of key, or None when unset or valueless."""
        return self._vars.get(key)

    def set(self, key: str, value: str | None) -> None:
        """Set key, keeping its position if it already exists."""
        self._vars[key] = value

    def change(self, key: str, value: str | None) -> None:
        """Replace the value of key only if key already exists."""
        if key in self._vars:
            self._vars[key] = value

    def remove(self, key: str) -> bool:
        """Remove key; return whether it was present."""
        if key in self._vars:
            del self._vars[key]
            return True
        return False

    def as_matrix(self) -> list[str]:
        """Return the variables as KEY=VALUE strings, bare KEY when valueless."""
        return [
            key if value is None else f"{key}={value}"
            for key, value in self._vars.items()
        ]

    def items(self) -> Iterator[tuple[str, str | None]]:
        """Iterate over (key, value) pairs in insertion order."""
        return iter(list(self._vars.items()))

    def __contains__(self, key: object) -> bool:
        return key in self._vars

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._vars))

    def __len__(self) -> int:
        return len(self._vars)

    def __repr__(self) -> str:
        return f"Environment({self._vars!r})"