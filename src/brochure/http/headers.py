"""Immutable, case-insensitive request headers.

Built from the raw byte pairs of the ASGI scope. Names are folded to
lowercase once, at construction; values are decoded as latin-1.
"""

from collections.abc import Iterator, Mapping


class Headers(Mapping[str, str]):
    """Immutable, case-insensitive HTTP request headers.

    ``__getitem__`` returns the first value for a name.
    ``get_list`` returns every value, in arrival order.
    ``get_csv`` splits comma-separated list headers (``X-Forwarded-For``,
    ``Accept-Encoding``) into trimmed, non-empty items.
    """

    __slots__ = ("_index", "_raw")

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        index: dict[str, list[str]] = {}
        for name, value in raw:
            index.setdefault(name.decode("latin-1").lower(), []).append(value.decode("latin-1"))
        self._raw = raw
        self._index = index

    @classmethod
    def from_dict(cls, headers: Mapping[str, str]) -> "Headers":
        """Build headers from a plain ``{name: value}`` mapping."""
        return cls(
            tuple(
                (name.lower().encode("latin-1"), value.encode("latin-1"))
                for name, value in headers.items()
            )
        )

    def __getitem__(self, key: str) -> str:
        values = self._index.get(key.lower())
        if not values:
            raise KeyError(key)
        return values[0]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(self._index)

    def __len__(self) -> int:
        return len(self._index)

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"Headers({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        values = self._index.get(key.lower())
        return values[0] if values else default

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        return list(self._index.get(key.lower(), ()))

    def get_csv(self, key: str) -> list[str]:
        """Return every comma-separated item across all *key* headers."""
        items: list[str] = []
        for value in self.get_list(key):
            items.extend(part.strip() for part in value.split(",") if part.strip())
        return items

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        """Raw header byte pairs, as received."""
        return self._raw
