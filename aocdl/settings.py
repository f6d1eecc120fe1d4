from dataclasses import dataclass, replace
from typing import Iterable, Self


@dataclass(frozen=True, slots=True)
class Settings:
    session_cookie: str = ""
    output: str = ""
    year: int = 0
    day: int = 0
    force: bool = False
    wait: bool = False

    def merge(self, other: Self) -> Self:
        """Overlay ``other`` on top of this record.

        Strings and integers from ``other`` win only when they are set
        (non-empty, non-zero). The boolean switches are sticky: once either
        side turned them on they stay on.
        """
        return replace(
            self,
            session_cookie=other.session_cookie or self.session_cookie,
            output=other.output or self.output,
            year=other.year or self.year,
            day=other.day or self.day,
            force=self.force or other.force,
            wait=self.wait or other.wait,
        )


def merge_all(sources: Iterable[Settings | None]) -> Settings:
    merged = Settings()
    for source in sources:
        # missing config files show up as None
        if source is not None:
            merged = merged.merge(source)
    return merged
