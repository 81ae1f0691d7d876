"""Customer entity — a host or guest of the rental platform."""

from dataclasses import dataclass


@dataclass
class Customer:
    id: int | None
    email: str
    name: str
    company: str | None = None

    def is_host(self) -> bool:
        return (self.company or "").lower().startswith("host")
