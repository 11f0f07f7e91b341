"""Authorization decision value objects."""

from dataclasses import dataclass, field

from grantwise.domain.value_objects.source_tag import SourceTag


@dataclass(frozen=True)
class DecisionKey:
    """Cache key of a point query."""

    user_id: str
    resource_type: str
    action: str
    resource_id: str | None = None

    def __str__(self) -> str:
        return (
            f"decision:{self.user_id}:{self.resource_type}:{self.action}:"
            f"{self.resource_id if self.resource_id is not None else '*'}"
        )


@dataclass(frozen=True)
class Decision:
    """Allow/deny result with the sources that produced an allow."""

    allow: bool
    sources: tuple[SourceTag, ...] = field(default_factory=tuple)

    @classmethod
    def deny(cls) -> "Decision":
        return cls(allow=False)

    def source_names(self) -> list[str]:
        return [str(s) for s in self.sources]
