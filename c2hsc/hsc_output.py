"""Output accumulator threaded through the declaration walk.

Rather than writing ``.hsc`` and helper lines as they are produced, the
emitter collects them in an :class:`HscOutput` that is passed explicitly to
every emission call. Once the walk is over, :meth:`HscOutput.finish`
freezes the result into :class:`HscProducts` for the writer.
"""

from collections.abc import (
    Iterator,
    Mapping,
)
from dataclasses import (
    dataclass,
    field,
)
from types import (
    MappingProxyType,
)


class TypeMap:
    """Typedef environment: alias name to resolved binding signature.

    Entries are added in traversal order and never removed, so an alias can
    only be resolved after its typedef has been visited. Redefining an alias
    replaces the previous signature.
    """

    def __init__(self) -> None:
        self._types: dict[str, str] = {}

    def define(self, name: str, signature: str) -> None:
        self._types[name] = signature

    def lookup(self, name: str) -> str | None:
        return self._types.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __len__(self) -> int:
        return len(self._types)

    def __iter__(self) -> Iterator[str]:
        return iter(self._types)

    def as_mapping(self) -> Mapping[str, str]:
        """Read-only view of the current entries."""
        return MappingProxyType(dict(self._types))


@dataclass(frozen=True)
class HscProducts:
    """Finalized output of one translation unit.

    :param hsc_lines: Bindings-DSL lines, in emission order.
    :param helper_lines: Helper C macro lines, in emission order.
    :param types: Typedef environment at the end of the walk.
    """

    hsc_lines: tuple[str, ...]
    helper_lines: tuple[str, ...]
    types: Mapping[str, str]


@dataclass
class HscOutput:
    """Mutable accumulator for one translation unit.

    Lines are only ever appended; nothing is reordered or removed.
    """

    hsc_lines: list[str] = field(default_factory=list)
    helper_lines: list[str] = field(default_factory=list)
    types: TypeMap = field(default_factory=TypeMap)

    def append_hsc(self, line: str) -> None:
        self.hsc_lines.append(line)

    def append_helper(self, line: str) -> None:
        self.helper_lines.append(line)

    def define_type(self, name: str, signature: str) -> None:
        self.types.define(name, signature)

    def lookup_type(self, name: str) -> str | None:
        return self.types.lookup(name)

    def finish(self) -> HscProducts:
        """Freeze the accumulated lines for the writer."""
        return HscProducts(
            hsc_lines=tuple(self.hsc_lines),
            helper_lines=tuple(self.helper_lines),
            types=self.types.as_mapping(),
        )
