"""Value types passed in and out of the engine."""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping, Optional, Sequence

from minifyimg.core.constants import TransformCallable
from minifyimg.core.validators import InvalidConfiguration


def _check_option_names(names) -> None:
    known = {f.name for f in fields(ProcessOptions)}
    unknown = sorted(set(names) - known)
    if unknown:
        raise InvalidConfiguration(f"Unknown option(s): {', '.join(unknown)}")


@dataclass(frozen=True)
class ProcessOptions:
    """Options for one batch run.

    ``destination=None`` runs the transforms without writing anything.
    """

    destination: Optional[str] = None
    preserve_structure: bool = False
    plugins: Sequence[TransformCallable] = field(default_factory=tuple)
    use_glob: bool = True

    def __post_init__(self) -> None:
        if self.plugins is None:
            object.__setattr__(self, "plugins", ())

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> ProcessOptions:
        _check_option_names(values)
        return cls(**values)

    def with_overrides(self, **overrides: Any) -> ProcessOptions:
        _check_option_names(overrides)
        return replace(self, **overrides)


@dataclass(frozen=True)
class FileResult:
    """Outcome of processing one file.

    ``destination_path`` is None when no file was written.
    """

    data: bytes
    source_path: str
    destination_path: Optional[str] = None

    @property
    def written(self) -> bool:
        return self.destination_path is not None
