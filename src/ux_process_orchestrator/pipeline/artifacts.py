from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

DEFAULT_ARTIFACT_FORMAT = "markdown"


@dataclass(frozen=True, slots=True)
class Artifact:
    """Descriptor of a file produced by a task.

    Artifacts are descriptive only; the pipeline never reads or writes the
    files they point to.
    """

    path: str
    format: str = DEFAULT_ARTIFACT_FORMAT
    label: str | None = None
    language: str | None = None
    phase: str | None = None

    def to_json(self) -> dict[str, object]:
        out: dict[str, object] = {"path": self.path, "format": self.format}
        if self.label is not None:
            out["label"] = self.label
        if self.language is not None:
            out["language"] = self.language
        if self.phase is not None:
            out["phase"] = self.phase
        return out

    def describe(self, default_label: str | None = None) -> dict[str, object]:
        """The `{path, format, label}` shape shown to reviewers."""

        out: dict[str, object] = {"path": self.path, "format": self.format}
        label = self.label or default_label
        if label is not None:
            out["label"] = label
        if self.language is not None:
            out["language"] = self.language
        return out

    @staticmethod
    def from_json(obj: object) -> Artifact:
        if isinstance(obj, str):
            if not obj.strip():
                raise ValueError("Artifact path must not be empty")
            return Artifact(path=obj)
        if not isinstance(obj, dict):
            raise ValueError(f"Artifact must be an object, got {type(obj).__name__}")

        path = obj.get("path")
        if not isinstance(path, str) or not path.strip():
            raise ValueError("Artifact is missing a 'path'")

        def _opt(key: str) -> str | None:
            v = obj.get(key)
            return v if isinstance(v, str) and v else None

        return Artifact(
            path=path,
            format=_opt("format") or DEFAULT_ARTIFACT_FORMAT,
            label=_opt("label"),
            language=_opt("language"),
            phase=_opt("phase") or _opt("type"),
        )


def describe_all(
    artifacts: Iterable[Artifact], default_label: str | None = None
) -> list[dict[str, object]]:
    return [a.describe(default_label) for a in artifacts]
