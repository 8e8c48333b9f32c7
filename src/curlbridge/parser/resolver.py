"""Variable resolution: locates ``{{name}}`` placeholders and substitutes environment values."""

from __future__ import annotations

import re
from dataclasses import dataclass

from curlbridge.lexer.tokenizer import PLACEHOLDER_RE
from curlbridge.models.environment import Environment


@dataclass(frozen=True)
class VariableSpan:
    """A ``{{name}}`` occurrence; ``[start, end)`` covers the braces."""

    name: str
    start: int
    end: int
    resolved: bool
    value: str | None = None
    secret: bool = False


@dataclass(frozen=True)
class InterpolationPreview:
    original: str
    interpolated: str
    variables: list[VariableSpan]

    @property
    def has_variables(self) -> bool:
        return bool(self.variables)

    @property
    def all_resolved(self) -> bool:
        return all(v.resolved for v in self.variables)

    @property
    def unresolved_count(self) -> int:
        return sum(1 for v in self.variables if not v.resolved)


@dataclass(frozen=True)
class HighlightSegment:
    """A run of text for rendering; ``variable`` is set for placeholder runs."""

    text: str
    start: int
    end: int
    variable: VariableSpan | None = None


class VariableResolver:
    """Resolves placeholders against the enabled entries of an environment."""

    def analyze(self, text: str, environment: Environment | None = None) -> list[VariableSpan]:
        spans: list[VariableSpan] = []
        for match in PLACEHOLDER_RE.finditer(text):
            name = match.group(1).strip()
            variable = environment.lookup(name) if environment is not None else None
            spans.append(
                VariableSpan(
                    name=name,
                    start=match.start(),
                    end=match.end(),
                    resolved=variable is not None,
                    value=variable.value if variable is not None else None,
                    secret=variable.is_secret if variable is not None else False,
                )
            )
        return spans

    def interpolate(self, text: str, environment: Environment | None = None) -> str:
        """Substitute resolved placeholders; unresolved ones are left as written."""
        if environment is None:
            return text

        def _replace(match: re.Match[str]) -> str:
            variable = environment.lookup(match.group(1).strip())
            return variable.value if variable is not None else match.group(0)

        return PLACEHOLDER_RE.sub(_replace, text)

    def preview(self, text: str, environment: Environment | None = None) -> InterpolationPreview:
        return InterpolationPreview(
            original=text,
            interpolated=self.interpolate(text, environment),
            variables=self.analyze(text, environment),
        )

    def highlight_segments(
        self, text: str, environment: Environment | None = None
    ) -> list[HighlightSegment]:
        """Split *text* into alternating plain and placeholder segments."""
        segments: list[HighlightSegment] = []
        last = 0
        for span in self.analyze(text, environment):
            if span.start > last:
                segments.append(HighlightSegment(text[last : span.start], last, span.start))
            segments.append(
                HighlightSegment(text[span.start : span.end], span.start, span.end, span)
            )
            last = span.end
        if last < len(text):
            segments.append(HighlightSegment(text[last:], last, len(text)))
        return segments


_resolver = VariableResolver()


def analyze(text: str, environment: Environment | None = None) -> list[VariableSpan]:
    return _resolver.analyze(text, environment)


def interpolate(text: str, environment: Environment | None = None) -> str:
    return _resolver.interpolate(text, environment)


def preview(text: str, environment: Environment | None = None) -> InterpolationPreview:
    return _resolver.preview(text, environment)


def highlight_segments(text: str, environment: Environment | None = None) -> list[HighlightSegment]:
    return _resolver.highlight_segments(text, environment)
