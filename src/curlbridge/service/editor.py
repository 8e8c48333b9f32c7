"""Editor session state: the mutable side of the editor adapter.

The command-language core is stateless; this module owns the text buffer,
the environment snapshot, the generation counter that orders edits, the
authoritative surface (text editor or visual builder) and the debounced
analysis.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from curlbridge.completion.provider import CompletionProvider, Suggestion
from curlbridge.generator.codegen import DEFAULT_LINE_WIDTH, CurlGenerator
from curlbridge.lexer.tokenizer import tokenize
from curlbridge.models.environment import Environment
from curlbridge.models.errors import Diagnostic
from curlbridge.models.request import RequestModel
from curlbridge.parser.parser import parse
from curlbridge.parser.resolver import VariableResolver, VariableSpan
from curlbridge.parser.validator import CommandValidator
from curlbridge.service.debounce import Debouncer

logger = logging.getLogger("curlbridge.service")


class Surface(StrEnum):
    """Which view was edited last and is therefore authoritative."""

    TEXT = "text"
    BUILDER = "builder"


class StaleGenerationError(Exception):
    """Raised when an edit is based on an older generation than the session holds."""

    def __init__(self, expected: int, current: int) -> None:
        self.expected = expected
        self.current = current
        super().__init__(
            f"Edit is based on generation {expected}, but the session is at generation {current}"
        )


@dataclass(frozen=True)
class EditorAnalysis:
    """Everything the editor renders for one generation of the text."""

    generation: int
    environment_fingerprint: str
    surface: Surface
    text: str
    diagnostics: list[Diagnostic]
    variables: list[VariableSpan]
    request: RequestModel

    @property
    def has_errors(self) -> bool:
        return any(d.is_error for d in self.diagnostics)


class EditorSession:
    """Thread-safe editor state for one command buffer."""

    def __init__(
        self,
        text: str = "",
        environment: Environment | None = None,
        *,
        debounce_ms: int = 500,
        line_width: int = DEFAULT_LINE_WIDTH,
        max_distance: int = 2,
        completion_limit: int = 50,
        secret_mask: str = "••••••",
    ) -> None:
        self._lock = threading.Lock()
        self._text = text
        self._environment = environment
        self._generation = 0
        self._surface = Surface.TEXT
        self._analysis: EditorAnalysis | None = None
        self._debouncer = Debouncer(debounce_ms / 1000)
        self._generator = CurlGenerator(line_width)
        self._validator = CommandValidator(max_distance)
        self._resolver = VariableResolver()
        self._completion = CompletionProvider(limit=completion_limit, secret_mask=secret_mask)

    # -- state ---------------------------------------------------------------

    @property
    def text(self) -> str:
        with self._lock:
            return self._text

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    @property
    def environment(self) -> Environment | None:
        with self._lock:
            return self._environment

    @property
    def surface(self) -> Surface:
        with self._lock:
            return self._surface

    def _check_generation(self, expected: int | None) -> None:
        if expected is not None and expected != self._generation:
            raise StaleGenerationError(expected, self._generation)

    def update_text(self, text: str, *, expected_generation: int | None = None) -> int:
        """Replace the buffer from the text editor; returns the new generation."""
        with self._lock:
            self._check_generation(expected_generation)
            self._text = text
            self._generation += 1
            self._surface = Surface.TEXT
            self._analysis = None
            return self._generation

    def update_request(
        self, request: RequestModel, *, expected_generation: int | None = None
    ) -> str:
        """Apply a visual-builder edit: the request is regenerated into the buffer."""
        text = self._generator.generate(request)
        with self._lock:
            self._check_generation(expected_generation)
            self._text = text
            self._generation += 1
            self._surface = Surface.BUILDER
            self._analysis = None
            return text

    def set_environment(self, environment: Environment | None) -> None:
        """Swap the environment snapshot; cached analysis is keyed by its fingerprint."""
        with self._lock:
            self._environment = environment

    def _fingerprint(self) -> str:
        return self._environment.fingerprint() if self._environment is not None else ""

    # -- passes --------------------------------------------------------------

    def analyze(self) -> EditorAnalysis:
        """Run validate, parse and variable analysis for the current generation (cached)."""
        with self._lock:
            text = self._text
            generation = self._generation
            environment = self._environment
            surface = self._surface
            fingerprint = self._fingerprint()
            cached = self._analysis
        if (
            cached is not None
            and cached.generation == generation
            and cached.environment_fingerprint == fingerprint
        ):
            return cached

        analysis = EditorAnalysis(
            generation=generation,
            environment_fingerprint=fingerprint,
            surface=surface,
            text=text,
            diagnostics=self._validator.validate(text),
            variables=self._resolver.analyze(text, environment),
            request=parse(tokenize(text)),
        )
        with self._lock:
            if self._generation == generation:
                self._analysis = analysis
        return analysis

    def complete(self, cursor: int) -> list[Suggestion]:
        with self._lock:
            text = self._text
            environment = self._environment
        return self._completion.complete(text, cursor, environment)

    def interpolated_text(self) -> str:
        with self._lock:
            return self._resolver.interpolate(self._text, self._environment)

    # -- debounced analysis --------------------------------------------------

    def schedule_analysis(self, callback: Callable[[EditorAnalysis], None]) -> None:
        """Analyze after the debounce delay, superseding any pending run.

        A run whose generation was overtaken by a newer edit is dropped.
        """
        generation = self.generation

        def _run() -> None:
            if self.generation != generation:
                logger.debug("Dropping stale analysis for generation %d", generation)
                return
            analysis = self.analyze()
            if analysis.generation != generation:
                logger.debug("Dropping stale analysis for generation %d", generation)
                return
            callback(analysis)

        self._debouncer.call(_run)

    @property
    def analysis_pending(self) -> bool:
        return self._debouncer.pending

    def close(self) -> None:
        self._debouncer.cancel()
