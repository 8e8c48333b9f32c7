"""Flag registry: spelling lookup, cluster expansion, suggestions and ranked search."""

from __future__ import annotations

from curlbridge.grammar.flags import FLAG_SPECS, FlagSpec


class UnknownFlagError(Exception):
    """Raised when a requested flag is not in the grammar table."""

    def __init__(self, flag: str, suggestions: list[str]) -> None:
        self.flag = flag
        self.suggestions = suggestions
        hint = f" Did you mean {suggestions[0]}?" if suggestions else ""
        super().__init__(f"Unknown flag '{flag}'.{hint}")


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance between two strings."""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def fuzzy_score(query: str, target: str) -> float | None:
    """Score ``query`` as an in-order subsequence of ``target``; ``None`` when it is not one.

    Consecutive matches and matches right after a ``-`` separator score higher;
    gaps and unmatched trailing characters lower the score.
    """
    if not query:
        return 0.0
    q = query.lower()
    t = target.lower()
    score = 0.0
    ti = 0
    previous_match = -2
    for ch in q:
        found = t.find(ch, ti)
        if found < 0:
            return None
        score += 1.0
        if found == previous_match + 1:
            score += 2.0
        if found == 0 or t[found - 1] in "-.":
            score += 1.5
        score -= 0.1 * (found - ti)
        previous_match = found
        ti = found + 1
    score -= 0.05 * (len(t) - ti)
    return score


class FlagRegistry:
    """Registry of the supported cURL flags, keyed by every spelling."""

    _specs: dict[str, FlagSpec] = {}
    _ordered: list[FlagSpec] = []

    @classmethod
    def register(cls, spec: FlagSpec) -> FlagSpec:
        """Register a flag under all of its spellings."""
        for spelling in spec.spellings:
            cls._specs[spelling] = spec
        if spec not in cls._ordered:
            cls._ordered.append(spec)
        return spec

    @classmethod
    def lookup(cls, flag: str) -> FlagSpec | None:
        return cls._specs.get(flag)

    @classmethod
    def get(cls, flag: str) -> FlagSpec:
        """Like :meth:`lookup` but raises :class:`UnknownFlagError`.

        Bare names (``header``, ``H``) are accepted as well as dashed spellings.
        """
        for candidate in (flag, f"--{flag}", f"-{flag}"):
            spec = cls._specs.get(candidate)
            if spec is not None:
                return spec
        raise UnknownFlagError(flag, cls.suggest(flag if flag.startswith("-") else f"--{flag}"))

    @classmethod
    def expand_cluster(cls, flag: str) -> tuple[list[FlagSpec], str] | None:
        """Expand ``-sSL`` into its short flags.

        Returns ``(specs, inline)``.  A letter that takes an argument ends the
        cluster: the rest of the word is its inline argument (``POST`` in
        ``-sXPOST``), empty when the argument is the next word (``-sX POST``).
        Returns ``None`` when a letter before that point is not a known short flag.
        """
        if len(flag) < 3 or not flag.startswith("-") or flag.startswith("--"):
            return None
        specs: list[FlagSpec] = []
        for position in range(1, len(flag)):
            spec = cls._specs.get(f"-{flag[position]}")
            if spec is None:
                return None
            specs.append(spec)
            if spec.arity != 0:
                return specs, flag[position + 1 :]
        return specs, ""

    @classmethod
    def all_specs(cls) -> list[FlagSpec]:
        return list(cls._ordered)

    @classmethod
    def spellings(cls) -> list[str]:
        return list(cls._specs.keys())

    @classmethod
    def short_with_argument(cls) -> frozenset[str]:
        """Two-character spellings whose argument may be attached (``-XPOST``)."""
        return frozenset(s for s, spec in cls._specs.items() if len(s) == 2 and spec.arity == 1)

    @classmethod
    def suggest(cls, flag: str, max_distance: int = 2) -> list[str]:
        """Nearest known spellings to an unknown flag, closest first.

        Short flags only suggest a case-swapped letter; every other single
        letter is within distance one and would be noise.
        """
        if not flag.startswith("-") or flag in ("-", "--"):
            return []
        is_long = flag.startswith("--")
        if not is_long:
            if len(flag) != 2:
                return []
            swapped = f"-{flag[1].swapcase()}"
            return [swapped] if swapped in cls._specs and swapped != flag else []
        ranked: list[tuple[int, int, str]] = []
        for index, spelling in enumerate(cls._specs):
            if not spelling.startswith("--"):
                continue
            distance = edit_distance(flag, spelling)
            if distance <= max_distance:
                ranked.append((distance, index, spelling))
        ranked.sort()
        return [spelling for _, _, spelling in ranked[:3]]

    @classmethod
    def search(cls, query: str) -> list[tuple[str, FlagSpec, float]]:
        """Rank spellings for completion: prefix matches first, then fuzzy matches.

        Returns ``(spelling, spec, score)`` tuples; prefix matches always
        outrank fuzzy ones.
        """
        prefix: list[tuple[str, FlagSpec, float]] = []
        seen: set[str] = set()
        for spelling, spec in cls._specs.items():
            if spelling.startswith(query):
                prefix.append((spelling, spec, 100.0 - len(spelling)))
                seen.add(spelling)
        prefix.sort(key=lambda item: (-item[2], item[0].startswith("--")))

        stripped = query.lstrip("-")
        fuzzy: list[tuple[str, FlagSpec, float]] = []
        if stripped:
            long_only = query.startswith("--") or len(stripped) > 1
            for spelling, spec in cls._specs.items():
                if spelling in seen or (long_only and not spelling.startswith("--")):
                    continue
                score = fuzzy_score(stripped, spelling.lstrip("-"))
                if score is not None and score > 0:
                    fuzzy.append((spelling, spec, score))
            fuzzy.sort(key=lambda item: -item[2])
        return prefix + fuzzy

    @classmethod
    def reset(cls) -> None:
        """Restore the built-in table (for testing)."""
        cls._specs = {}
        cls._ordered = []
        for spec in FLAG_SPECS:
            cls.register(spec)


FlagRegistry.reset()


def lookup(flag: str) -> FlagSpec | None:
    """Grammar-table lookup by exact spelling (``-H``, ``--header``)."""
    return FlagRegistry.lookup(flag)
