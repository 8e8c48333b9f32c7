"""cURL command reference text, served via the REST API and the MCP resource."""

from __future__ import annotations

from curlbridge.grammar.flags import FLAG_SPECS, ArgumentKind, FlagSpec

_INTRO = """\
# cURL Command Reference

Commands are written the way a shell would read them:

```bash
curl -X POST https://api.example.com/users \\
  -H 'Content-Type: application/json' \\
  -d '{"name": "{{userName}}"}'
```

## Quoting

- Single quotes keep their content literally (no escapes inside).
- Double quotes allow `\\\\`, `\\"`, `\\$` and `` \\` `` escapes.
- A trailing `\\` joins the next line onto the command.
- Inside quotes, a single quote is written as `'\\''`.

## Variables

`{{name}}` placeholders may appear anywhere, including inside quotes. They are
resolved against the active environment before sending; unresolved
placeholders are left as written and are never reported as errors.

## Body modes

The last body flag decides the body mode: `-d`/`--data*`/`--json` send a raw
body, `-F`/`--form` a multipart form, `--data-urlencode` an urlencoded form.
Mixing them keeps only the last mode and is reported as a warning.
A `-d` body that is a JSON object with a `query` key is read as GraphQL.
"""

_SECTIONS: tuple[tuple[str, frozenset[ArgumentKind]], ...] = (
    ("Request", frozenset({ArgumentKind.METHOD})),
    ("Headers", frozenset({ArgumentKind.HEADER})),
    ("Body", frozenset({ArgumentKind.DATA})),
    ("Authentication", frozenset({ArgumentKind.AUTH})),
    ("Options", frozenset({ArgumentKind.STRING, ArgumentKind.FLAG})),
)


def flag_entry(spec: FlagSpec) -> str:
    """One markdown bullet for a flag."""
    spelling = ", ".join(f"`{s}`" for s in spec.spellings)
    arg = " `<value>`" if spec.arity == 1 else ""
    line = f"- {spelling}{arg}: {spec.description}"
    if spec.example:
        line += f" Example: `{spec.example}`."
    if spec.tip:
        line += f" {spec.tip}"
    return line


def build_reference() -> str:
    parts = [_INTRO]
    for title, kinds in _SECTIONS:
        entries = [flag_entry(spec) for spec in FLAG_SPECS if spec.argument_kind in kinds]
        if entries:
            parts.append(f"## {title}\n\n" + "\n".join(entries) + "\n")
    return "\n".join(parts)


CURL_REFERENCE = build_reference()
