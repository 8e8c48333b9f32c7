"""cURL command generation."""

from curlbridge.generator.codegen import CurlGenerator, generate, shell_quote

__all__ = ["CurlGenerator", "generate", "shell_quote"]
