"""Placeholder substitution for template content.

Template content is plain text with a single reserved placeholder token
(``<input>`` by default). Rendering rewrites every placeholder occurrence into
one Jinja2 variable expression, parses and checks the result, then renders
it. Checking first means any other template syntax in the content
(``{{ ... }}``, ``{% ... %}``, ``{# ... #}``) is reported as a
TemplateSyntaxError instead of producing half-rendered output. The input
value is inserted literally and is never expanded again.

Jinja2 rewrites every line ending to one ``newline_sequence``. Content with a
single line-ending style renders in one pass with that style; content that
mixes styles renders line by line so each line keeps its own ending.
"""

from __future__ import annotations

import logging

from jinja2 import Environment, StrictUndefined, Template, TemplateError
from jinja2 import TemplateSyntaxError as JinjaTemplateSyntaxError

from promptgen.config.app import DEFAULT_PLACEHOLDER
from promptgen.errors import TemplateSyntaxError

logger = logging.getLogger(__name__)

INPUT_VARIABLE = "__promptgen_input__"

# Lexer tokens produced by plain text and "{{ __promptgen_input__ }}"
_ALLOWED_TOKENS = {"data", "variable_begin", "variable_end", "whitespace"}

_TOKEN_DESCRIPTIONS = {
    "block_begin": "block tag '{%'",
    "comment_begin": "comment '{#'",
    "raw_begin": "raw block",
    "linestatement_begin": "line statement",
    "linecomment_begin": "line comment",
}


def newline_style(content: str) -> str | None:
    """Return the one line ending used in content, or None if styles are mixed.

    Content without line breaks reports "\\n".
    """
    crlf = content.count("\r\n")
    lf = content.count("\n") - crlf
    cr = content.count("\r") - crlf
    used = [style for style, count in (("\r\n", crlf), ("\n", lf), ("\r", cr)) if count]
    if len(used) > 1:
        return None
    return used[0] if used else "\n"


class PromptRenderer:
    """Render template content by substituting the placeholder token.

    Usage:
        renderer = PromptRenderer()
        renderer.render("Summarize:\\n<input>", "hello")  # "Summarize:\\nhello"
    """

    def __init__(self, placeholder: str = DEFAULT_PLACEHOLDER) -> None:
        if not placeholder:
            raise ValueError("Placeholder must not be empty")
        if "\n" in placeholder or "\r" in placeholder:
            raise ValueError("Placeholder must fit on one line")
        self.placeholder = placeholder
        self._envs: dict[str, Environment] = {}

    def _environment(self, newline: str) -> Environment:
        env = self._envs.get(newline)
        if env is None:
            env = Environment(  # nosec B701 - generating raw text prompts, not HTML
                autoescape=False,
                undefined=StrictUndefined,
                keep_trailing_newline=True,
                newline_sequence=newline,
                extensions=[],
            )
            self._envs[newline] = env
        return env

    def _to_jinja(self, content: str) -> str:
        return content.replace(self.placeholder, "{{ " + INPUT_VARIABLE + " }}")

    def _check_tokens(self, env: Environment, source: str, name: str | None) -> None:
        """Reject any token that is not plain text or the placeholder variable."""
        for lineno, token_type, value in env.lex(source):
            if token_type in _ALLOWED_TOKENS:
                continue
            if token_type == "name" and value == INPUT_VARIABLE:
                continue
            what = _TOKEN_DESCRIPTIONS.get(token_type, f"unexpected expression {value!r}")
            raise TemplateSyntaxError(name, f"unsupported template syntax: {what}", lineno)

    def _compile(self, content: str, name: str | None, newline: str = "\n") -> Template:
        env = self._environment(newline)
        source = self._to_jinja(content)
        try:
            template = env.from_string(source)
        except JinjaTemplateSyntaxError as e:
            raise TemplateSyntaxError(name, e.message or str(e), e.lineno) from e
        self._check_tokens(env, source, name)
        return template

    def _render_template(self, template: Template, input_text: str, name: str | None) -> str:
        try:
            return template.render({INPUT_VARIABLE: input_text})
        except TemplateError as e:
            logger.debug(f"Template rendering failed: {e}")
            raise TemplateSyntaxError(name, str(e)) from e

    def validate(self, content: str, name: str | None = None) -> None:
        """Parse content without rendering it.

        Raises:
            TemplateSyntaxError: If content contains template syntax other
                than the placeholder
        """
        self._compile(content, name)

    def render(self, content: str, input_text: str, name: str | None = None) -> str:
        """Replace every placeholder in content with input_text.

        Args:
            content: Template content
            input_text: Text to insert, used verbatim
            name: Template name, for error messages

        Returns:
            Rendered prompt with the content's line endings unchanged

        Raises:
            TemplateSyntaxError: If content contains template syntax other
                than the placeholder
        """
        if not content:
            return content

        newline = newline_style(content)
        if newline is not None:
            template = self._compile(content, name, newline)
            return self._render_template(template, input_text, name)

        # Checked as a whole first so errors report the real line number
        self._compile(content, name)
        parts = []
        for line in content.splitlines(keepends=True):
            body = line.rstrip("\r\n")
            template = self._compile(body, name)
            parts.append(self._render_template(template, input_text, name) + line[len(body) :])
        return "".join(parts)
