"""Handlebars prompt rendering for narrative gateway requests."""

from collections.abc import Callable
from typing import Any

import pybars


_compiler = pybars.Compiler()
_cache: dict[str, Callable] = {}


class PromptError(Exception):
    """Raised when a Handlebars template fails to compile or render."""


# ── Templates ────────────────────────────────────────────
# Free text goes through triple-stash so themes like "Classic D&D" are not
# HTML-escaped.

GATEWAY_PROMPT = """\
You are the Dungeon Master of an interactive {{{session.theme}}} adventure.
Difficulty: {{{session.difficulty}}}. Session length: {{{session.session_time}}} minutes.

{{#if character}}
## Player Character
{{{character}}}

{{/if}}
{{#if history}}
## Recent History
{{#last history 10}}
{{{this}}}
{{/last}}

{{/if}}
## Request
{{{prompt}}}\
"""

ENHANCE_QUEST_PROMPT = """\
Enhance this quest for a level {{{character.level}}} {{{character.race}}} {{{character.class_}}}:

Quest: {{{quest.title}}}
Description: {{{quest.description}}}
Objectives: {{{objectives}}}

Make it more personal and engaging based on their background and class.\
"""

CUSTOM_QUEST_PROMPT = """\
Create a unique quest for a level {{{character.level}}} {{{character.race}}} {{{character.class_}}}.
Theme: {{{config.theme}}}
Session time: {{{config.session_time}}} minutes
Difficulty: {{{difficulty}}}

Include:
- Interesting objective
- Fitting rewards for level
- Engaging narrative hook
- Appropriate encounters\
"""


# ── Custom Handlebars helpers ────────────────────────────


def _helper_last(this, options, items, count):
    """{{#last array N}}...{{/last}} — iterate over the last N items."""
    result = []
    for item in list(items)[-int(count):]:
        result.extend(options["fn"](item))
    return result


_HELPERS: dict[str, Callable] = {
    "last": _helper_last,
}


def render_prompt(template_str: str, context: dict[str, Any]) -> str:
    """Compile and render a Handlebars template with the given context.

    Templates are cached by source string to avoid recompilation.
    """
    try:
        compiled = _cache.get(template_str)
        if compiled is None:
            compiled = _compiler.compile(template_str)
            _cache[template_str] = compiled
        return str(compiled(context, helpers=_HELPERS))
    except Exception as e:
        raise PromptError(f"Template error: {e}") from e
