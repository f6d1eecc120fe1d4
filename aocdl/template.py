import re
from dataclasses import replace
from typing import Final

from .errors import TemplateError
from .settings import Settings

_ACTION: Final = re.compile(r"\{\{(.*?)\}\}", re.DOTALL)
_FIELDS: Final = (".Year", ".Day")


def render(template: str, year: int, day: int) -> str:
    """Expand ``{{.Year}}`` and ``{{.Day}}`` markers in an output path.

    The set of markers is closed; any other action, or an opening ``{{``
    without its closing braces, is rejected.
    """
    values = {".Year": year, ".Day": day}

    def substitute(match: re.Match[str]) -> str:
        name = match.group(1).strip()
        if name not in values:
            raise TemplateError(
                f"template: output: unknown marker '{{{{{match.group(1)}}}}}'"
                f" (expected one of {', '.join(_FIELDS)})"
            )
        return str(values[name])

    rendered = []
    pos = 0
    for match in _ACTION.finditer(template):
        rendered.append(template[pos : match.start()])
        rendered.append(substitute(match))
        pos = match.end()
    rest = template[pos:]
    if "{{" in rest:
        raise TemplateError(f"template: output: unclosed action in '{template}'")
    rendered.append(rest)
    return "".join(rendered)


def render_output(settings: Settings) -> Settings:
    return replace(
        settings, output=render(settings.output, settings.year, settings.day)
    )
