"""Assemble handler fragments and a body into one AppleScript program.

AppleScript only accepts handler declarations (`on ... end`) at the top
level, so fragments always precede the `tell` block that wraps the body.
"""

from __future__ import annotations

from collections.abc import Sequence

from ofocus.bridge.assets import JSON_HELPERS, ScriptAssets, default_assets

DEFAULT_APPLICATION = "OmniFocus"


def tell_block(body: str, *, application: str = DEFAULT_APPLICATION) -> str:
    return (
        f'tell application "{application}"\n'
        "  tell default document\n"
        f"    {body}\n"
        "  end tell\n"
        "end tell"
    )


def compose(
    fragments: Sequence[str],
    body: str,
    *,
    application: str = DEFAULT_APPLICATION,
) -> str:
    """Join fragments in order, then the body inside the application tell block."""

    handlers = "\n\n".join(fragments)
    return f"{handlers}\n\n{tell_block(body, application=application)}"


def application_script(body: str, *, application: str = DEFAULT_APPLICATION) -> str:
    return compose([], body, application=application)


def script_with_json_helpers(
    body: str,
    *,
    extra_fragments: Sequence[str] = (),
    assets: ScriptAssets | None = None,
    application: str = DEFAULT_APPLICATION,
) -> str:
    """Compose `body` with the JSON helper handlers prepended to `extra_fragments`."""

    loader = assets or default_assets()
    json_helpers = loader.load_cached(JSON_HELPERS)
    return compose([json_helpers, *extra_fragments], body, application=application)
