"""UI theme definitions and selection helpers.

Themes are ANSI palettes for tree rows (root header, names, marks, badges and
metadata columns).
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by row renderers."""

    name: str
    reset: str
    tree_marker: str
    tree_connector: str
    tree_dir: str
    tree_file_default: str
    tree_file_executable: str
    tree_hidden: str
    tree_readonly: str
    tree_size: str
    tree_timestamp: str
    tree_filetype: str
    root_title: str
    root_path: str
    selection: str
    clip_copied: str
    clip_cut: str
    buffer_modified: str
    git_badge_changed: str
    git_badge_untracked: str


DEFAULT_THEME = UITheme(
    name="default",
    reset="\033[0m",
    tree_marker="\033[38;5;44m",
    tree_connector="\033[2m",
    tree_dir="\033[1;34m",
    tree_file_default="\033[38;5;252m",
    tree_file_executable="\033[38;5;114m",
    tree_hidden="\033[2;38;5;250m",
    tree_readonly="\033[38;5;174m",
    tree_size="\033[38;5;109m",
    tree_timestamp="\033[2;38;5;250m",
    tree_filetype="\033[38;5;146m",
    root_title="\033[1;38;5;81m",
    root_path="\033[2;38;5;250m",
    selection="\033[38;5;229m",
    clip_copied="\033[38;5;81m",
    clip_cut="\033[38;5;203m",
    buffer_modified="\033[38;5;174m",
    git_badge_changed="\033[38;5;214m",
    git_badge_untracked="\033[38;5;42m",
)

OCEAN_THEME = UITheme(
    name="ocean",
    reset="\033[0m",
    tree_marker="\033[38;5;39m",
    tree_connector="\033[2;38;5;31m",
    tree_dir="\033[1;38;5;45m",
    tree_file_default="\033[38;5;252m",
    tree_file_executable="\033[38;5;84m",
    tree_hidden="\033[2;38;5;110m",
    tree_readonly="\033[38;5;210m",
    tree_size="\033[38;5;73m",
    tree_timestamp="\033[2;38;5;110m",
    tree_filetype="\033[38;5;117m",
    root_title="\033[1;38;5;45m",
    root_path="\033[2;38;5;110m",
    selection="\033[38;5;153m",
    clip_copied="\033[38;5;45m",
    clip_cut="\033[38;5;210m",
    buffer_modified="\033[38;5;210m",
    git_badge_changed="\033[38;5;215m",
    git_badge_untracked="\033[38;5;84m",
)

PLAIN_THEME = UITheme(
    name="plain",
    reset="",
    tree_marker="",
    tree_connector="",
    tree_dir="",
    tree_file_default="",
    tree_file_executable="",
    tree_hidden="",
    tree_readonly="",
    tree_size="",
    tree_timestamp="",
    tree_filetype="",
    root_title="",
    root_path="",
    selection="",
    clip_copied="",
    clip_cut="",
    buffer_modified="",
    git_badge_changed="",
    git_badge_untracked="",
)

_THEMES: dict[str, UITheme] = {
    DEFAULT_THEME.name: DEFAULT_THEME,
    OCEAN_THEME.name: OCEAN_THEME,
}


def available_theme_names() -> tuple[str, ...]:
    """Return selectable non-plain theme names."""
    return tuple(sorted(_THEMES.keys()))


def normalize_theme_name(name: str | None) -> str:
    """Return a valid theme name, falling back to default."""
    if not name:
        return DEFAULT_THEME.name
    candidate = str(name).strip().lower()
    if candidate in _THEMES:
        return candidate
    return DEFAULT_THEME.name


def resolve_theme(name: str | None, *, no_color: bool = False) -> UITheme:
    """Return concrete theme for requested name and color mode."""
    if no_color:
        return PLAIN_THEME
    return _THEMES[normalize_theme_name(name)]


__all__ = [
    "UITheme",
    "DEFAULT_THEME",
    "OCEAN_THEME",
    "PLAIN_THEME",
    "available_theme_names",
    "normalize_theme_name",
    "resolve_theme",
]
