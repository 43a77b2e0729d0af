"""Path table — every source glob and destination directory of a build.

All entries are plain project-relative POSIX strings computed from the theme
name alone, so the same theme always yields the same table. Glob syntax is
node-glob compatible (``**``, ``{a,b}`` braces, ``!`` negation).
"""

from __future__ import annotations

from dataclasses import dataclass

THEMES_DIR = "themes"
PUBLIC_DIR = "public"
STAGING_DIR = "tmp"
UNPACKED_DIR = "wordpress"
ARCHIVE_NAME = "latest.zip"

THEME_CONFIG_FILE = "config.json"
FUNCTIONS_FILE = "functions.php"
STYLE_ENTRY = "style.scss"
TEMPLATE_SUFFIX = ".j2"

ASSET_FOLDERS: tuple[str, ...] = ("templates", "javascripts", "stylesheets", "languages", "images")
ROOT_FILES: tuple[str, ...] = (THEME_CONFIG_FILE, FUNCTIONS_FILE)


@dataclass(frozen=True)
class PathTable:
    """Source and destination locations for one theme.

    Attributes:
        root: Theme source directory.
        config: Theme metadata file.
        stylesheets: Stylesheet source directory.
        languages: Glob of portable catalogs (``.po``).
        javascripts: Glob of script sources.
        templates: Glob of markup templates.
        images: Glob of image sources.
        functions: The entry script patched with the text domain.
        destination: Installed theme directory inside the runtime root.
        misc: Residual globs for everything not covered above.
    """

    theme: str
    root: str
    config: str
    stylesheets: str
    languages: str
    javascripts: str
    templates: str
    images: str
    functions: str
    destination: str
    misc: tuple[str, ...]

    @property
    def style_entry(self) -> str:
        return f"{self.stylesheets}/{STYLE_ENTRY}"

    @property
    def stylesheet_sources(self) -> str:
        return f"{self.stylesheets}/**/*.scss"

    @property
    def compiled_templates(self) -> str:
        """Glob of PHP files in the destination, scanned for translations."""
        return f"{self.destination}/**/*.php"

    @property
    def languages_dir(self) -> str:
        return f"{self.root}/languages"

    @property
    def destination_languages(self) -> str:
        return f"{self.destination}/languages"

    @property
    def destination_images(self) -> str:
        return f"{self.destination}/images"


def misc_patterns(root: str) -> tuple[str, ...]:
    """Everything under *root* except the asset folders and the two root files.

    The first pattern drops anything nested in an asset folder, the second
    drops the folders and root files themselves; the last includes the rest.
    """
    folders = ",".join(ASSET_FOLDERS)
    entries = ",".join((*ASSET_FOLDERS, *ROOT_FILES))
    return (
        f"!{root}/{{{folders}}}/**/*",
        f"!{root}/{{{entries}}}",
        f"{root}/**/*",
    )


def build_path_table(theme: str) -> PathTable:
    """Derive the full path table for *theme*."""
    root = f"{THEMES_DIR}/{theme}"
    return PathTable(
        theme=theme,
        root=root,
        config=f"{root}/{THEME_CONFIG_FILE}",
        stylesheets=f"{root}/stylesheets",
        languages=f"{root}/languages/*.po",
        javascripts=f"{root}/javascripts/**/*.js",
        templates=f"{root}/templates/**/*{TEMPLATE_SUFFIX}",
        images=f"{root}/images/**/*",
        functions=f"{root}/{FUNCTIONS_FILE}",
        destination=f"{PUBLIC_DIR}/wp-content/themes/{theme}",
        misc=misc_patterns(root),
    )
