"""themectl — build WordPress themes from Jinja2, Sass and plain scripts."""

__version__ = "0.3.0"
