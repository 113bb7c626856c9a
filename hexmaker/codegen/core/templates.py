"""
Template engine wrapper for code generation.

Provides a simple interface for Jinja2 template rendering
with common utilities for PHP code generation.
"""

from typing import Dict, Any, List, Optional
from pathlib import Path

from jinja2 import (
    ChoiceLoader,
    DictLoader,
    Environment,
    FileSystemLoader,
    TemplateNotFound,
    select_autoescape,
)

from .naming import NamingCase, convert_case, humanize, lcfirst, ucfirst


# Built-in PHP/YAML/XML templates shipped with the package
DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"


class TemplateError(Exception):
    """Exception raised for template-related errors."""

    pass


class TemplateNotFoundError(TemplateError):
    """Raised when a template id has no body in the template store."""

    def __init__(self, template_name: str):
        super().__init__(f"Template not found: {template_name}")
        self.template_name = template_name


class TemplateEngine:
    """Wrapper for Jinja2 template engine with code generation utilities."""

    def __init__(self, template_dir: Optional[Path] = None,
                 override_dir: Optional[Path] = None):
        """
        Initialize template engine.

        Args:
            template_dir: Directory containing template files
            override_dir: Directory searched before template_dir
        """
        self.template_dir = template_dir if template_dir is not None else DEFAULT_TEMPLATE_DIR
        self.override_dir = override_dir
        self._memory_templates: Dict[str, str] = {}
        self._env = None
        self._setup_environment()

    def _setup_environment(self):
        """Setup Jinja2 environment with code generation utilities."""
        loaders = [DictLoader(self._memory_templates)]
        if self.override_dir and Path(self.override_dir).exists():
            loaders.append(FileSystemLoader(str(self.override_dir)))
        if self.template_dir and Path(self.template_dir).exists():
            loaders.append(FileSystemLoader(str(self.template_dir)))

        self._env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape([], default_for_string=False),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

        # Add custom filters for code generation
        self._env.filters["snake_case"] = self._snake_case_filter
        self._env.filters["kebab_case"] = self._kebab_case_filter
        self._env.filters["camel_case"] = self._camel_case_filter
        self._env.filters["pascal_case"] = self._pascal_case_filter
        self._env.filters["ucfirst"] = ucfirst
        self._env.filters["lcfirst"] = lcfirst
        self._env.filters["humanize"] = humanize
        self._env.filters["php_string"] = self._php_string_filter

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Render a template with the given context.

        Args:
            template_name: Template id relative to the template directory
            context: Variables to pass to template

        Returns:
            Rendered template content

        Raises:
            TemplateNotFoundError: If no template has this name
            TemplateError: If rendering fails
        """
        try:
            template = self._env.get_template(template_name)
        except TemplateNotFound as e:
            raise TemplateNotFoundError(template_name) from e

        try:
            return template.render(**context)
        except Exception as e:
            raise TemplateError(f"Failed to render template {template_name}: {str(e)}") from e

    def render_string(self, template_string: str, context: Dict[str, Any]) -> str:
        """
        Render a template string with the given context.

        Args:
            template_string: Template content as string
            context: Variables to pass to template

        Returns:
            Rendered content
        """
        try:
            template = self._env.from_string(template_string)
            return template.render(**context)
        except Exception as e:
            raise TemplateError(f"Failed to render template string: {str(e)}") from e

    def add_template(self, name: str, content: str):
        """
        Add an in-memory template, taking precedence over files.

        Args:
            name: Template name
            content: Template content
        """
        self._memory_templates[name] = content

    def template_exists(self, template_name: str) -> bool:
        """Check if a template exists."""
        try:
            self._env.get_template(template_name)
        except TemplateNotFound:
            return False
        return True

    def list_templates(self) -> List[str]:
        return sorted(set(self._env.list_templates()))

    # Template filters for code generation

    def _snake_case_filter(self, value: str) -> str:
        return convert_case(str(value), NamingCase.SNAKE_CASE)

    def _kebab_case_filter(self, value: str) -> str:
        return convert_case(str(value), NamingCase.KEBAB_CASE)

    def _camel_case_filter(self, value: str) -> str:
        return convert_case(str(value), NamingCase.CAMEL_CASE)

    def _pascal_case_filter(self, value: str) -> str:
        return convert_case(str(value), NamingCase.PASCAL_CASE)

    def _php_string_filter(self, value: str) -> str:
        """Escape a value for a single-quoted PHP string."""
        return str(value).replace("\\", "\\\\").replace("'", "\\'")


def create_template_engine(template_dir: Optional[Path] = None,
                           override_dir: Optional[Path] = None) -> TemplateEngine:
    """Create a template engine over the built-in templates plus an optional override dir."""
    return TemplateEngine(template_dir, override_dir)
