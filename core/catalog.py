from copy import copy
from pathlib import Path
from typing import Any, Dict, Optional, Union

import jinja2
import yaml

DEFAULT_CATALOG_PATH = Path(__file__).parent / "prompts" / "prompts.yaml"


class MessageCatalog:
    def __init__(
        self, file_path: Union[str, Path] = DEFAULT_CATALOG_PATH, section_path: Optional[str] = None
    ) -> None:
        """Load user-facing texts (tool descriptions, result summaries) from YAML.

        Args:
            file_path: Path to the YAML catalog
            section_path: Section of the file to use (dot notation for nested keys)

        Raises:
            FileNotFoundError: If the catalog file doesn't exist
            yaml.YAMLError: If the YAML file is malformed
            ValueError: If the section is not found in the catalog
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"Message catalog not found: {file_path}")

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                self._data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Failed to parse YAML file {file_path}: {e}")

        if section_path:
            self._data = self._traverse_path(self._data, section_path)

        self._environment = jinja2.Environment(
            undefined=jinja2.StrictUndefined, trim_blocks=True, lstrip_blocks=True
        )
        self._template_cache: Dict[str, jinja2.Template] = {}

    def _traverse_path(self, data: Any, path: str) -> Any:
        current = data
        try:
            for key in path.split("."):
                current = current[key]
        except (KeyError, TypeError):
            raise ValueError(f"Path '{path}' not found in message catalog")
        return current

    def get(self, name: str) -> Union[str, Dict[str, Any]]:
        """Get a raw catalog entry (dot notation for nested keys).

        Raises:
            ValueError: If the entry is not found
        """
        return copy(self._traverse_path(self._data, name))

    def get_text(self, name: str, default: Optional[str] = None) -> str:
        """Get a text entry, stripped, falling back to ``default`` when missing."""
        try:
            value = self.get(name)
        except ValueError:
            if default is None:
                raise
            return default
        if not isinstance(value, str):
            raise ValueError(f"Catalog entry '{name}' is not a string")
        return value.strip()

    def render(self, name: str, **kwargs) -> str:
        """Render a text entry as a Jinja2 template.

        Raises:
            ValueError: If the entry is not found or not a string
            jinja2.TemplateError: If rendering fails, including undefined variables
        """
        source = self.get_text(name)
        if source not in self._template_cache:
            self._template_cache[source] = self._environment.from_string(source)
        return self._template_cache[source].render(**kwargs).strip()
