"""
Template Registry

Loads action templates from JSON documents on disk:

    templates/
        global.json              # ageToleranceScale
        dribbling/*.json
        shooting/*.json

Every document is resolved (and validated) once at load time.
"""

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional, Union

from ..config import settings
from ..domain.template import ActionTemplate, AnalysisMode
from ..exceptions import TemplateError

logger = logging.getLogger(__name__)

GLOBAL_CONFIG_FILE = "global.json"


def _read_json(path: Path) -> dict:
    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise TemplateError(f"{path.name}: invalid JSON ({e})") from e
    if not isinstance(data, dict):
        raise TemplateError(f"{path.name}: expected a JSON object")
    return data


class TemplateRegistry:
    """
    In-memory catalog of resolved templates.

    Usage:
        registry = TemplateRegistry.from_directory(Path("core/templates"))
        template = registry.get_template_by_id("dribble_front_onehand_v")
    """

    def __init__(
        self,
        templates: list[ActionTemplate],
        age_tolerance_scale: Optional[dict[str, float]] = None,
    ):
        self._templates: dict[str, ActionTemplate] = {}
        for template in templates:
            if template.template_id in self._templates:
                raise TemplateError(f"Duplicate templateId '{template.template_id}'")
            self._templates[template.template_id] = template
        self.age_tolerance_scale: dict[str, float] = dict(age_tolerance_scale or {})

    @classmethod
    def from_directory(cls, directory: Union[str, Path]) -> "TemplateRegistry":
        """
        Load global.json and every template under the mode subdirectories.

        Raises:
            TemplateError: a document is malformed
        """
        directory = Path(directory)

        scale: dict[str, float] = {}
        global_path = directory / GLOBAL_CONFIG_FILE
        if global_path.exists():
            raw_scale = _read_json(global_path).get("ageToleranceScale") or {}
            try:
                scale = {group: float(value) for group, value in raw_scale.items()}
            except (TypeError, ValueError, AttributeError):
                raise TemplateError(f"{GLOBAL_CONFIG_FILE}: invalid ageToleranceScale") from None

        templates = []
        for mode in AnalysisMode:
            for path in sorted((directory / mode.value).glob("*.json")):
                template = ActionTemplate.from_dict(_read_json(path))
                if template.mode is not mode:
                    raise TemplateError(
                        f"{path.name}: mode '{template.mode.value}' stored under '{mode.value}/'"
                    )
                templates.append(template)

        logger.info(f"Loaded {len(templates)} templates from {directory}")
        return cls(templates, scale)

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def get_template_by_id(self, template_id: str) -> Optional[ActionTemplate]:
        return self._templates.get(template_id)

    def get_all_templates(self, mode: Optional[AnalysisMode] = None) -> list[ActionTemplate]:
        """All templates, optionally filtered by analysis mode."""
        templates = list(self._templates.values())
        if mode is not None:
            templates = [t for t in templates if t.mode is mode]
        return templates

    def __len__(self) -> int:
        return len(self._templates)

    def __contains__(self, template_id: str) -> bool:
        return template_id in self._templates


@lru_cache(maxsize=1)
def get_registry() -> TemplateRegistry:
    """Registry for the configured templates directory (loaded once)."""
    return TemplateRegistry.from_directory(settings.TEMPLATES_DIR)
