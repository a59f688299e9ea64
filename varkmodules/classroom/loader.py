"""
ModuleLoader - Load authored modules from definition files.

Provides read-only access to modules stored as YAML or JSON files, one
module per file:
- Module listing with lightweight summaries
- Full module content validated against the Module schema
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from varkmodules.errors import ModuleLoadError
from varkmodules.schemas import Module


logger = logging.getLogger(__name__)

MODULE_SUFFIXES = (".yaml", ".yml", ".json")


@dataclass
class ModuleSummary:
    """Lightweight module info for listings (without section content)."""
    id: str
    title: str
    description: str
    section_count: int
    question_count: int
    path: Path


def load_module_file(path: str | Path) -> Module:
    """
    Load and validate one module definition.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ModuleLoadError: If the file can't be parsed or fails validation
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Module file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ModuleLoadError(f"Could not parse {path}: {e}") from e

    if not isinstance(data, dict):
        raise ModuleLoadError(f"Module file must contain a mapping: {path}")

    try:
        return Module.model_validate(data)
    except ValidationError as e:
        raise ModuleLoadError(f"Invalid module definition in {path}: {e}") from e


class ModuleLoader:
    """
    Load modules from a directory of definition files.

    Files are re-read on every call, so edits show up without a restart.
    """

    def __init__(self, modules_dir: str | Path):
        """
        Initialize loader.

        Args:
            modules_dir: Directory holding *.yaml / *.yml / *.json modules
        """
        self.modules_dir = Path(modules_dir)
        if not self.modules_dir.is_dir():
            raise FileNotFoundError(f"Modules directory not found: {modules_dir}")

    def _module_files(self) -> list[Path]:
        return sorted(
            p for p in self.modules_dir.iterdir()
            if p.is_file() and p.suffix in MODULE_SUFFIXES
        )

    def get_all_modules(self) -> list[Module]:
        """Every valid module; invalid files are logged and skipped."""
        modules = []
        for path in self._module_files():
            try:
                modules.append(load_module_file(path))
            except ModuleLoadError as e:
                logger.error(str(e))
        return modules

    def list_modules(self) -> list[ModuleSummary]:
        summaries = []
        for path in self._module_files():
            try:
                module = load_module_file(path)
            except ModuleLoadError as e:
                logger.error(str(e))
                continue
            summaries.append(ModuleSummary(
                id=module.id,
                title=module.title,
                description=module.description,
                section_count=module.total_sections,
                question_count=len(module.assessment_questions),
                path=path,
            ))
        return summaries

    def get_module(self, module_id: str) -> Optional[Module]:
        """Module by id, or None if no valid file defines it."""
        for module in self.get_all_modules():
            if module.id == module_id:
                return module
        return None
