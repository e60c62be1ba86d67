"""File-backed repository storing a project as JSON or YAML."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

import yaml
from pydantic import ValidationError

from choreo.core.config.loader import detect_format, load_config
from choreo.core.errors import PersistenceError
from choreo.core.models import Project

logger = logging.getLogger(__name__)


class FileProjectRepository:
    """Repository persisting a single project file.

    Format is picked from the file extension (.json, .yaml, .yml). Writes go
    to a temp file in the same directory and are moved into place with
    os.replace, so readers never observe a partially written file.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._format = detect_format(self.path)

    def load(self) -> Project:
        """Load and validate the project file.

        Raises:
            PersistenceError: If the file is missing, unreadable or invalid
        """
        try:
            raw = load_config(self.path)
            project = Project.model_validate(raw)
        except (FileNotFoundError, ValueError, ValidationError) as e:
            raise PersistenceError(f"Could not load project from {self.path}: {e}") from e

        logger.debug(
            f"Loaded project {project.name!r}: {len(project.dancers)} dancers, "
            f"{len(project.formations)} formations"
        )
        return project

    def save(self, project: Project) -> None:
        """Atomically write the project file.

        Raises:
            PersistenceError: If the write fails
        """
        data = project.model_dump(mode="json")
        if self._format == "json":
            content = json.dumps(data, indent=2) + "\n"
        else:
            content = yaml.safe_dump(data, sort_keys=False)

        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(content)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            logger.error(f"Failed to save project to {self.path}: {e}")
            raise PersistenceError(f"Could not save project to {self.path}: {e}") from e

        logger.debug(f"Saved project {project.name!r} to {self.path}")
