#All stuff with storing premises and other story artifacts is here

import logging
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from storychain.data import loader
from storychain.errors import NotFound, PersistenceError

logger = logging.getLogger(__name__)


class ArtifactType(str, Enum):
    PREMISE = "premise"
    CHARACTER_ARC = "character_arc"
    PLOT_OUTLINE = "plot_outline"
    WORLD_BUILDING = "world_building"

CUSTOM_PREFIX = "custom:"

def custom_type(name: str) -> str:
    if not name.strip():
        raise ValueError("custom artifact type needs a name")
    return CUSTOM_PREFIX + name.strip()


class Artifact(BaseModel):
    id: str
    content: str
    artifact_type: str = ArtifactType.PREMISE.value
    metadata: Dict[str, str] = Field(default_factory=dict)

    @field_validator("artifact_type", mode="before")
    @classmethod
    def validate_type(cls, v) -> str:
        if isinstance(v, ArtifactType):
            return v.value
        v = str(v).strip()
        if v in {t.value for t in ArtifactType}:
            return v
        if v.startswith(CUSTOM_PREFIX) and len(v) > len(CUSTOM_PREFIX):
            return v
        raise ValueError(f"Unknown artifact type: {v!r}")


class ArtifactManager:
    """Named text blobs (premises, outlines...) kept as files in one directory."""

    def __init__(self, artifact_dir: str):
        self.artifacts: Dict[str, Artifact] = {}
        self.artifact_dir = Path(artifact_dir)

    def load_from_dir(self) -> None:
        if not self.artifact_dir.exists():
            try:
                self.artifact_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise PersistenceError(f"Could not create artifact dir {self.artifact_dir}: {e}") from e
            return
        for path in sorted(self.artifact_dir.iterdir()):
            if path.is_file() and path.suffix == ".json":
                artifact = self._read_artifact(path)
                self.artifacts[artifact.id] = artifact
            elif loader.is_premise_file(path) and path.stem not in self.artifacts:
                self.artifacts[path.stem] = Artifact(
                    id=path.stem,
                    content=loader.load_text(str(path)),
                    artifact_type=ArtifactType.PREMISE,
                    metadata={"source": path.name},
                )
        logger.info("Loaded %d artifacts from %s", len(self.artifacts), self.artifact_dir)

    def _read_artifact(self, path: Path) -> Artifact:
        try:
            return Artifact.model_validate_json(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise PersistenceError(f"Could not read artifact {path}: {e}") from e
        except ValidationError as e:
            raise PersistenceError(f"Malformed artifact {path}: {e}") from e

    def save_artifact(self, artifact: Artifact) -> None:
        path = self.artifact_dir / f"{artifact.id}.json"
        try:
            self.artifact_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(artifact.model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Could not write artifact {path}: {e}") from e

    def get_artifact(self, artifact_id: str) -> Optional[Artifact]:
        return self.artifacts.get(artifact_id)

    def get_text(self, artifact_id: str) -> str:
        artifact = self.get_artifact(artifact_id)
        if artifact is None:
            raise NotFound(artifact_id)
        return artifact.content

    def update_artifact(self, artifact: Artifact) -> None:
        self.save_artifact(artifact)
        self.artifacts[artifact.id] = artifact.model_copy(deep=True)

    def create_artifact(self, artifact_id: str, content: str, artifact_type: str = ArtifactType.PREMISE.value) -> Artifact:
        artifact = Artifact(id=artifact_id, content=content, artifact_type=artifact_type)
        self.update_artifact(artifact)
        return artifact

    def put_text(self, artifact_id: str, text: str, kind: str = ArtifactType.PREMISE.value) -> None:
        self.create_artifact(artifact_id, text, kind)

    def get_artifacts_by_type(self, artifact_type: str) -> List[Artifact]:
        if isinstance(artifact_type, ArtifactType):
            artifact_type = artifact_type.value
        return [a for a in self.artifacts.values() if a.artifact_type == artifact_type]
