#All data structures needed for the narrative graph are here



#--------------------------
#---------imports----------
#--------------------------

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional, Dict


#---------------------------------
#-----------constants-------------
#---------------------------------

ROOT_ID = "root"


#-----------------------------------------
#-----------structures for graph----------
#-----------------------------------------

class Scene(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    content: str
    reasoning: str
    predecessors: List[str] = Field(default_factory=list)
    successors: List[str] = Field(default_factory=list)
    metadata: Dict[str, str] = Field(default_factory=dict)

class ScenePayload(BaseModel):
    """What a graph node stores besides its links."""
    content: str
    reasoning: str
    metadata: Dict[str, str] = Field(default_factory=dict)

    @field_validator("content", "reasoning")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("scene text must not be empty")
        return v

    @field_validator("metadata", mode="before")
    @classmethod
    def stringify_metadata(cls, v):
        if v is None:
            return {}
        return {str(key): str(value) for key, value in dict(v).items()}


#--------------------------------------------
#-----------structures for export------------
#--------------------------------------------

class SceneRecord(BaseModel):
    id: str
    content: str
    reasoning: str
    predecessors: List[str] = Field(default_factory=list)
    successors: List[str] = Field(default_factory=list)
    metadata: Dict[str, str] = Field(default_factory=dict)

class ChainRecord(BaseModel):
    nodes: Dict[str, SceneRecord]
    root_id: str
    branch_ratio: int = 1


#--------------------------------------------------
#-----------structures for generation--------------
#--------------------------------------------------

class GenerationProgress(BaseModel):
    epoch: int
    total_epochs: Optional[int] = None

class BranchFailure(BaseModel):
    branch_index: int
    error_type: str
    message: str

class ExtensionResult(BaseModel):
    parent_id: str
    new_ids: List[str] = Field(default_factory=list)
    failures: List[BranchFailure] = Field(default_factory=list)

    @property
    def failure_count(self) -> int:
        return len(self.failures)
