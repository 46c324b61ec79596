#All errors raised by storychain are here

from typing import List, Optional


class StoryChainError(RuntimeError):
    """Base error for story generation failures."""


class NodeNotFound(StoryChainError, KeyError):
    def __init__(self, node_id: str):
        super().__init__(f"Node not found: {node_id}")
        self.node_id = node_id

    def __str__(self) -> str:
        return self.args[0]


class MalformedResponse(StoryChainError):
    """Model output does not follow the reasoning + content shape."""


class GenerationBackendError(StoryChainError):
    """The model backend failed: unreachable, timed out or returned garbage."""


class AllBranchesFailed(StoryChainError):
    def __init__(self, node_id: str, failures: Optional[List] = None):
        self.node_id = node_id
        self.failures = list(failures or [])
        super().__init__(f"All {len(self.failures)} branches failed for node {node_id}")


class PersistenceError(StoryChainError):
    """Reading or writing chains and artifacts failed."""


class NotFound(PersistenceError):
    def __init__(self, artifact_id: str):
        super().__init__(f"Artifact not found: {artifact_id}")
        self.artifact_id = artifact_id
