#All stuff with loading raw premise documents is here

from pathlib import Path
from typing import List

from langchain_community.document_loaders.text import TextLoader
from langchain_core.documents import Document

from storychain.errors import PersistenceError


PREMISE_SUFFIXES = (".yaml", ".yml", ".txt", ".md")


def loadTXT(path: str, encoding: str = "utf-8") -> List[Document]:
    loader = TextLoader(file_path=path, encoding=encoding)
    try:
        return loader.load()
    except RuntimeError as e:
        raise PersistenceError(f"Could not load {path}: {e}") from e

def load_text(path: str, encoding: str = "utf-8") -> str:
    return "\n".join(doc.page_content for doc in loadTXT(path, encoding))

def is_premise_file(path: Path) -> bool:
    return path.is_file() and path.suffix.lower() in PREMISE_SUFFIXES
