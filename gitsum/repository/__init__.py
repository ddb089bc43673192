"""Repository content model and the GitHub loader that fills it."""

from .loader import GitHubContentLoader
from .models import File, Folder, RepositoryContent

__all__ = [
    "File",
    "Folder",
    "GitHubContentLoader",
    "RepositoryContent",
]
