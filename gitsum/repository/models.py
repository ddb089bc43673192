"""In-memory model of a repository: folders holding files."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..errors import EmptyRepositoryError, NotFoundError


class File(BaseModel):
    """A file and its raw text. Never modified after load."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Path of the file, unique within its folder")
    content: str = Field(..., description="Raw text of the file")
    source_url: str = Field(default="", description="Where the content was downloaded from")


class Folder(BaseModel):
    name: str = Field(..., description="Path of the folder, unique within the repository")
    files: dict[str, File] = Field(default_factory=dict)

    def add_file(self, file: File) -> None:
        self.files[file.name] = file

    def get(self, name: str) -> File:
        """Look a file up by its full path or by its name relative to this folder."""
        if name in self.files:
            return self.files[name]
        qualified = f"{self.name}/{name}"
        if qualified in self.files:
            return self.files[qualified]
        raise NotFoundError(f"File '{name}' not found in folder '{self.name}'", name=name)


class RepositoryContent(BaseModel):
    """Folders in the order they were discovered, plus the optional readme."""
    folders: dict[str, Folder] = Field(default_factory=dict)
    readme: Optional[str] = None

    def add_folder(self, folder: Folder) -> None:
        self.folders[folder.name] = folder

    def get_folder(self, name: str) -> Folder:
        if not self.folders:
            raise EmptyRepositoryError()
        try:
            return self.folders[name]
        except KeyError:
            raise NotFoundError(f"Folder '{name}' not found", name=name) from None

    def file_count(self) -> int:
        return sum(len(folder.files) for folder in self.folders.values())


__all__ = [
    "File",
    "Folder",
    "RepositoryContent",
]
