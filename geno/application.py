"""The application object: command-line handling and the open workspace."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Sequence, Union

from geno.build_matrix import BuildMatrix
from geno.workspace import Workspace

PathLike = Union[str, os.PathLike]


class Application:
    """Holds the current workspace and the directories the program runs from."""

    def __init__(self) -> None:
        self._workspace: Optional[Workspace] = None
        self.exe_path = Path()
        self.app_dir = Path()
        self.data_dir = Path()

    def new_workspace(self, location: PathLike, name: str) -> Workspace:
        """Close the current workspace and open a fresh one with the default matrix."""
        self.close_workspace()
        workspace = Workspace(location)
        workspace.name = name
        workspace.build_matrix = BuildMatrix.platform_default()
        self._workspace = workspace
        return workspace

    def load_workspace(self, path: PathLike) -> bool:
        """Open the workspace file at ``path``; False if it is missing or unreadable."""
        path = Path(path)
        try:
            if not path.exists():
                return False
        except OSError:
            return False
        if not path.is_absolute():
            path = Path.cwd() / path
        self.close_workspace()
        workspace = self.new_workspace(path.parent, path.stem)
        return workspace.deserialize()

    def close_workspace(self) -> None:
        """Save and close the current workspace, if any."""
        if self._workspace is not None:
            self._workspace.serialize()
        self._workspace = None

    def current_workspace(self) -> Optional[Workspace]:
        return self._workspace

    def handle_command_line_args(self, argv: Sequence[str]) -> None:
        """Apply ``argv``: the program path, then an optional workspace file.

        Raises SystemExit(1) when a given workspace cannot be opened.
        """
        args = list(argv)

        if len(args) >= 2:
            workspace_path = Path(args[1])
            try:
                exists = workspace_path.exists()
            except OSError:
                exists = False
            if not exists or not self.load_workspace(workspace_path):
                raise SystemExit(1)

        if len(args) >= 1:
            self.exe_path = Path(os.path.normpath(os.path.abspath(args[0])))
            self.app_dir = self.exe_path.parent
            self.data_dir = self.app_dir.parent.parent / "data"
            try:
                os.chdir(self.app_dir)
            except OSError:
                pass