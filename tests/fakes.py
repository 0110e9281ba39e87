"""Stand-ins for the pipeline collaborators."""

from pathlib import Path
from typing import List, Optional, Sequence

from ordhook.exceptions import CommandError
from ordhook.webhook.executor import CommandResult


class RecordingRunner:
    """CommandRunner stand-in that records argument vectors."""
    
    def __init__(self, fail_on: Optional[str] = None):
        self.fail_on = fail_on
        self.calls: List[List[str]] = []
    
    async def run(self, argv: Sequence[str]) -> CommandResult:
        argv = list(argv)
        self.calls.append(argv)
        command_line = " ".join(argv)
        if self.fail_on and self.fail_on in argv:
            raise CommandError(
                "Command exited with status 1",
                command_line=command_line,
                exit_code=1,
                stderr="error: wallet failure"
            )
        return CommandResult(command_line=command_line, exit_code=0, stdout="ok\n", stderr="")


class StubFetcher:
    """FileFetcher stand-in returning a fixed path or failing."""
    
    def __init__(self, path: Path = Path("image-folder/file.png"), error: Optional[Exception] = None):
        self.path = path
        self.error = error
        self.urls: List[str] = []
    
    async def fetch(self, url: str) -> Path:
        self.urls.append(url)
        if self.error:
            raise self.error
        return self.path
