from typer import Exit
from typer import echo


class ErrorCounter:
    count: int

    def __init__(self):
        self.count = 0

    def increase(self):
        self.count += 1

    def has_errors(self) -> bool:
        return self.count > 0


def cli_error(message: str):
    echo(message, err=True)
    raise Exit(code=1)
