import json
import os
import pathlib
import tempfile
from typing import Any


def read_json(path: pathlib.Path, default: Any = None) -> Any:
    """Read JSON file, return `default` if file is missing or empty."""
    if not path.exists():
        return default
    text = path.read_text(encoding='utf-8')
    if not text.strip():
        return default
    return json.loads(text)


def write_json(path: pathlib.Path, data: Any) -> None:
    # Write to a temporary file first, so that readers never see a partially
    # written file.
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=path.name, suffix='.tmp')
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, sort_keys=True)
        os.replace(tmp, path)
    except BaseException:
        os.unlink(tmp)
        raise
