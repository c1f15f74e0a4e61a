"""Package a rendered transcript directory as a zip file."""

import re
import zipfile
from datetime import datetime
from pathlib import Path, PurePosixPath, PureWindowsPath

_UNSAFE_NAME_CHARS = re.compile(r"[\s/\\]+")


def default_zip_name(session, now=None):
    """Name a zip after the session's project folder and last activity.

    Returns ``<project>-<YYYY-MM-DD-HHMM>.zip``. The project is the last
    component of the session's working directory ("session" if unknown);
    the time is the last message timestamp in local time, or ``now``.
    """
    meta = session.metadata
    project = "session"
    if meta.cwd:
        cwd = meta.cwd.rstrip("/\\")
        base = PureWindowsPath(cwd).name if "\\" in cwd else PurePosixPath(cwd).name
        project = _UNSAFE_NAME_CHARS.sub("-", base) or "session"

    when = meta.end_time.astimezone() if meta.end_time is not None else now
    if when is None:
        when = datetime.now()
    return f"{project}-{when:%Y-%m-%d-%H%M}.zip"


def create_zip_archive(output_dir, zip_path):
    """Zip every file under output_dir into zip_path, paths relative to output_dir.

    Returns:
        The number of files written.
    """
    output_dir = Path(output_dir)
    zip_path = Path(zip_path)
    zip_path.parent.mkdir(parents=True, exist_ok=True)

    count = 0
    with zipfile.ZipFile(zip_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for path in sorted(output_dir.rglob("*")):
            if not path.is_file() or path.resolve() == zip_path.resolve():
                continue
            zf.write(path, path.relative_to(output_dir).as_posix())
            count += 1
    return count
