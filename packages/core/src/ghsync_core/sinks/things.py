"""Things 3 sink (macOS).

Tasks are created with AppleScript because it is the only channel that hands
back the new to-do's id. If osascript fails, the sink falls back to the
things:///add URL scheme, which is fire-and-forget: the returned id is then a
local pseudo-id and the later completion call cannot reach that to-do.

Completion goes through things:///update, which needs the auth token from
Things → Settings → General → Enable Things URLs.
"""

from __future__ import annotations

import logging
import subprocess
import time
from urllib.parse import quote, urlencode

from ghsync_core.sinks.base import BaseTaskSink, TaskSinkError

logger = logging.getLogger(__name__)

_TIMEOUT = 30


def _escape_applescript(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _things_url(command: str, params: dict) -> str:
    return f"things:///{command}?{urlencode(params, quote_via=quote)}"


class ThingsSink(BaseTaskSink):
    def __init__(self, project: str = "GitHub", auth_token: str | None = None):
        self._project = project
        self._auth_token = auth_token

    def _create(self, title: str, notes: str, tags: list[str]) -> str:
        try:
            return self._create_via_applescript(title, notes, tags)
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired, FileNotFoundError) as e:
            logger.warning("AppleScript failed (%s), falling back to URL scheme", e)

        self._open(
            _things_url(
                "add",
                {"title": title, "notes": notes, "tags": ",".join(tags), "when": "today", "list": self._project},
            )
        )
        return f"url-{int(time.time() * 1000)}"

    def complete_task(self, task_id: str) -> None:
        if not self._auth_token:
            raise TaskSinkError("Things auth token is not configured; cannot complete tasks.")
        self._open(_things_url("update", {"id": task_id, "auth-token": self._auth_token, "completed": "true"}))

    def _create_via_applescript(self, title: str, notes: str, tags: list[str]) -> str:
        script = f"""
tell application "Things3"
    set newToDo to make new to do with properties {{name:"{_escape_applescript(title)}", notes:"{_escape_applescript(notes)}", tag names:"{_escape_applescript(", ".join(tags))}"}}
    set project of newToDo to project "{_escape_applescript(self._project)}"
    schedule newToDo for current date
    return id of newToDo
end tell
"""
        result = subprocess.run(
            ["osascript", "-e", script],
            capture_output=True,
            text=True,
            timeout=_TIMEOUT,
            check=True,
        )
        task_id = result.stdout.strip()
        if not task_id:
            raise subprocess.CalledProcessError(result.returncode, "osascript", output=result.stdout)
        return task_id

    @staticmethod
    def _open(url: str) -> None:
        try:
            subprocess.run(["open", url], capture_output=True, text=True, timeout=_TIMEOUT, check=True)
        except subprocess.CalledProcessError as e:
            raise TaskSinkError(f"open failed ({e.returncode}): {(e.stderr or '').strip()}") from e
        except (subprocess.TimeoutExpired, FileNotFoundError) as e:
            raise TaskSinkError(f"open failed: {e}") from e
