"""Camera helper driving the Raspberry Pi camera module through raspistill."""

import logging
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from rpi_camera_bot.domain.capture import CaptureError, CaptureTimeoutError
from rpi_camera_bot.services.capture import Camera

logger = logging.getLogger(__name__)


@dataclass
class RaspiStillCamera(Camera):
    """Blocking camera implementation that shells out to raspistill."""

    executable: str = "raspistill"
    timeout_seconds: float = 30.0

    def capture(self, width: int, height: int, params: Mapping[str, Any]) -> bytes:
        """Capture one JPEG still and return its bytes."""
        command = build_command(self.executable, width, height, params)
        logger.debug("Running camera command: %s", " ".join(command))
        try:
            completed = subprocess.run(  # noqa: S603
                command,
                capture_output=True,
                timeout=self.timeout_seconds,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise CaptureTimeoutError(
                f"camera did not respond within {self.timeout_seconds:g}s"
            ) from exc
        except OSError as exc:
            raise CaptureError(f"could not run {self.executable}: {exc}") from exc
        if completed.returncode != 0:
            detail = completed.stderr.decode("utf-8", errors="replace").strip()
            raise CaptureError(
                detail or f"{self.executable} exited with {completed.returncode}"
            )
        if not completed.stdout:
            raise CaptureError(f"{self.executable} produced no image data")
        return completed.stdout


def build_command(
    executable: str, width: int, height: int, params: Mapping[str, Any]
) -> list[str]:
    """Build the raspistill argument list.

    Each camera parameter becomes a long option. ``True`` values are passed as
    bare flags, ``False`` and ``None`` values are omitted.
    """
    command = [
        executable,
        "--nopreview",
        "--encoding",
        "jpg",
        "--width",
        str(width),
        "--height",
        str(height),
    ]
    for name, value in params.items():
        if value is None or value is False:
            continue
        option = f"--{name.lstrip('-')}"
        if value is True:
            command.append(option)
        else:
            command.extend([option, str(value)])
    command.extend(["--output", "-"])
    return command
