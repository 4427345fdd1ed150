"""
Bundle Builder.

Runs the esbuild executable on a single entry module and writes exactly one
ESM bundle for the browser, keeping the previous bundle as a numbered backup.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ..config import BuildOptions
from .backups import rotate_backup

logger = logging.getLogger(__name__)

# esbuild flags applied to every build
BASE_FLAGS = (
    "--bundle",
    "--tree-shaking=true",
    "--legal-comments=none",
    "--platform=browser",
    "--target=esnext",
    "--format=esm",
)


class BuildError(Exception):
    """
    Raised when the bundle cannot be produced.

    Attributes:
        message: Human-readable error message.
        stderr: Raw stderr output from esbuild.
    """

    def __init__(self, message: str, stderr: str = ""):
        self.message = message
        self.stderr = stderr
        super().__init__(f"{message}: {stderr}" if stderr else message)


@dataclass
class BuildResult:
    """
    Outcome of a successful build.

    Attributes:
        success: Always True; failures raise BuildError.
        outfile: The bundle written.
        backup: Where the previous bundle was moved, if there was one.
    """

    success: bool
    outfile: Path
    backup: Optional[Path] = None


class Bundler:
    """
    Builds a bundle with esbuild.

    Example:
        ```python
        result = Bundler(BuildOptions(minify=True)).build()
        print(result.outfile)  # dist/bundle.mjs
        ```
    """

    def __init__(self, options: Optional[BuildOptions] = None):
        self.options = options or BuildOptions()

    def esbuild_command(self, dest: Path) -> List[str]:
        """Command line for one build, without resolving the executable."""
        opts = self.options
        cmd = [opts.esbuild_bin, str(opts.entry_point), *BASE_FLAGS, f"--outfile={dest}"]
        if opts.keep_names:
            cmd.append("--keep-names")
        if opts.minify:
            cmd.append("--minify")
        return cmd

    def _run_esbuild(self, cmd: List[str]) -> str:
        """
        Run esbuild and return its stderr summary.

        Raises:
            BuildError: If esbuild is missing, fails, or times out.
        """
        executable = shutil.which(cmd[0])
        if executable is None:
            raise BuildError(f"esbuild executable not found: {cmd[0]}")

        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                [executable, *cmd[1:]],
                capture_output=True,
                text=True,
                check=True,
                timeout=600,
            )
            return result.stderr.strip()
        except subprocess.CalledProcessError as e:
            raise BuildError(f"esbuild failed for {self.options.entry_point}", (e.stderr or "").strip())
        except subprocess.TimeoutExpired:
            raise BuildError(f"esbuild timed out for {self.options.entry_point}")

    def prepare_output(self) -> Optional[Path]:
        """
        Make room for the new bundle.

        Rotates an existing bundle into a backup, or creates the output
        directory when it is missing.
        """
        opts = self.options
        if opts.dist_dir.exists():
            return rotate_backup(opts.dest, opts.max_backups)
        opts.dist_dir.mkdir(parents=True, exist_ok=True)
        return None

    def build(self) -> BuildResult:
        """
        Produce the bundle.

        Returns:
            BuildResult with the output path.

        Raises:
            BuildError: If the output cannot be prepared or esbuild fails.
        """
        dest = self.options.dest
        try:
            backup = self.prepare_output()
            summary = self._run_esbuild(self.esbuild_command(dest))
        except BuildError as e:
            logger.error(f"❌ Build: {e}")
            raise
        except OSError as e:
            logger.error(f"❌ Build: {e}")
            raise BuildError(f"Cannot prepare {dest}", str(e)) from e

        if summary:
            logger.debug(summary)
        logger.info(f"✅ Built {dest}")
        return BuildResult(success=True, outfile=dest, backup=backup)


def build_bundle(options: Optional[BuildOptions] = None) -> BuildResult:
    """Build with the given options (defaults when omitted)."""
    return Bundler(options).build()
