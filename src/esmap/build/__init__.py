"""Bundle building: esbuild invocation and previous-artifact rotation."""

from .backups import rotate_backup
from .bundler import BuildError, BuildResult, Bundler, build_bundle

__all__ = ["BuildError", "BuildResult", "Bundler", "build_bundle", "rotate_backup"]
