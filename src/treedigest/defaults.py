"""
Fixed limits and default exclude patterns for directory ingestion.

Exclude patterns are matched against the whole path relative to the ingestion
root, so a bare name only matches at the top level. Directories that commonly
appear nested are listed twice, once bare and once as `*/name`.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MiB per file
MAX_DIRECTORY_DEPTH = 20
MAX_FILES = 10_000
MAX_TOTAL_SIZE_BYTES = 500 * 1024 * 1024  # 500 MiB

DEFAULT_TIMEOUT = 60  # seconds, for git subprocesses

OUTPUT_FILE_NAME = "digest.txt"

TMP_BASE_PATH = Path(tempfile.gettempdir()) / "treedigest"

DEFAULT_EXCLUDES: frozenset[str] = frozenset(
    [
        # Version control
        ".git",
        "*/.git",
        ".svn",
        ".hg",
        ".gitignore",
        ".gitattributes",
        ".gitmodules",
        # Python
        "*.pyc",
        "*.pyo",
        "*.pyd",
        "__pycache__",
        "*/__pycache__",
        ".pytest_cache",
        ".coverage",
        ".tox",
        ".nox",
        ".mypy_cache",
        ".ruff_cache",
        ".hypothesis",
        "poetry.lock",
        "Pipfile.lock",
        "*.egg-info",
        "*.whl",
        ".venv",
        "venv",
        # JavaScript/Node
        "node_modules",
        "*/node_modules",
        "bower_components",
        "package-lock.json",
        "yarn.lock",
        "pnpm-lock.yaml",
        ".npm",
        ".yarn",
        ".pnpm-store",
        # Java/JVM
        "*.class",
        "*.jar",
        "*.war",
        "*.ear",
        "*.nar",
        ".gradle",
        # Native build artifacts
        "*.o",
        "*.obj",
        "*.so",
        "*.dll",
        "*.dylib",
        "*.exe",
        "*.lib",
        "*.out",
        "*.a",
        "*.pdb",
        # Build output
        "build",
        "dist",
        "target",
        "out",
        # IDE/Editor
        ".idea",
        ".vscode",
        ".vs",
        "*.swp",
        "*.swo",
        "*.swn",
        "*.sublime-*",
        # OS metadata
        ".DS_Store",
        "*/.DS_Store",
        "Thumbs.db",
        "desktop.ini",
        # Media and archives
        "*.png",
        "*.jpg",
        "*.jpeg",
        "*.gif",
        "*.ico",
        "*.pdf",
        "*.mov",
        "*.mp4",
        "*.mp3",
        "*.wav",
        "*.zip",
        "*.tar",
        "*.gz",
        "*.bz2",
        "*.xz",
        "*.7z",
        # Logs and temp files
        "*.log",
        "*.tmp",
        "*.bak",
        # Terraform
        ".terraform",
        "*.tfstate*",
        # Minified assets and source maps
        "*.min.js",
        "*.min.css",
        "*.map",
    ]
)
