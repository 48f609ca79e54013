"""
libacquire — prebuilt-or-build acquisition of a native library.

Resolves a prebuilt release for the current commit, installs its
artifacts into the repository root, and falls back to a source build
when no release matches or a build is forced.
"""

__version__ = "0.1.0"
