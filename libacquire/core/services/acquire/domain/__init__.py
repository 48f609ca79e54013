"""
L1 Domain — pure acquisition logic.

No I/O, no subprocess.  Errors, target-feature mapping, variant
selection, and the artifact manifest.
"""
