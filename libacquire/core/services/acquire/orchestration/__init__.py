"""
L5 Orchestration — the download-or-build state machine.
"""
