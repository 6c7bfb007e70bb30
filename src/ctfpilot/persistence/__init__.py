"""Recorded-state persistence."""

from ctfpilot.persistence.state_file import load_state, output_state_path, persist_state, remove_state

__all__ = ["load_state", "output_state_path", "persist_state", "remove_state"]
