"""
Report essential facts about the local device: date, time, network, identity and storage.
"""

__all__ = ["cli", "config", "dispatch", "errors", "facts", "formatting", "probes", "results"]
__version__ = "0.1.0"
