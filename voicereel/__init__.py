"""
voicereel - turn a spoken narration into a timed, multi-scene video timeline
"""

__version__ = "0.1.0"
