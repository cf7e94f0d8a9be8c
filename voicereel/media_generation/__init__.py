"""
Media Generation Pipeline

Audio -> transcript segments -> image prompts -> generated images -> timeline.
Submodules are imported directly; nothing is re-exported here.
"""
