"""
HTTP API for lesson checks, checkpoints and authoring previews.
"""
