"""
Pydantic schemas for grading, checkpoints, lessons and the API.
"""
