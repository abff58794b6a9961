"""
Engines - scoring, checkpoint scheduling, progress and authoring.

The scoring and checkpoint decision functions are pure; storage access lives
in the *Store / ProgressTracker classes that wrap an AsyncSession.
"""
