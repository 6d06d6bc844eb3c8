"""StepQuest — gamified pedometer backend."""

__version__ = "0.1.0"
