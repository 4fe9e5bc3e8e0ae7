"""Static practice content: the exercise catalogue and spoken prompts."""

from .catalog import ExerciseRecord, EXERCISES, find_exercise
from . import prompts

__all__ = ["ExerciseRecord", "EXERCISES", "find_exercise", "prompts"]
