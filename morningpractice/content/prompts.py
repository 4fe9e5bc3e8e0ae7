"""Spoken prompts for each stage transition."""

WARM_UP = "Warm up time. Perform slow stretching and easy movements from head to feet."
WARM_UP_COMPLETE = "Warm-up complete. Ready for your first exercise."
EXERCISE_COMPLETE = "Exercise complete. Ready for next exercise."
COOL_DOWN = (
    "All exercises complete. Cool down time. "
    "Stay in child pose and take deep abdominal breaths."
)
COMPLETE = "Congratulations! Your practice is complete. Your body and mind thank you."
