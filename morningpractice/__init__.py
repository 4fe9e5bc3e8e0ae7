"""MorningPractice - guided warm-up, exercise and cool-down sessions."""

__app_name__ = "MorningPractice"
__version__ = "0.1.0"
