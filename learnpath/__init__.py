"""LearnPath - course enrollment, lecture progress and quiz grading API."""

__version__ = "0.1.0"
