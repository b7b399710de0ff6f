"""best-of-n: sample several LLMs N times, judge each model's samples, synthesise across models."""

__version__ = "0.1.0"
