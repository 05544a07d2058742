"""PrepGPT: resume-driven mock interviews with rubric-calibrated scoring."""

__version__ = "1.0.0"
