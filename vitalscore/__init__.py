"""VitalScore: biometric scoring for sleep, strain, recovery and biological age."""

__version__ = "0.1.0"
