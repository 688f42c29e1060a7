"""Core building blocks shared by every apiharness module."""
