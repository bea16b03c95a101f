"""FusionCaller lead intake tests."""
