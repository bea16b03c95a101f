"""FusionCaller lead intake service."""
