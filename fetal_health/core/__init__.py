"""Core components of the fetal health modeling workflow."""
