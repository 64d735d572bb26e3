"""Grid codec, radial geometry, elevation pipeline and coverage engine."""
