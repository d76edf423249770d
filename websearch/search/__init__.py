"""Search pipeline stages: normalize, build, transform, score, dedupe, suggest."""
