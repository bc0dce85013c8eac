"""External services driven by the pipeline, one per stage."""
