"""Job/stage orchestration core: models, stage runner, executor, orchestrator."""
