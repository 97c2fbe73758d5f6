"""Application core: configuration, state, orchestration and export."""
