"""Developer scripts: fixture generation and benchmarks."""
