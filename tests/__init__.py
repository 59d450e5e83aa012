"""stream-ingestion test suite.

- test_orchestrator.py: run lifecycle, backpressure, failure handling
- test_*_sink.py: sink adapters (file, memory, slow, s3 via moto)
- test_sources.py: iterable and file sources, release guard
- test_config_*.py / test_env_substitution.py / test_registry.py: job files
- test_cli_flags.py / test_runner_job.py: CLI and job runner
"""
