"""Brief parsing, validation, prompts and upstream orchestration."""
