"""id_pipeline: OCR text → structured Italian identity record, via an LLM.

This package provides:
- Configuration loading for the LLM provider (env / .env)
- Typed structures for requests, completions and results
- The prompt builder, the LLM gateway and the JSON response extractor
- A total field normalizer for the eight canonical fields
- An orchestrator running the end-to-end extraction for one OCR text
- A CLI to process a folder of OCR text files in batch mode
"""

__all__ = [
    "config",
    "types",
    "errors",
    "prompt",
    "llm_gateway",
    "json_service",
    "normalizer",
    "cost",
    "writer",
    "orchestrator",
]
