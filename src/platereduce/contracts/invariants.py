"""Formal reduction invariants.

This file documents what each stage MUST produce. This is architecture, not code.
Use this file as a reviewer anchor and system reference.
"""

PIPELINE_INVARIANTS = {
    "partition": [
        "Blocks are enumerated row-major over the 2**level grid",
        "Block i belongs to job i % num_jobs",
        "Union over all jobs covers every tile exactly once",
        "Same (level, num_jobs, job_id, block_size) always gives the same units",
    ],

    "gather": [
        "Empty list when the plate holds no version in range (not an error)",
        "One (tile, header) pair per transaction id, ordered by transaction id",
        "A version that exists but fails to load raises TileReadError",
    ],

    "reduction_input": [
        "At least one tile",
        "Every tile has dims (y, x, channel)",
        "Channel count and dtype match the plate's pixel type",
        "All tiles share one shape",
    ],

    "reduction_output": [
        "Same shape and dtype as the inputs",
        "No NaN, zero-weight pixels fall back to 0",
        "Alpha is total input weight clipped to the channel type's range",
    ],

    "commit": [
        "One write transaction per coordinate",
        "Written at the configured output transaction id",
        "No write for coordinates without input",
    ],
}

# Which stages are optional vs required
STAGE_REQUIREMENTS = {
    "partition": "REQUIRED",
    "gather": "REQUIRED",
    "reduction_input": "REQUIRED",   # Only checked when gather found tiles
    "reduction_output": "REQUIRED",
    "commit": "OPTIONAL",            # Skipped when nothing was gathered
}
