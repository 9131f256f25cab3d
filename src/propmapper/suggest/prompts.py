"""Prompts for the provider suggestion phase."""

SUGGESTION_SYSTEM_PROMPT = """You are PropMapper, a CSV column mapping assistant.
You match source CSV column headers to the properties of a fixed target schema.
Respond with a single JSON object and nothing else."""

# Filled with the unresolved source headers and the still-available targets
MAPPING_INSTRUCTION = """Given a list of source CSV column headers and a list of available target schema column headers, suggest the best target column for each source column.
Source CSV Headers to map: {source_headers}
Available Target Schema Headers: {target_headers}
If no good match is found for a source column, or if the best match is already used by a higher-confidence mapping, suggest "N/A" for the current source column.
Respond with a JSON object where keys are the source CSV headers and values are the suggested target schema headers (or "N/A").
Each target column should be used at most once from the 'Available Target Schema Headers' provided.
Example response: {{"Source Column A": "Target Column X", "Source Column B": "N/A", "Source Column C": "Target Column Y"}}"""


def build_mapping_prompt(source_headers: list[str], target_headers: list[str]) -> str:
    """Fill the mapping instruction for one batch."""
    return MAPPING_INSTRUCTION.format(
        source_headers=", ".join(source_headers),
        target_headers=", ".join(target_headers),
    )
