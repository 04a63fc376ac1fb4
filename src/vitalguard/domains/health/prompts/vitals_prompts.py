"""MCP Prompts: interaction templates for vital-sign check-ins."""

from __future__ import annotations

from fastmcp import FastMCP


def register_vitals_prompts(mcp: FastMCP) -> None:
    """Register vitals MCP prompts."""

    @mcp.prompt()
    def vitals_check_prompt(context: str = "a routine check") -> str:
        """Prompt template for assessing a fresh set of vital signs."""
        return f"""I'd like to check my vital signs ({context}). Please:

1. Assess my latest readings with assess_vitals
2. Explain which vitals drive the risk level and how confident the model is
3. Tell me whether anything needs medical attention, and how urgently
4. Compare with my recent history if there is any

Please be clear and calm. This is not a diagnosis, so tell me when to see a clinician."""
