"""Life Calc MCP Server - FastMCP implementation for projection tools."""

import json
import logging
from dataclasses import asdict
from typing import Any

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from lifecalc.sdk import config as sdk_config
from lifecalc.sdk.dispatch import handle_request
from lifecalc.sdk.money import dollars_to_cents
from lifecalc.sdk.taxes import calculate_total_tax, get_available_years, load_tax_rules

logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("life-calc")


def _profile_payload(profile: dict | None) -> dict:
    """Profile in cents: an explicit dict (dollars) or the configured profile."""
    if profile is not None:
        return sdk_config.profile_from_dict(profile).model_dump()
    return sdk_config.load_financial_profile().model_dump()


# --- Tools ---

@mcp.tool()
async def generate_trajectory(
    profile: dict | None = Field(
        default=None,
        description="Profile with dollar amounts (same shape as profile.yaml). Uses the configured profile if omitted.",
    ),
    years: int | None = Field(default=None, description="Limit to the first N years (quick projection)"),
) -> dict[str, Any]:
    """Project a financial profile year by year to life expectancy. Returns yearly snapshots (cents), milestones, and a summary."""
    try:
        payload = _profile_payload(profile)
    except Exception as e:
        logger.error(f"Error loading profile: {e}")
        return {"type": "error", "error": str(e)}

    if years is None:
        request = {"type": "generate", "profile": payload}
    else:
        request = {"type": "generate_quick", "profile": payload, "years": years}
    return handle_request(request).model_dump(mode="json")


@mcp.tool()
async def compare_scenarios(
    baseline: dict = Field(description="Baseline profile (dollar amounts)"),
    alternate: dict = Field(description="Alternate profile (dollar amounts)"),
    name: str = Field(default="Comparison", description="Label for the comparison"),
) -> dict[str, Any]:
    """Project two profiles and compare them: per-year deltas, retirement impact, and a key insight."""
    responses = []
    for label, profile in (("baseline", baseline), ("alternate", alternate)):
        try:
            payload = _profile_payload(profile)
        except Exception as e:
            logger.error(f"Error loading {label} profile: {e}")
            return {"type": "error", "error": f"{label}: {e}"}
        response = handle_request({"type": "generate", "profile": payload})
        if response.type == "error":
            return response.model_dump(mode="json")
        responses.append(response.trajectory)

    result = handle_request({
        "type": "compare",
        "baseline": responses[0],
        "alternate": responses[1],
        "name": name,
    })
    data = result.model_dump(mode="json")
    if result.type == "comparison":
        # Both trajectories were just returned piecemeal; keep the payload small
        data["comparison"].pop("baseline")
        data["comparison"].pop("alternate")
    return data


@mcp.tool()
async def calculate_tax(
    income: float = Field(description="Gross annual income in dollars"),
    filing_status: str = Field(default="single", description="single, married_joint, married_separate, head_of_household"),
    state: str = Field(default="CA", description="Two-letter state code"),
    contribution: float = Field(default=0, description="Pre-tax retirement contribution in dollars"),
    year: int | None = Field(default=None, description="Tax year (latest available if omitted)"),
) -> dict[str, Any]:
    """Federal, state and FICA tax for one year of income. Amounts in cents."""
    try:
        rules = load_tax_rules(year)
        result = calculate_total_tax(
            dollars_to_cents(income),
            filing_status,
            state,
            dollars_to_cents(contribution),
            rules=rules,
        )
        return {"year": rules.year, **asdict(result)}
    except Exception as e:
        logger.error(f"Error calculating tax: {e}")
        return {"error": str(e)}


# --- Resources ---

@mcp.resource("lifecalc://taxes/years")
async def list_tax_years_resource() -> str:
    """Tax years with bundled rule tables."""
    return json.dumps({"years": get_available_years()})


# --- Server Entry Point ---

def run_server():
    """Run the MCP server in stdio mode."""
    mcp.run(transport="stdio")


if __name__ == "__main__":
    run_server()
