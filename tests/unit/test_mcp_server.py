"""Tests for the MCP tool functions (called directly, without a transport)."""

import asyncio
import json

import pytest

pytest.importorskip("mcp")

from lifecalc.mcp import server  # noqa: E402

PROFILE = {
    "id": "mcp",
    "income": [{"id": "job", "name": "Job", "amount": 80000}],
    "assumptions": {"current_age": 40, "life_expectancy": 50, "state": "TX", "tax_year": 2025},
}


class TestTools:

    def test_generate_trajectory(self):
        data = asyncio.run(server.generate_trajectory(profile=PROFILE, years=3))
        assert data["type"] == "trajectory"
        assert len(data["trajectory"]["years"]) == 3
        assert data["trajectory"]["years"][0]["gross_income"] == 8_000_000

    def test_generate_trajectory_bad_profile(self):
        data = asyncio.run(server.generate_trajectory(profile={"nope": 1}, years=None))
        assert data["type"] == "error"

    def test_compare_scenarios(self):
        raised = {**PROFILE, "income": [{"id": "job", "name": "Job", "amount": 90000}]}
        data = asyncio.run(server.compare_scenarios(baseline=PROFILE, alternate=raised, name="Raise"))
        assert data["type"] == "comparison"
        assert "baseline" not in data["comparison"]
        assert data["comparison"]["deltas"][0]["income_delta"] == 1_000_000

    def test_calculate_tax(self):
        data = asyncio.run(server.calculate_tax(
            income=100000, filing_status="single", state="TX", contribution=0, year=2024,
        ))
        assert data["year"] == 2024
        assert data["federal_tax"] == 1_384_100

    def test_calculate_tax_error(self):
        data = asyncio.run(server.calculate_tax(
            income=100000, filing_status="single", state="ZZ", contribution=0, year=None,
        ))
        assert "unknown state code" in data["error"]

    def test_tax_years_resource(self):
        years = json.loads(asyncio.run(server.list_tax_years_resource()))["years"]
        assert 2024 in years
