from datetime import date

import pytest

from globetrotter.schemas.ai.plan import AIPlanRequest
from globetrotter.services.ai.planner_service import MAX_SECTIONS, generate_plan, section_budget
from globetrotter.utils.scheduling import format_date_range, partition_days, round_half_up


@pytest.mark.parametrize("total_days, buckets", [(1, 5), (3, 5), (5, 5), (7, 5), (12, 5), (30, 5), (9, 2)])
def test_partition_covers_every_day_once(total_days, buckets):
    spans = partition_days(total_days, buckets)

    assert len(spans) == min(total_days, buckets)
    assert spans[0][0] == 0
    assert spans[-1][1] == total_days - 1
    lengths = [last - first + 1 for first, last in spans]
    assert sum(lengths) == total_days
    assert max(lengths) - min(lengths) <= 1
    for (_, prev_last), (next_first, _) in zip(spans, spans[1:]):
        assert next_first == prev_last + 1


def test_partition_gives_remainder_to_earliest_buckets():
    assert partition_days(7, 5) == [(0, 1), (2, 3), (4, 4), (5, 5), (6, 6)]


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.4 * 150) == 60
    assert round_half_up(1.8 * 133) == 239


def test_format_date_range():
    assert format_date_range(date(2025, 3, 3), date(2025, 3, 3)) == "Mar 3, 2025"
    assert format_date_range(date(2025, 3, 3), date(2025, 3, 5)) == "Mar 3 - Mar 5, 2025"


def test_budget_style_scales_daily_share():
    plan = generate_plan(AIPlanRequest(
        destination="Goa",
        start_date=date(2025, 1, 1),
        end_date=date(2025, 1, 5),
        overall_budget=1000,
        style="budget",
    ))

    assert [s["budget"] for s in plan["sections"]] == [80] * 5
    assert plan["summary"]["budget_per_day"] == 80
    assert plan["summary"]["total_planned_budget"] == 400
    assert plan["summary"]["generated_sections"] == 5


def test_default_daily_budget_without_overall_budget():
    assert section_budget(None, 4, "balanced") == 150
    assert section_budget(0, 4, "luxury") == 270


def test_long_trip_is_split_into_five_sections_within_window():
    start = date(2025, 6, 1)
    plan = generate_plan(AIPlanRequest(destination="Kyoto", start_date=start, end_date=date(2025, 6, 12)))
    sections = plan["sections"]

    assert len(sections) == MAX_SECTIONS
    assert sections[0]["start_date"] == "2025-06-01"
    assert sections[-1]["end_date"] == "2025-06-12"
    assert sections[0]["title"] == "Days 1-3: Arrival in Kyoto"
    assert sections[-1]["title"] == "Days 11-12: Departure from Kyoto"
    assert sections[2]["title"] == "Days 7-8: Kyoto Exploration"
    assert all(s["all_day"] for s in sections)
    assert plan["summary"]["days"] == 12


def test_single_day_trip_has_only_arrival():
    plan = generate_plan(AIPlanRequest(
        destination="Bruges", start_date=date(2025, 9, 9), end_date=date(2025, 9, 9), start_time="09:30",
    ))

    assert len(plan["sections"]) == 1
    section = plan["sections"][0]
    assert section["title"] == "Day 1: Arrival in Bruges"
    assert "Suggested start time: 09:30" in section["description"]
    assert section["date_range"] == "Sep 9, 2025"


def test_days_override_sets_end_date():
    plan = generate_plan(AIPlanRequest(destination="Oslo", start_date=date(2025, 2, 1), days=3))

    assert plan["summary"]["end_date"] == "2025-02-03"
    assert len(plan["sections"]) == 3
    assert plan["sections"][-1]["title"] == "Day 3: Departure from Oslo"


def test_interest_tags_shape_descriptions():
    plan = generate_plan(AIPlanRequest(
        destination="Cape Town",
        start_date=date(2025, 10, 1),
        end_date=date(2025, 10, 3),
        suggestions=["Beach Paradise", "Food Tour"],
    ))
    arrival, exploration, _ = plan["sections"]

    assert "Try local cuisine" in arrival["description"]
    assert "Beach activities and water sports" in exploration["description"]
    assert "Culinary experiences and food tours" in exploration["description"]
    assert plan["summary"]["activities_sampled"] == 2


def test_request_requires_end_date_or_days():
    with pytest.raises(ValueError):
        AIPlanRequest(destination="Rome", start_date=date(2025, 1, 1))


def test_request_rejects_reversed_dates():
    with pytest.raises(ValueError, match="Invalid date range"):
        AIPlanRequest(destination="Rome", start_date=date(2025, 1, 5), end_date=date(2025, 1, 1))
