"""Behaviour tests for document assembly using pytest-bdd.

These scenarios drive :class:`DocumentAssembler` end to end with the fake
layout engine from ``tests/conftest.py``, so page counts are dictated by the
fragments and no native layout libraries are needed.

Usage
-----
Run ``pytest tests/bdd/test_assembly_scenarios.py -v`` to execute only these
scenarios. The feature file lives at ``features/assembly.feature``.
"""

from __future__ import annotations

import io
import typing as typ
from pathlib import Path

import pytest
from conftest import (
    FakeLayoutEngine,
    StaticContentFetcher,
    TripAfter,
    entry,
    page_html,
)
from pytest_bdd import given, scenarios, then, when

from bookbinder.assembly import DocumentAssembler
from bookbinder.errors import BuildError, CancellationFault, ContentFetchError

if typ.TYPE_CHECKING:
    from bookbinder.assembly import OutlineNode
    from bookbinder.content import SummaryEntry

FEATURE_FILE = Path(__file__).resolve().parents[2] / "features" / "assembly.feature"
scenarios(FEATURE_FILE)

ScenarioState = dict[str, typ.Any]


@pytest.fixture
def scenario_state() -> ScenarioState:
    """Share mutable scenario data across pytest-bdd steps."""
    return {"engine": FakeLayoutEngine(), "pages": {}}


@given("a summary tree A with children B and C followed by D")
def given_sample_tree(scenario_state: ScenarioState) -> None:
    scenario_state["entries"] = (entry("a", entry("b"), entry("c")), entry("d"))
    scenario_state["pages"].update(
        {page_id: page_html(page_id.upper()) for page_id in "abcd"}
    )


@given("pages A, B, C and D span 1, 2, 1 and 1 pages")
def given_page_counts(scenario_state: ScenarioState) -> None:
    scenario_state["pages"]["b"] = page_html("B", pages=2)


@given("page C cannot be fetched")
def given_missing_page(scenario_state: ScenarioState) -> None:
    del scenario_state["pages"]["c"]


@given("a single summary entry spanning 5 pages")
def given_long_entry(scenario_state: ScenarioState) -> None:
    scenario_state["entries"] = (entry("long"),)
    scenario_state["pages"]["long"] = page_html("Long", pages=5)


@given("the build is cancelled after 2 pages of that entry")
def given_cancellation(scenario_state: ScenarioState) -> None:
    scenario_state["cancel"] = TripAfter(scenario_state["engine"], 2, part_id="long")


@when("I assemble the document")
def when_assemble(scenario_state: ScenarioState) -> None:
    """Run the assembler and record its result or failure."""
    engine = typ.cast("FakeLayoutEngine", scenario_state["engine"])
    entries = typ.cast("tuple[SummaryEntry, ...]", scenario_state["entries"])
    assembler = DocumentAssembler(
        StaticContentFetcher(scenario_state["pages"]),
        engine,
        package="acme",
        title="Guide",
        cancel=scenario_state.get("cancel"),
    )
    buffer = io.BytesIO()
    scenario_state["assembler"] = assembler
    scenario_state["buffer"] = buffer
    try:
        scenario_state["total"] = assembler.build(entries, buffer)
    except BuildError as exc:
        scenario_state["error"] = exc


@then("the document has 7 pages")
def then_seven_pages(scenario_state: ScenarioState) -> None:
    assert "error" not in scenario_state, scenario_state.get("error")
    assert scenario_state["total"] == 7


@then("the parts start on pages 3, 4, 6 and 7")
def then_part_starts(scenario_state: ScenarioState) -> None:
    assembler = typ.cast("DocumentAssembler", scenario_state["assembler"])
    assert [part.start_page_number for part in assembler.parts] == [3, 4, 6, 7]


@then("the bookmarks mirror the tree with A at 3, B at 4, C at 6 and D at 7")
def then_bookmarks(scenario_state: ScenarioState) -> None:
    assembler = typ.cast("DocumentAssembler", scenario_state["assembler"])
    root = typ.cast("OutlineNode", assembler.outline)
    a, d = root.children
    assert (a.title, a.page_number, d.title, d.page_number) == ("A", 3, "D", 7)
    assert [(node.title, node.page_number) for node in a.children] == [
        ("B", 4),
        ("C", 6),
    ]


@then("the build fails with a content fetch error")
def then_fetch_error(scenario_state: ScenarioState) -> None:
    assert isinstance(scenario_state.get("error"), ContentFetchError)


@then("the build fails with a cancellation fault")
def then_cancellation(scenario_state: ScenarioState) -> None:
    assert isinstance(scenario_state.get("error"), CancellationFault)


@then("no bytes were written")
def then_no_bytes(scenario_state: ScenarioState) -> None:
    buffer = typ.cast("io.BytesIO", scenario_state["buffer"])
    assert buffer.getvalue() == b""


@then("page 3 of that entry was never painted")
def then_page_three_unpainted(scenario_state: ScenarioState) -> None:
    engine = typ.cast("FakeLayoutEngine", scenario_state["engine"])
    painted = [call.index for call in engine.painted if call.part_anchor == "long"]
    assert painted == [0, 1]
