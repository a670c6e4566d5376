"""Critical Path Method tests: worked chains, edge types and invariants."""

from __future__ import annotations

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from milestone_planner.analysis.critical_path import analyze_critical_path
from milestone_planner.analysis.graph import build_dependency_graph
from milestone_planner.domain.models import DependencyType, TaskDependency, TaskNode


def _node(task_id: str, hours: float) -> TaskNode:
    return TaskNode(id=task_id, title=task_id, estimated_hours=hours)


def _edge(
    predecessor: str,
    successor: str,
    kind: DependencyType = DependencyType.FINISH_TO_START,
    lag: float = 0.0,
) -> TaskDependency:
    return TaskDependency(
        predecessor_id=predecessor, successor_id=successor, dependency_type=kind, lag=lag
    )


def test_linear_chain_is_fully_critical() -> None:
    graph = build_dependency_graph(
        [_node("A", 4), _node("B", 3), _node("C", 2)],
        [_edge("A", "B"), _edge("B", "C")],
    )

    result = analyze_critical_path(graph)

    timings = {node.id: (node.earliest_start, node.earliest_finish) for node in graph}
    assert timings == {"A": (0.0, 4.0), "B": (4.0, 7.0), "C": (7.0, 9.0)}
    assert result.critical_path == ("A", "B", "C")
    assert result.duration == 9.0
    assert all(node.is_critical and node.slack == 0.0 for node in graph)


def test_branch_with_slack_is_off_the_critical_path() -> None:
    graph = build_dependency_graph(
        [_node("A", 4), _node("B", 3), _node("X", 1), _node("C", 2)],
        [_edge("A", "B"), _edge("B", "C"), _edge("A", "X"), _edge("X", "C")],
    )

    result = analyze_critical_path(graph)

    side = graph.node("X")
    assert (side.earliest_start, side.latest_start, side.slack) == (4.0, 6.0, 2.0)
    assert side.is_critical is False
    assert result.critical_path == ("A", "B", "C")
    assert result.critical_tasks == frozenset({"A", "B", "C"})


@pytest.mark.parametrize(
    ("kind", "lag", "expected_start"),
    [
        (DependencyType.FINISH_TO_START, 1.0, 5.0),
        (DependencyType.START_TO_START, 1.0, 1.0),
        (DependencyType.FINISH_TO_FINISH, 0.0, 2.0),
        (DependencyType.START_TO_FINISH, 3.0, 1.0),
    ],
)
def test_dependency_types_shift_successor_start(
    kind: DependencyType, lag: float, expected_start: float
) -> None:
    graph = build_dependency_graph([_node("P", 4), _node("S", 2)], [_edge("P", "S", kind, lag)])

    analyze_critical_path(graph)

    assert graph.node("S").earliest_start == expected_start
    assert graph.node("S").earliest_finish == expected_start + 2.0


@pytest.mark.parametrize(
    ("kind", "lag", "successor_start", "predecessor_latest_finish"),
    [
        (DependencyType.FINISH_TO_START, 1.0, 5.0, 5.0),
        (DependencyType.FINISH_TO_START, -1.0, 3.0, 7.0),
        (DependencyType.START_TO_START, 1.0, 1.0, 9.0),
        (DependencyType.START_TO_START, -1.0, 0.0, 11.0),
        (DependencyType.FINISH_TO_FINISH, 3.0, 1.0, 9.0),
        (DependencyType.FINISH_TO_FINISH, -1.0, 0.0, 12.0),
        (DependencyType.START_TO_FINISH, 8.0, 2.0, 8.0),
        (DependencyType.START_TO_FINISH, -1.0, 0.0, 12.0),
    ],
)
def test_backward_pass_mirrors_each_dependency_type(
    kind: DependencyType,
    lag: float,
    successor_start: float,
    predecessor_latest_finish: float,
) -> None:
    graph = build_dependency_graph(
        [_node("P", 4), _node("S", 6), _node("Z", 12)], [_edge("P", "S", kind, lag)]
    )

    result = analyze_critical_path(graph)

    predecessor, successor = graph.node("P"), graph.node("S")
    assert result.duration == 12.0
    assert successor.earliest_start == successor_start
    assert (successor.latest_start, successor.latest_finish) == (6.0, 12.0)
    assert predecessor.latest_finish == predecessor_latest_finish
    assert predecessor.latest_start == predecessor_latest_finish - 4.0
    assert predecessor.slack == predecessor_latest_finish - 4.0
    assert result.critical_path == ("Z",)


def test_lead_lets_successor_overlap_its_predecessor() -> None:
    graph = build_dependency_graph(
        [_node("A", 4), _node("B", 3)], [_edge("A", "B", lag=-1.5)]
    )

    result = analyze_critical_path(graph)

    assert graph.node("B").earliest_start == 2.5
    assert result.duration == 5.5
    assert result.critical_path == ("A", "B")


def test_negative_constraint_clamps_start_at_zero() -> None:
    graph = build_dependency_graph(
        [_node("P", 1), _node("S", 5)], [_edge("P", "S", DependencyType.FINISH_TO_FINISH)]
    )

    analyze_critical_path(graph)

    assert graph.node("S").earliest_start == 0.0


def test_soft_edges_are_ignored_unless_requested() -> None:
    soft = TaskDependency(predecessor_id="A", successor_id="B", is_hard=False)
    graph = build_dependency_graph([_node("A", 4), _node("B", 3)], [soft])

    assert analyze_critical_path(graph).duration == 4.0
    assert graph.node("B").earliest_start == 0.0

    assert analyze_critical_path(graph, include_soft=True).duration == 7.0
    assert graph.node("B").earliest_start == 4.0


def test_long_chain_does_not_hit_recursion_limits() -> None:
    size = 10_000
    nodes = [_node(f"t{index}", 1.0) for index in range(size)]
    edges = [_edge(f"t{index}", f"t{index + 1}") for index in range(size - 1)]
    graph = build_dependency_graph(nodes, edges)

    result = analyze_critical_path(graph)

    assert result.duration == float(size)
    assert len(result.critical_path) == size


@st.composite
def _dags(draw: st.DrawFn) -> tuple[list[TaskNode], list[TaskDependency]]:
    count = draw(st.integers(min_value=1, max_value=12))
    hours = draw(
        st.lists(
            st.floats(min_value=0.25, max_value=40, allow_nan=False),
            min_size=count,
            max_size=count,
        )
    )
    nodes = [_node(f"t{index}", hours[index]) for index in range(count)]
    edges: list[TaskDependency] = []
    for successor in range(1, count):
        predecessors = draw(
            st.lists(st.integers(min_value=0, max_value=successor - 1), unique=True, max_size=3)
        )
        kind = draw(st.sampled_from(list(DependencyType)))
        lag = draw(st.sampled_from([-3.0, -0.5, 0.0, 0.5, 2.0]))
        edges.extend(_edge(f"t{index}", f"t{successor}", kind, lag) for index in predecessors)
    return nodes, edges


@given(_dags())
@settings(max_examples=60, deadline=None)
def test_timing_invariants_hold_for_random_dags(
    dag: tuple[list[TaskNode], list[TaskDependency]],
) -> None:
    nodes, edges = dag
    graph = build_dependency_graph(nodes, edges)

    result = analyze_critical_path(graph)

    assert result.duration == max(node.earliest_finish for node in graph)
    for node in graph:
        assert node.earliest_start >= 0.0
        assert node.earliest_finish == pytest.approx(node.earliest_start + node.estimated_hours)
        assert node.latest_finish == pytest.approx(node.latest_start + node.estimated_hours)
        assert node.slack >= 0.0
        assert node.is_critical == (node.slack <= 1e-9)
    assert any(node.is_critical for node in graph)
    for edge in edges:
        predecessor, successor = graph.node(edge.predecessor_id), graph.node(edge.successor_id)
        assert successor.earliest_start >= _forward_bound(edge, predecessor, successor) - 1e-9
        assert predecessor.latest_finish <= _backward_bound(edge, predecessor, successor) + 1e-9
        assert predecessor.latest_finish >= predecessor.earliest_finish - 1e-9


def _forward_bound(edge: TaskDependency, predecessor: TaskNode, successor: TaskNode) -> float:
    if edge.dependency_type is DependencyType.FINISH_TO_START:
        return predecessor.earliest_finish + edge.lag
    if edge.dependency_type is DependencyType.START_TO_START:
        return predecessor.earliest_start + edge.lag
    if edge.dependency_type is DependencyType.FINISH_TO_FINISH:
        return predecessor.earliest_finish + edge.lag - successor.estimated_hours
    return predecessor.earliest_start + edge.lag - successor.estimated_hours


def _backward_bound(edge: TaskDependency, predecessor: TaskNode, successor: TaskNode) -> float:
    if edge.dependency_type is DependencyType.FINISH_TO_START:
        return successor.latest_start - edge.lag
    if edge.dependency_type is DependencyType.START_TO_START:
        return successor.latest_start - edge.lag + predecessor.estimated_hours
    if edge.dependency_type is DependencyType.FINISH_TO_FINISH:
        return successor.latest_finish - edge.lag
    return successor.latest_finish - edge.lag + predecessor.estimated_hours
