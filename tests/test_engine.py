import math

import pytest

from roomplan import (
    InsufficientVerticesError,
    InvalidConstraintError,
    PolygonConstraintEngine,
    SolverOptions,
)


SQUARE = [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)]
PENTAGON = [(0.0, 0.0), (2.0, 0.0), (3.0, 1.5), (1.0, 3.0), (-1.0, 1.5)]
CLOCKWISE_SQUARE = list(reversed(SQUARE))


def test_requires_three_vertices():
    with pytest.raises(InsufficientVerticesError):
        PolygonConstraintEngine([(0.0, 0.0), (1.0, 0.0)])


def test_measurements_of_unit_square():
    engine = PolygonConstraintEngine(SQUARE)
    result = engine.measurements()
    assert result.true_area == pytest.approx(1.0)
    assert result.true_perimeter == pytest.approx(4.0)
    assert result.carpet_area > result.true_area


def test_unconstrained_move_is_accepted_as_is():
    engine = PolygonConstraintEngine(SQUARE)
    result = engine.move_vertex(2, (1.5, 1.25))

    assert result.accepted
    assert result.converged
    assert result.vertices[2] == (1.5, 1.25)
    assert engine.vertices == result.vertices


def test_move_out_of_range_raises_index_error():
    engine = PolygonConstraintEngine(SQUARE)
    with pytest.raises(IndexError):
        engine.move_vertex(4, (0.0, 0.0))
    with pytest.raises(IndexError):
        engine.move_vertex(-1, (0.0, 0.0))


def test_fixed_length_edge_survives_dragging_its_endpoint():
    engine = PolygonConstraintEngine(SQUARE)
    scaled = engine.set_length_constraint(0, 1, 2.0)
    assert scaled.accepted
    assert scaled.vertices[1] == pytest.approx((2.0, 0.0))
    assert scaled.length_constraints == {(0, 1): 2.0}

    x, y = engine.vertices[1]
    result = engine.move_vertex(1, (x - 0.1, y))

    assert result.accepted
    assert engine.edge_length(0, 1) == pytest.approx(2.0, abs=1e-6)
    assert engine.vertices[1] == pytest.approx((2.0, 0.0))


@pytest.mark.parametrize(
    "index, target",
    [
        (2, (2.5, 1.7)),
        (3, (-0.4, 0.6)),
        (2, (0.1, 0.2)),
        (3, (3.0, -2.0)),
    ],
)
def test_fixed_length_holds_when_moving_other_vertices(index, target):
    engine = PolygonConstraintEngine(SQUARE)
    engine.set_length_constraint(0, 1, 2.0)
    result = engine.move_vertex(index, target)

    assert result.accepted
    assert math.dist(result.vertices[0], result.vertices[1]) == pytest.approx(2.0, abs=1e-6)


def test_fixed_length_holds_or_move_is_rejected_with_angles():
    engine = PolygonConstraintEngine(SQUARE)
    engine.set_length_constraint(0, 1, 1.0)
    engine.set_angle_constraint(2, 90.0)
    before = engine.vertices

    result = engine.move_vertex(3, (-0.3, 1.4))

    if result.accepted:
        assert engine.edge_length(0, 1) == pytest.approx(1.0, abs=1e-6)
        assert engine.interior_angle(2) == pytest.approx(90.0, abs=1e-3)
    else:
        assert engine.vertices == before
        assert result.reason


def test_angle_constraint_holds_when_moving_unrelated_vertex():
    engine = PolygonConstraintEngine(SQUARE)
    set_result = engine.set_angle_constraint(1, 60.0)
    assert set_result.accepted and set_result.converged
    assert engine.interior_angle(1) == pytest.approx(60.0, abs=1e-4)

    result = engine.move_vertex(3, (-0.2, 1.3))

    assert result.accepted
    assert result.converged
    assert engine.interior_angle(1) == pytest.approx(60.0, abs=1e-4)


def test_angle_constraint_rotates_far_neighbour_when_dragging_previous():
    engine = PolygonConstraintEngine(SQUARE, angle_constraints={1: 90.0})
    result = engine.move_vertex(0, (-0.5, 0.3))

    assert result.accepted and result.converged
    assert result.vertices[0] == (-0.5, 0.3)
    assert engine.interior_angle(1) == pytest.approx(90.0, abs=1e-4)


def test_angle_constraint_keeps_the_dragged_next_vertex_in_place():
    engine = PolygonConstraintEngine(SQUARE, angle_constraints={1: 90.0})
    result = engine.move_vertex(2, (1.3, 1.2))

    assert result.accepted and result.converged
    assert result.vertices[2] == (1.3, 1.2)
    assert result.vertices[0] != SQUARE[0]
    assert engine.interior_angle(1) == pytest.approx(90.0, abs=1e-4)


def test_infeasible_double_length_constraint_rejects_move():
    vertices = [(0.0, 0.0), (5.0, 1.0), (10.0, 0.0), (5.0, 5.0)]
    engine = PolygonConstraintEngine(vertices, length_constraints={(0, 1): 1.0, (1, 2): 2.0})

    result = engine.move_vertex(1, (5.0, 0.5))

    assert not result.accepted
    assert "vertex 1" in result.reason
    assert result.vertices == vertices
    assert engine.vertices == vertices


def test_double_length_constraint_snaps_to_nearest_intersection():
    engine = PolygonConstraintEngine(SQUARE, length_constraints={(0, 1): 1.0, (1, 2): 1.0})
    result = engine.move_vertex(1, (1.2, 0.1))

    assert result.accepted
    assert result.vertices[1] == pytest.approx((1.0, 0.0))


def test_move_breaking_a_committed_length_is_rolled_back():
    engine = PolygonConstraintEngine(
        SQUARE,
        angle_constraints={1: 90.0},
        length_constraints={(2, 3): 1.0},
    )
    result = engine.move_vertex(0, (-0.5, 0.3))

    assert not result.accepted
    assert "2-3" in result.reason
    assert engine.vertices == SQUARE
    assert engine.angle_constraints == {1: 90.0}


def test_set_angle_constraint_rolls_back_when_it_breaks_a_fixed_length():
    engine = PolygonConstraintEngine(SQUARE, length_constraints={(2, 3): 1.0})
    result = engine.set_angle_constraint(1, 60.0)

    assert not result.accepted
    assert result.angle_constraints == {}
    assert engine.angle_constraints == {}
    assert engine.vertices == SQUARE


def test_set_angle_constraint_with_both_edges_fixed_is_soft_conflict():
    engine = PolygonConstraintEngine(SQUARE, length_constraints={(0, 1): 1.0, (1, 2): 1.0})
    result = engine.set_angle_constraint(1, 60.0)

    assert result.accepted
    assert not result.converged
    assert [w.kind for w in result.warnings] == ["conflict"]
    assert engine.angle_constraints == {1: 60.0}
    assert engine.vertices == SQUARE


def test_non_convergent_move_returns_best_effort():
    triangle = [(0.0, 0.0), (1.0, 0.0), (0.0, 1.0)]
    engine = PolygonConstraintEngine(
        triangle,
        angle_constraints={0: 90.0, 1: 90.0, 2: 90.0},
        options=SolverOptions(max_iterations=3),
    )
    result = engine.move_vertex(0, (0.1, 0.1))

    assert result.accepted
    assert not result.converged
    assert result.warnings and result.warnings[0].kind == "iteration-cap"
    assert result.warnings[0].iterations == 3


@pytest.mark.parametrize("degrees", [0.0, 360.0, -5.0, 400.0, float("nan"), "abc"])
def test_set_angle_constraint_rejects_invalid_values(degrees):
    engine = PolygonConstraintEngine(SQUARE)
    with pytest.raises(InvalidConstraintError):
        engine.set_angle_constraint(1, degrees)
    assert engine.angle_constraints == {}


@pytest.mark.parametrize("meters", [0.0, -1.0, float("inf")])
def test_set_length_constraint_rejects_invalid_values(meters):
    engine = PolygonConstraintEngine(SQUARE)
    with pytest.raises(InvalidConstraintError):
        engine.set_length_constraint(0, 1, meters)
    assert engine.length_constraints == {}


def test_set_length_constraint_requires_adjacent_vertices():
    engine = PolygonConstraintEngine(SQUARE)
    with pytest.raises(InvalidConstraintError):
        engine.set_length_constraint(0, 2, 1.0)
    with pytest.raises(InvalidConstraintError):
        engine.set_length_constraint(1, 1, 1.0)


def test_set_length_constraint_key_is_order_independent():
    engine = PolygonConstraintEngine(SQUARE)
    engine.set_length_constraint(3, 0, 1.5)

    assert engine.length_constraints == {(0, 3): 1.5}
    assert engine.edge_length(0, 3) == pytest.approx(1.5)
    engine.clear_length_constraint(0, 3)
    assert engine.length_constraints == {}


def test_set_length_constraint_moves_free_endpoint():
    engine = PolygonConstraintEngine(SQUARE, length_constraints={(2, 3): 1.0})
    result = engine.set_length_constraint(1, 2, 2.0)

    assert result.accepted
    assert result.vertices[2] == SQUARE[2]
    assert result.vertices[1] == pytest.approx((1.0, -1.0))
    assert engine.edge_length(2, 3) == pytest.approx(1.0)


def test_set_length_constraint_on_coincident_vertices_scales_along_x():
    vertices = [(0.0, 0.0), (0.0, 0.0), (1.0, 1.0)]
    engine = PolygonConstraintEngine(vertices)
    result = engine.set_length_constraint(0, 1, 0.5)

    assert result.accepted
    assert result.vertices[1] == pytest.approx((0.5, 0.0))


def test_delete_vertex_rekeys_angle_constraints():
    engine = PolygonConstraintEngine(PENTAGON, angle_constraints={3: 100.0})
    result = engine.delete_vertex(2)

    assert result.accepted
    assert len(result.vertices) == 4
    assert result.angle_constraints == {2: 100.0}
    assert engine.angle_constraints == {2: 100.0}


def test_delete_vertex_drops_constraints_that_reference_it():
    engine = PolygonConstraintEngine(
        PENTAGON,
        angle_constraints={1: 95.0, 4: 120.0},
        length_constraints={(0, 1): 2.0, (1, 2): 1.8, (3, 4): 2.5},
    )
    engine.delete_vertex(1)

    assert engine.angle_constraints == {3: 120.0}
    assert engine.length_constraints == {(2, 3): 2.5}


def test_delete_vertex_on_triangle_is_refused():
    triangle = [(0.0, 0.0), (1.0, 0.0), (0.0, 1.0)]
    engine = PolygonConstraintEngine(triangle, angle_constraints={0: 90.0})
    with pytest.raises(InsufficientVerticesError):
        engine.delete_vertex(0)
    assert engine.vertices == triangle
    assert engine.angle_constraints == {0: 90.0}


def test_insert_vertex_shifts_later_constraints():
    engine = PolygonConstraintEngine(
        SQUARE,
        angle_constraints={0: 90.0, 2: 90.0},
        length_constraints={(2, 3): 1.0},
    )
    result = engine.insert_vertex(0, (0.5, -0.1))

    assert result.accepted
    assert result.vertices[1] == (0.5, -0.1)
    assert result.angle_constraints == {0: 90.0, 3: 90.0}
    assert result.length_constraints == {(3, 4): 1.0}


def test_insert_vertex_drops_length_on_split_edge():
    engine = PolygonConstraintEngine(SQUARE, length_constraints={(0, 1): 1.0, (0, 3): 1.0})
    engine.insert_vertex(3, (-0.2, 0.5))

    assert engine.length_constraints == {(0, 1): 1.0}
    assert len(engine) == 5


def test_vertex_ids_are_never_reused():
    engine = PolygonConstraintEngine(SQUARE)
    first = engine.vertex_ids
    engine.delete_vertex(3)
    engine.insert_vertex(2, (0.0, 1.0))

    ids = engine.vertex_ids
    assert len(set(ids)) == len(ids)
    assert first[3] not in ids


def test_clear_angle_constraint():
    engine = PolygonConstraintEngine(SQUARE, angle_constraints={1: 90.0, 2: 90.0})
    result = engine.clear_angle_constraint(1)

    assert result.accepted
    assert engine.angle_constraints == {2: 90.0}


def test_enforce_all_applies_loaded_constraints():
    engine = PolygonConstraintEngine(SQUARE, angle_constraints={1: 45.0})
    result = engine.enforce_all()

    assert result.accepted and result.converged
    assert engine.interior_angle(1) == pytest.approx(45.0, abs=1e-4)


def test_constructor_validates_constraints():
    with pytest.raises(InvalidConstraintError):
        PolygonConstraintEngine(SQUARE, angle_constraints={1: 0.0})
    with pytest.raises(InvalidConstraintError):
        PolygonConstraintEngine(SQUARE, length_constraints={(0, 2): 1.0})
    with pytest.raises(IndexError):
        PolygonConstraintEngine(SQUARE, angle_constraints={7: 90.0})


def test_enforce_all_scales_loaded_fixed_length_and_unblocks_edits():
    engine = PolygonConstraintEngine(SQUARE, length_constraints={(0, 1): 2.0})

    result = engine.enforce_all()

    assert result.accepted
    assert engine.edge_length(0, 1) == pytest.approx(2.0, abs=1e-6)
    assert engine.vertices[1] == pytest.approx((2.0, 0.0))

    moved = engine.move_vertex(3, (-0.2, 1.3))
    assert moved.accepted
    assert engine.edge_length(0, 1) == pytest.approx(2.0, abs=1e-6)


def test_enforce_all_scales_every_violated_edge():
    vertices = [(0.0, 0.0), (5.0, 1.0), (10.0, 0.0), (5.0, 5.0)]
    engine = PolygonConstraintEngine(vertices, length_constraints={(0, 1): 1.0, (1, 2): 2.0})

    result = engine.enforce_all()

    assert result.accepted
    assert engine.vertices[1] == vertices[1]
    assert engine.edge_length(0, 1) == pytest.approx(1.0, abs=1e-6)
    assert engine.edge_length(1, 2) == pytest.approx(2.0, abs=1e-6)


def test_interior_angle_of_clockwise_room():
    engine = PolygonConstraintEngine(CLOCKWISE_SQUARE)

    assert [engine.interior_angle(i) for i in range(4)] == pytest.approx([90.0] * 4)


def test_right_angle_on_clockwise_room_keeps_its_area():
    engine = PolygonConstraintEngine(CLOCKWISE_SQUARE)
    result = engine.set_angle_constraint(1, 90.0)

    assert result.accepted and result.converged
    assert engine.measurements().true_area == pytest.approx(1.0)


def test_set_angle_constraint_on_clockwise_room():
    engine = PolygonConstraintEngine(CLOCKWISE_SQUARE)
    result = engine.set_angle_constraint(1, 60.0)

    assert result.accepted and result.converged
    assert engine.interior_angle(1) == pytest.approx(60.0, abs=1e-4)
    assert engine.vertices[2] == pytest.approx((0.5, 1.0 - 3 ** 0.5 / 2))
    assert engine.measurements().true_area == pytest.approx(0.25 + 3 ** 0.5 / 4)
